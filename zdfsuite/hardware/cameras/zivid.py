"""
**(Untested)** Hardware control for Zivid structured-light 3D cameras via the :mod:`zivid`
interface. Install the Zivid SDK (see `downloads <https://www.zivid.com/downloads>`_)
and then the python wrapper with ``pip install zivid``.
"""
import warnings

import numpy as np

from zdfsuite.hardware.cameras.camera import Camera
from zdfsuite.hardware.cameras.frame import Frame

try:
    import zivid
    import zivid.hdr
except ImportError:
    zivid = None
    warnings.warn("zivid not installed. Install to use Zivid cameras.")


class Zivid(Camera):
    """
    Interface to Zivid cameras.

    Attributes
    ----------
    sdk : zivid.Application
        Application context required by the SDK before any camera can be used.
        Shared by all instances and kept for the lifetime of the process
        unless :meth:`close_sdk()` is called.
    cam : zivid.Camera
        Object used to communicate with the camera.
    """

    # Class variable (same for all instances of Zivid) pointing to a singleton SDK.
    sdk = None

    def __init__(self, serial="", resolution=(1920, 1200), verbose=True, **kwargs):
        """
        Initialize Zivid camera and attributes.

        Parameters
        ----------
        serial : str
            Serial number of the camera to open.
            If empty, defaults to the first camera found by the SDK.
        resolution : (int, int)
            ``(width, height)`` of the sensor. The SDK does not report this before
            the first capture, so it is passed in. Defaults to the Zivid One.
        verbose : bool
            Whether or not to print extra information.
        kwargs
            See :meth:`.Camera.__init__` for permissible options.
        """
        if zivid is None:
            raise ImportError("zivid not installed. Install to use Zivid cameras.")

        if Zivid.sdk is None:
            if verbose:
                print("Zivid SDK initializing... ", end="")
            Zivid.sdk = zivid.Application()
            if verbose:
                print("success")

        if verbose:
            print("Looking for cameras... ", end="")
        serial_list = [str(cam.serial_number) for cam in Zivid.sdk.cameras()]
        if verbose:
            print("success")

        if serial == "":
            if len(serial_list) == 0:
                raise RuntimeError("No cameras found by the Zivid SDK.")
            if len(serial_list) > 1 and verbose:
                print("No serial given... Choosing first of ", serial_list)
            serial = serial_list[0]
        elif serial not in serial_list:
            raise RuntimeError(
                f"Serial {serial} not found by the Zivid SDK. Available: {serial_list}"
            )

        if verbose:
            print(f"Zivid sn '{serial}' initializing... ", end="")
        self.cam = Zivid.sdk.connect_camera(serial_number=serial)

        super().__init__(resolution, serial=serial, name=serial, **kwargs)

        if verbose:
            print("success")

    def close(self, close_sdk=False):
        """
        See :meth:`.Camera.close`.

        Parameters
        ----------
        close_sdk : bool
            Whether to also release the application context stored in :attr:`sdk`.
            Other :class:`Zivid` instances become unusable if this is done.
        """
        self.cam.release()
        del self.cam

        if close_sdk:
            self.close_sdk()

    @staticmethod
    def info(verbose=True):
        """
        Discovers all cameras detected by the SDK.
        Useful for a user to identify the correct serial numbers / etc.

        Parameters
        ----------
        verbose : bool
            Whether to print the discovered information.

        Returns
        --------
        list of str
            List of serial numbers.
        """
        if zivid is None:
            raise ImportError("zivid not installed. Install to use Zivid cameras.")

        if Zivid.sdk is None:
            Zivid.sdk = zivid.Application()
            close_sdk = True
        else:
            close_sdk = False

        serial_list = [str(cam.serial_number) for cam in Zivid.sdk.cameras()]

        if verbose:
            print("Zivid cameras:")
            for serial in serial_list:
                print("\"{}\"".format(serial))

        if close_sdk:
            Zivid.close_sdk()

        return serial_list

    @classmethod
    def close_sdk(cls):
        """
        Release the :mod:`zivid` application context.
        """
        if cls.sdk is not None:
            cls.sdk.release()
            cls.sdk = None

    ### Settings Conversion ###

    @staticmethod
    def _to_sdk_settings(settings):
        """Converts :class:`~zdfsuite.hardware.cameras.settings.Settings` to ``zivid.Settings``."""
        filters = settings.filters
        sdk_filters = zivid.Settings.Filters

        return zivid.Settings(
            brightness=settings.brightness,
            bidirectional=settings.bidirectional,
            blue_balance=settings.blue_balance,
            red_balance=settings.red_balance,
            iris=settings.iris,
            exposure_time=settings.exposure_time,
            gain=settings.gain,
            filters=sdk_filters(
                contrast=sdk_filters.Contrast(
                    enabled=filters.contrast.enabled,
                    threshold=filters.contrast.threshold,
                ),
                gaussian=sdk_filters.Gaussian(
                    enabled=filters.gaussian.enabled,
                    sigma=filters.gaussian.sigma,
                ),
                outlier=sdk_filters.Outlier(
                    enabled=filters.outlier.enabled,
                    threshold=filters.outlier.threshold,
                ),
                reflection=sdk_filters.Reflection(enabled=filters.reflection.enabled),
                saturated=sdk_filters.Saturated(enabled=filters.saturated.enabled),
            ),
        )

    ### Capture ###

    def _capture_hw(self, settings):
        """See :meth:`.Camera._capture_hw`."""
        with self.cam.update_settings() as updater:
            updater.settings = self._to_sdk_settings(settings)

        return ZividFrame(self.cam.capture(), [settings], name=self.name)

    def _capture_hdr_hw(self, settings_list):
        """See :meth:`.Camera._capture_hdr_hw`. The SDK merges the bracket."""
        sdk_settings = [self._to_sdk_settings(settings) for settings in settings_list]

        return ZividFrame(
            zivid.hdr.capture(self.cam, sdk_settings),
            settings_list,
            name=f"{self.name}-hdr",
        )


class ZividFrame:
    """
    Frame held by the Zivid SDK.

    Saving uses the SDK's native serialization, so ``.zdf`` files written from here are
    readable by Zivid Studio. Use :meth:`to_frame()` to bring the data into numpy.

    Attributes
    ----------
    frame : zivid.Frame
        The SDK handle.
    settings : list of Settings
        The settings that produced this frame, in capture order.
    name : str
        Identifier of the frame.
    """

    def __init__(self, frame, settings, name="frame"):
        self.frame = frame
        self.settings = list(settings)
        self.name = str(name)

    def save(self, path):
        """
        Saves the frame through the SDK. The SDK picks the format from the extension
        (e.g. ``.zdf``, ``.ply``). An existing file at ``path`` is overwritten.

        Parameters
        ----------
        path : str
            Destination file.
        """
        self.frame.save(str(path))

    def to_frame(self):
        """
        Copies the point cloud out of the SDK.

        Returns
        -------
        ~zdfsuite.hardware.cameras.frame.Frame
            The same data as numpy arrays.
        """
        cloud = self.frame.get_point_cloud().to_array()

        xyz = np.dstack([cloud["x"], cloud["y"], cloud["z"]])
        rgb = np.dstack([cloud["r"], cloud["g"], cloud["b"]])

        return Frame(xyz, rgb, cloud["contrast"], settings=self.settings, name=self.name)

    def pickle(self, attributes=True, metadata=True):
        """See :meth:`~zdfsuite.hardware._Picklable.pickle`."""
        return self.to_frame().pickle(attributes=attributes, metadata=metadata)

    def release(self):
        """Frees the SDK's memory for this frame."""
        self.frame.release()
