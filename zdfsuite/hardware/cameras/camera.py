"""
Abstract camera functionality.
"""
import warnings

from tqdm import tqdm

from zdfsuite.hardware import _Picklable
from zdfsuite.hardware.cameras.frame import merge_hdr
from zdfsuite.hardware.cameras.settings import Settings


class Camera(_Picklable):
    """
    Abstract class for structured-light 3D cameras.
    Comes with settings validation and multi-exposure HDR capture.

    Attributes
    ----------
    name : str
        Camera identifier.
    serial : str
        Serial number reported by the hardware, or ``""`` if unknown.
    shape : (int, int)
        Stores ``(height, width)`` of the camera in pixels, the same convention as
        :meth:`numpy.shape`.
    settings : Settings
        Settings used by :meth:`capture()` when none are given.
    last_frame : Frame OR None
        Last captured frame. Is ``None`` if no frame has ever been taken.
    """
    _pickle = [
        "name",
        "serial",
        "shape",
        "settings",
    ]
    _pickle_data = [
        "last_frame",
    ]

    def __init__(self, resolution, serial="", name="camera", settings=None):
        """
        Initializes a camera.

        Parameters
        ----------
        resolution
            The width and height of the camera in ``(width, height)`` form.

            Important
            ~~~~~~~~~
            This is the opposite of the numpy ``(height, width)``
            convention stored in :attr:`shape`.
        serial : str
            See :attr:`serial`.
        name : str
            Defaults to ``"camera"``.
        settings : Settings OR None
            See :attr:`settings`. If ``None``, uses default :class:`Settings`.
        """
        (width, height) = resolution
        self.shape = (int(height), int(width))

        self.serial = str(serial)
        self.name = str(name)

        if settings is None:
            settings = Settings()
        if not isinstance(settings, Settings):
            raise TypeError(f"Expected Settings, found {type(settings)}.")
        self.settings = settings.copy()

        self.last_frame = None

    # Core methods - to be implemented by subclass.

    def close(self):
        """
        Abstract method to close the camera and delete related objects.
        """
        raise NotImplementedError()

    @staticmethod
    def info(verbose=True):
        """
        Abstract method to load information about what cameras are available.

        Parameters
        ----------
        verbose : bool
            Whether or not to print display information.

        Returns
        -------
        list
            An empty list.
        """
        if verbose:
            print(".info() NotImplemented.")
        return []

    def _capture_hw(self, settings):
        """
        Abstract method to capture a single frame with the given settings.

        Parameters
        ----------
        settings : Settings
            Validated settings for this acquisition.

        Returns
        -------
        Frame
            The captured frame.
        """
        raise NotImplementedError(f"Camera {self.name} has not implemented _capture_hw")

    def _capture_hdr_hw(self, settings_list):
        """
        Abstract method to capture and merge an HDR bracket using camera-specific
        features. If not implemented, :meth:`capture_hdr()` captures each frame with
        :meth:`_capture_hw()` and merges them with
        :meth:`~zdfsuite.hardware.cameras.frame.merge_hdr()`.

        Parameters
        ----------
        settings_list : list of Settings
            Validated settings, one per frame, in capture order.

        Returns
        -------
        Frame
            The merged frame.
        """
        raise NotImplementedError(f"Camera {self.name} has not implemented _capture_hdr_hw")

    # Capture methods one level of abstraction above the hardware.

    def capture(self, settings=None):
        """
        Capture a single frame.

        Parameters
        ----------
        settings : Settings OR None
            Settings for this acquisition. If ``None``, :attr:`settings` is used.

        Returns
        -------
        Frame
            The captured frame.
        """
        if settings is None:
            settings = self.settings
        if not isinstance(settings, Settings):
            raise TypeError(f"Expected Settings, found {type(settings)}.")
        settings.validate()

        frame = self._capture_hw(settings.copy())
        self.last_frame = frame

        return frame

    def capture_hdr(self, settings_list, verbose=False):
        """
        Capture a `multi-exposure High Dynamic Range (HDR)
        <https://en.wikipedia.org/wiki/Multi-exposure_HDR_capture>`_ frame.
        One frame is acquired per entry of ``settings_list``, in order, and the
        results are merged into a single frame.

        Parameters
        ----------
        settings_list : list of Settings
            The HDR bracket. See :meth:`~zdfsuite.hardware.cameras.settings.make_hdr_settings()`.
        verbose : bool
            Whether to display a :mod:`tqdm` progress bar when frames are captured
            one by one.

        Returns
        -------
        Frame
            The merged frame. :attr:`~zdfsuite.hardware.cameras.frame.Frame.settings`
            holds the full bracket.
        """
        if isinstance(settings_list, Settings):
            raise TypeError("Expected a list of Settings for HDR, found a single Settings.")
        settings_list = list(settings_list)
        if len(settings_list) == 0:
            raise ValueError("HDR capture requires at least one Settings.")
        for i, settings in enumerate(settings_list):
            if not isinstance(settings, Settings):
                raise TypeError(f"Expected Settings for frame {i}, found {type(settings)}.")
            settings.validate()

        settings_list = [settings.copy() for settings in settings_list]

        if len(settings_list) == 1:
            warnings.warn(f"'{self.name}' HDR capture with a single frame.")

        try:
            frame = self._capture_hdr_hw(settings_list)
        except NotImplementedError:
            iterator = tqdm(settings_list) if verbose else settings_list
            frames = [self._capture_hw(settings) for settings in iterator]
            frame = merge_hdr(frames, name=f"{self.name}-hdr")

        self.last_frame = frame

        return frame
