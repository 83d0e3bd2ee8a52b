"""
Simulated structured-light camera imaging a synthetic scene.
"""
import cv2
import numpy as np
from scipy.ndimage import binary_erosion, median_filter

from zdfsuite.hardware.cameras.camera import Camera
from zdfsuite.hardware.cameras.frame import Frame

# Raw response of the color channels; the white balance gains compensate for it.
_CHANNEL_RESPONSE = np.array([0.585, 1.0, 0.925])

# Signal reference: iris 22, 10 ms, unity gain and brightness.
_REFERENCE_IRIS = 22.0
_REFERENCE_EXPOSURE_US = 10000.0

# Depth error of points hit by the specular patch.
_REFLECTION_ERROR_MM = 15.0


class SimulatedCamera(Camera):
    r"""
    Simulated camera.

    Renders a synthetic scene for each :class:`~zdfsuite.hardware.cameras.settings.Settings`.
    The scene's reflectance spans a wide range, so that no single exposure
    captures every point: dark regions fall below the contrast threshold while bright
    regions saturate. This makes the simulated camera a testbed for HDR capture.

    The measured signal of a pixel is

    .. math:: s = r \times \frac{t}{10\,\text{ms}} \times g \times \left(\frac{i}{22}\right)^2 \times b

    for reflectance :math:`r`, exposure time :math:`t`, gain :math:`g`, iris :math:`i`, and
    brightness :math:`b`. Signals of 1 or more saturate. Contrast is :math:`100 s`
    for unsaturated pixels and 0 for saturated pixels. Depth noise falls with contrast.

    Attributes
    ----------
    scene : dict
        Dictionary of ``(height, width)`` arrays:
        ``"z"``, the depth in millimeters;
        ``"reflectance"``, the fraction of projected light returned; and
        ``"reflection"``, a boolean mask of points corrupted by specular reflection.
    focal_length : float
        Pinhole focal length in pixels, used to compute ``x`` and ``y``.
    noise : bool
        Whether to add depth noise.
    rng : numpy.random.Generator
        Source of depth noise.
    """

    def __init__(
        self,
        resolution=(320, 240),
        scene=None,
        noise=True,
        seed=None,
        focal_length=None,
        serial="simulated",
        name="simulated",
        **kwargs
    ):
        """
        Initialize simulated camera.

        Parameters
        ----------
        resolution : (int, int)
            ``(width, height)`` of the simulated sensor.
        scene : dict OR None
            See :attr:`scene`. If ``None``, uses :meth:`make_scene()`.
        noise : bool
            See :attr:`noise`.
        seed : int OR None
            Seed for :attr:`rng`.
        focal_length : float OR None
            See :attr:`focal_length`. Defaults to the sensor width.
        serial, name : str
            See :class:`~zdfsuite.hardware.cameras.camera.Camera`.
        **kwargs
            See :meth:`.Camera.__init__` for permissible options.
        """
        super().__init__(resolution, serial=serial, name=name, **kwargs)

        if scene is None:
            scene = self.make_scene(self.shape)
        for key in ("z", "reflectance", "reflection"):
            if key not in scene:
                raise ValueError(f"Scene is missing '{key}'.")
            if np.shape(scene[key]) != self.shape:
                raise ValueError(
                    f"Expected scene '{key}' of shape {self.shape}. Found {np.shape(scene[key])}."
                )
        self.scene = {
            "z": np.asarray(scene["z"], dtype=float),
            "reflectance": np.asarray(scene["reflectance"], dtype=float),
            "reflection": np.asarray(scene["reflection"], dtype=bool),
        }

        self.focal_length = float(self.shape[1] if focal_length is None else focal_length)
        self.noise = bool(noise)
        self.rng = np.random.default_rng(seed)

        self._open = True

    def close(self):
        """See :meth:`.Camera.close`."""
        self._open = False

    @staticmethod
    def info(verbose=True):
        """
        The simulated camera is always available.

        Parameters
        ----------
        verbose : bool
            Whether to print the discovered information.

        Returns
        --------
        list of str
            ``["simulated"]``.
        """
        if verbose:
            print("Simulated cameras:")
            print("\"simulated\"")
        return ["simulated"]

    @staticmethod
    def make_scene(shape):
        """
        Builds the default scene: a tilted plane at about 600 mm with a bump
        towards the camera, a reflectance which rises from 2% on the left to 100% on
        the right, and a small specular patch.

        Parameters
        ----------
        shape : (int, int)
            ``(height, width)`` of the scene.

        Returns
        -------
        dict
            See :attr:`scene`.
        """
        (height, width) = shape
        v, u = np.indices(shape, dtype=float)
        u /= max(width - 1, 1)
        v /= max(height - 1, 1)

        bump = np.exp(-((u - 0.5) ** 2 + (v - 0.5) ** 2) / (2 * 0.1 ** 2))
        z = 600 + 50 * u + 20 * v - 30 * bump

        reflectance = 0.02 + 0.98 * u ** 2
        reflection = (np.abs(u - 0.75) < 0.05) & (np.abs(v - 0.5) < 0.05)

        return {"z": z, "reflectance": reflectance, "reflection": reflection}

    def signal(self, settings):
        """
        Normalized sensor signal for the given settings, before saturation.

        Parameters
        ----------
        settings : Settings
            Acquisition settings.

        Returns
        -------
        numpy.ndarray
            Array of shape :attr:`shape`.
        """
        scale = (
            (settings.exposure_time_us / _REFERENCE_EXPOSURE_US)
            * settings.gain
            * (settings.iris / _REFERENCE_IRIS) ** 2
            * settings.brightness
        )
        return self.scene["reflectance"] * scale

    def _capture_hw(self, settings):
        """See :meth:`.Camera._capture_hw`."""
        if not self._open:
            raise RuntimeError(f"Camera '{self.name}' is closed.")

        filters = settings.filters
        signal = self.signal(settings)
        saturated = signal >= 1
        contrast = np.where(saturated, 0, 100 * signal)

        z = self.scene["z"].copy()
        if self.noise:
            sigma_mm = 2 / np.sqrt(np.maximum(contrast, 0.5))
            if settings.bidirectional:
                sigma_mm /= np.sqrt(2)
            z += sigma_mm * self.rng.standard_normal(self.shape)
        z[self.scene["reflection"]] += _REFLECTION_ERROR_MM

        valid = signal > 0
        if filters.saturated.enabled:
            valid &= ~saturated
        if filters.contrast.enabled:
            valid &= contrast >= filters.contrast.threshold
        if filters.outlier.enabled:
            valid &= np.abs(z - median_filter(z, size=3, mode="nearest")) <= filters.outlier.threshold
        if filters.reflection.enabled:
            valid &= ~self.scene["reflection"]

        if filters.gaussian.enabled:
            z = self._smooth(z, valid, filters.gaussian.sigma)

        z[~valid] = np.nan

        (height, width) = self.shape
        v, u = np.indices(self.shape, dtype=float)
        x = (u - (width - 1) / 2) * z / self.focal_length
        y = (v - (height - 1) / 2) * z / self.focal_length
        xyz = np.stack((x, y, z), axis=2)

        balance = np.array([settings.red_balance, 1.0, settings.blue_balance])
        rgb = 255 * np.clip(signal[:, :, np.newaxis] * _CHANNEL_RESPONSE * balance, 0, 1)
        rgb = np.rint(rgb).astype(np.uint8)

        return Frame(xyz, rgb, contrast, settings=settings, name=self.name)

    @staticmethod
    def _smooth(z, valid, sigma):
        """
        Gaussian smoothing of ``z``. Points whose kernel reaches an invalid point or the
        image border keep their raw depth, so edges are never pulled to one side.
        """
        radius = int(np.ceil(3 * sigma))
        ksize = (2 * radius + 1, 2 * radius + 1)
        interior = binary_erosion(valid, structure=np.ones(ksize, dtype=bool), border_value=0)

        return np.where(interior, cv2.GaussianBlur(z, ksize, sigma), z)
