"""
Acquisition settings for structured-light 3D cameras.

Settings are value-like records: :meth:`~_Record.copy()` returns an independent deep copy,
``==`` compares every field, and :meth:`~_Picklable.pickle()` / :meth:`~_Record.from_dict()`
convert to and from the nested dictionaries stored in .h5 and .zdf files.

An HDR capture consumes an ordered list of :class:`Settings`, one per exposure.
:meth:`make_hdr_settings()` builds such a bracket from a shared baseline.
"""
import copy
import datetime

from zdfsuite.hardware import _Picklable
from zdfsuite.misc.math import INTEGER_TYPES, FLOAT_TYPES, in_range


class _Record(_Picklable):
    """
    Base class for settings records.

    Subclasses list their fields and default values in :attr:`_fields`.
    Keyword arguments to the constructor override the defaults.
    """
    _fields = {}

    def __init__(self, **kwargs):
        for key, default in self._fields.items():
            setattr(self, key, copy.deepcopy(default))

        for key, value in kwargs.items():
            if key not in self._fields:
                raise TypeError(
                    f"{self.__class__.__name__} got an unexpected setting '{key}'."
                )
            setattr(self, key, value)

    @property
    def _pickle(self):
        return list(self._fields.keys())

    def copy(self):
        """Returns an independent deep copy of this record."""
        return copy.deepcopy(self)

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return all(getattr(self, k) == getattr(other, k) for k in self._fields)

    __hash__ = None

    def _lines(self, indent=0):
        pad = "  " * indent
        lines = [f"{pad}{self.__class__.__name__}:"]
        for key in self._fields:
            value = getattr(self, key)
            if isinstance(value, _Record):
                sublines = value._lines(indent + 1)
                sublines[0] = f"{pad}  {key}:"
                lines += sublines
            else:
                lines.append(f"{pad}  {key}: {value}")
        return lines

    def __repr__(self):
        return "\n".join(self._lines())

    @classmethod
    def from_dict(cls, data):
        """
        Builds a record from a dictionary like the one returned by
        :meth:`pickle(metadata=False) <zdfsuite.hardware._Picklable.pickle>`.

        Values are cast to the type of the corresponding default, so the numpy scalars
        returned by :meth:`~zdfsuite.misc.files.read_h5()` are accepted.
        Keys beginning with ``"__"`` are ignored.

        Parameters
        ----------
        data : dict
            Field names mapped to values (or to nested dictionaries for sub-records).

        Returns
        -------
        _Record
            The reconstructed record.
        """
        record = cls()

        for key, value in data.items():
            if key.startswith("__"):
                continue
            if key not in record._pickle:
                raise ValueError(f"Unknown setting '{key}' for {cls.__name__}.")

            current = getattr(record, key)
            if isinstance(current, _Record):
                value = type(current).from_dict(value)
            elif isinstance(current, bool):
                value = bool(value)
            elif isinstance(current, INTEGER_TYPES):
                value = int(value)
            elif isinstance(current, FLOAT_TYPES):
                value = float(value)

            setattr(record, key, value)

        return record


class Settings(_Record):
    """
    Settings for a single structured-light acquisition.

    Attributes
    ----------
    brightness : float
        Projector brightness. ``1`` is nominal; values above allow overdriving.
    bidirectional : bool
        Whether to project patterns in both directions, trading speed for noise.
    blue_balance, red_balance : float
        White balance gains applied to the blue and red color channels.
    iris : int
        Aperture motor position. Larger values admit more light.
    exposure_time : datetime.timedelta
        Sensor integration time. May be set with an integer number of microseconds.
    gain : float
        Analog sensor gain.
    filters : Settings.Filters
        Post-processing filters applied to the point cloud.
    """

    class Filters(_Record):
        """Post-processing filters applied to every captured point cloud."""

        class Contrast(_Record):
            """Removes points whose fringe contrast is below ``threshold``."""
            _fields = {"enabled": False, "threshold": 5.0}

        class Gaussian(_Record):
            """Smooths depth with a gaussian kernel of width ``sigma`` pixels."""
            _fields = {"enabled": False, "sigma": 1.5}

        class Outlier(_Record):
            """Removes points farther than ``threshold`` millimeters from their neighbors."""
            _fields = {"enabled": False, "threshold": 5.0}

        class Reflection(_Record):
            """Removes points corrupted by specular reflections."""
            _fields = {"enabled": False}

        class Saturated(_Record):
            """Removes points whose pixels saturated the sensor."""
            _fields = {"enabled": True}

        _fields = {
            "contrast": Contrast(),
            "gaussian": Gaussian(),
            "outlier": Outlier(),
            "reflection": Reflection(),
            "saturated": Saturated(),
        }

    _fields = {
        "brightness": 1.0,
        "bidirectional": False,
        "blue_balance": 1.0,
        "red_balance": 1.0,
        "iris": 22,
        "exposure_time": datetime.timedelta(microseconds=8333),
        "gain": 1.0,
        "filters": Filters(),
    }

    # Inclusive ranges accepted by the hardware.
    bounds = {
        "brightness": (0, 1.8),
        "iris": (0, 72),
        "exposure_time_us": (6500, 100000),
        "gain": (1, 16),
        "blue_balance": (1, 8),
        "red_balance": (1, 8),
        "filters.contrast.threshold": (0, 100),
        "filters.gaussian.sigma": (0.5, 5),
        "filters.outlier.threshold": (0, 100),
    }

    @property
    def _pickle(self):
        # h5 has no duration type.
        return [
            "exposure_time_us" if k == "exposure_time" else k for k in self._fields
        ]

    @property
    def exposure_time(self):
        """Sensor integration time as a :class:`datetime.timedelta`."""
        return self._exposure_time

    @exposure_time.setter
    def exposure_time(self, value):
        if isinstance(value, datetime.timedelta):
            self._exposure_time = value
        elif isinstance(value, INTEGER_TYPES) and not isinstance(value, bool):
            self._exposure_time = datetime.timedelta(microseconds=int(value))
        else:
            raise TypeError(
                f"exposure_time must be a timedelta or integer microseconds, not {type(value)}."
            )

    @property
    def exposure_time_us(self):
        """Sensor integration time in integer microseconds."""
        return self._exposure_time // datetime.timedelta(microseconds=1)

    @exposure_time_us.setter
    def exposure_time_us(self, value):
        self.exposure_time = int(value)

    def validate(self):
        """
        Checks every bounded field against :attr:`bounds`.

        Returns
        -------
        Settings
            ``self``, for chaining.

        Raises
        ------
        ValueError
            Naming the first field which is out of range or of the wrong type.
        """
        if not isinstance(self.iris, INTEGER_TYPES) or isinstance(self.iris, bool):
            raise ValueError(f"Setting 'iris' must be an integer, not {self.iris!r}.")

        for path, bounds in self.bounds.items():
            value = self
            for part in path.split("."):
                value = getattr(value, part)

            if not in_range(value, bounds):
                raise ValueError(
                    f"Setting '{path}' = {value!r} is outside the range "
                    f"[{bounds[0]}, {bounds[1]}]."
                )

        return self


def make_hdr_settings(base, iris, exposure_time_us, gain, verbose=True):
    """
    Builds an HDR bracket: one copy of ``base`` per exposure, with
    the per-frame iris, exposure time, and gain overridden.

    Each entry is an independent copy, so changing one frame's settings
    never changes another's. ``base`` itself is left unchanged.

    Parameters
    ----------
    base : Settings
        Settings shared by all frames in the bracket.
    iris : list of int
        Per-frame aperture.
    exposure_time_us : list of int
        Per-frame exposure time in microseconds.
    gain : list of float
        Per-frame sensor gain.
    verbose : bool
        Whether to print each frame's settings.

    Returns
    -------
    list of Settings
        The bracket, in capture order.
    """
    if not isinstance(base, Settings):
        raise TypeError(f"Expected Settings for base, found {type(base)}.")
    if not (len(iris) == len(exposure_time_us) == len(gain)):
        raise ValueError(
            "iris, exposure_time_us, and gain must have the same length; found "
            f"{len(iris)}, {len(exposure_time_us)}, and {len(gain)}."
        )

    settings_hdr = []
    for i in range(len(iris)):
        settings = base.copy()
        settings.iris = iris[i]
        settings.exposure_time = exposure_time_us[i]
        settings.gain = gain[i]
        settings_hdr.append(settings)

        if verbose:
            print(f"Frame {i} {settings_hdr[i]}")

    return settings_hdr
