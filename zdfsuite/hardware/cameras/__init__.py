"""
The 3D cameras used to capture point clouds.
Structured-light cameras are connected to python through SDKs provided by hardware
vendors. These SDKs each have their own function names and hardware-specific quirks.
Thus, cameras in :mod:`zdfsuite` are integrated as subclasses of
the abstract class :class:`.Camera`, which requires subclasses to implement a small number
of capture methods (see below).
These subclasses are effectively wrappers for the given SDK, but share settings
validation, the HDR bracket workflow, and frame saving.

Acquisitions are configured with :class:`~zdfsuite.hardware.cameras.settings.Settings`
records. An HDR capture takes a list of them, one per exposure, built with
:meth:`~zdfsuite.hardware.cameras.settings.make_hdr_settings()`.

Tip
~~~~~~~~
:class:`~zdfsuite.hardware.cameras.simulated.SimulatedCamera` needs no hardware and
is a drop-in replacement for testing scripts written against a real camera.
"""
