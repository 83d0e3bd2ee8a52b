"""
Acquire an HDR frame with fully configured settings for each frame.

In general, taking an HDR frame is a lot simpler than this, as the default settings
work for most scenes. The purpose of this sample is to show how to configure
every setting.

Usage::

    zdf-capture-hdr [--simulated] [--serial SERIAL]

The merged frame is written to ``HDR.zdf`` in the working directory.
"""
import argparse
import sys

from zdfsuite.hardware.cameras.settings import Settings, make_hdr_settings
from zdfsuite.hardware.cameras.simulated import SimulatedCamera
from zdfsuite.hardware.cameras.zivid import Zivid

IRIS = [17, 27, 27]
EXPOSURE_TIME_US = [10000, 10000, 40000]
GAIN = [1.0, 1.0, 2.0]

FILE_NAME = "HDR.zdf"


def default_settings():
    """
    Settings shared by every frame of the bracket.

    Returns
    -------
    Settings
        Baseline with fixed brightness and white balance, and all filters enabled.
    """
    settings = Settings(
        brightness=1,
        bidirectional=False,
        blue_balance=1.081,
        red_balance=1.709,
    )
    settings.filters.contrast.enabled = True
    settings.filters.contrast.threshold = 5
    settings.filters.gaussian.enabled = True
    settings.filters.gaussian.sigma = 1.5
    settings.filters.outlier.enabled = True
    settings.filters.outlier.threshold = 5
    settings.filters.reflection.enabled = True
    settings.filters.saturated.enabled = True

    return settings


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        description="Capture an HDR frame with fully configured settings for each frame."
    )
    parser.add_argument(
        "--simulated",
        action="store_true",
        help="Use a simulated camera instead of connecting to hardware.",
    )
    parser.add_argument(
        "--serial",
        type=str,
        default="",
        help="Serial number of the camera to connect to. Defaults to the first camera found.",
    )
    return parser.parse_args(argv)


def main(argv=None, camera_class=None):
    """
    Connect, configure the bracket, capture, and save.

    Parameters
    ----------
    argv : list of str OR None
        Command line arguments. If ``None``, uses :data:`sys.argv`.
    camera_class : type OR None
        Camera class to connect with. If ``None``, chosen by ``--simulated``.

    Returns
    -------
    int
        ``0`` on success, ``1`` if any step raised.
    """
    args = parse_arguments(argv)

    if camera_class is None:
        camera_class = SimulatedCamera if args.simulated else Zivid
    camera_kwargs = {"serial": args.serial} if args.serial else {}

    try:
        print("Connecting to the camera")
        camera = camera_class(**camera_kwargs)

        print("Configuring settings same for all HDR frames")
        settings = default_settings()

        print("Configuring settings different for all HDR frames")
        settings_hdr = make_hdr_settings(settings, IRIS, EXPOSURE_TIME_US, GAIN)

        print("Capturing the HDR frame")
        hdr_frame = camera.capture_hdr(settings_hdr)

        print("Saving the frame")
        hdr_frame.save(FILE_NAME)
    except Exception as e:
        print("Error: " + str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
