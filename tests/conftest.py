"""
Pytest configuration and fixtures for zdfsuite tests.

The fixtures in this file support testing with any Camera subclass.
By default, SimulatedCamera is used for fast, hardware-free testing.

To test with real hardware, set environment variables:
    ZDFSUITE_TEST_CAMERA_CLASS=zdfsuite.hardware.cameras.zivid.Zivid
    ZDFSUITE_TEST_CAMERA_ARGS='{"serial": "2020C0DE"}'

Automatic Features:
- All tests automatically log to tests/output/YYYYMMDD_HHMMSS/pytest.log
- Matplotlib uses the non-interactive Agg backend
- zdfsuite package logging: INFO level
- External packages logging: WARNING level and above only
"""
import pytest
import tempfile
import os
import json
import importlib
import logging
import matplotlib
import matplotlib.pyplot as plt
from pathlib import Path
from datetime import datetime

from zdfsuite.hardware.cameras.settings import Settings
from zdfsuite.hardware.cameras.simulated import SimulatedCamera


def _get_class_from_string(class_path):
    """
    Import and return a class from a module path string.

    Parameters
    ----------
    class_path : str
        Full path to class, e.g., 'zdfsuite.hardware.cameras.simulated.SimulatedCamera'

    Returns
    -------
    class
        The imported class
    """
    module_path, class_name = class_path.rsplit('.', 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)


@pytest.fixture
def camera_class():
    """
    Return the Camera class to use for testing.

    By default returns SimulatedCamera. Can be overridden via:
    ZDFSUITE_TEST_CAMERA_CLASS=zdfsuite.hardware.cameras.zivid.Zivid

    Returns
    -------
    class
        Camera subclass to instantiate
    """
    class_path = os.environ.get('ZDFSUITE_TEST_CAMERA_CLASS', None)
    if class_path:
        return _get_class_from_string(class_path)
    return SimulatedCamera


@pytest.fixture
def camera_kwargs():
    """
    Return keyword arguments for Camera instantiation.

    By default returns arguments for a noiseless SimulatedCamera. Can be overridden via:
    ZDFSUITE_TEST_CAMERA_ARGS='{"serial": "2020C0DE"}'

    Returns
    -------
    dict
        Keyword arguments for Camera constructor
    """
    args_json = os.environ.get('ZDFSUITE_TEST_CAMERA_ARGS', None)
    if args_json:
        return json.loads(args_json)

    return {
        'resolution': (64, 48),
        'noise': False,
    }


@pytest.fixture
def camera(camera_class, camera_kwargs):
    """
    Fixture providing a Camera instance for testing.

    By default returns SimulatedCamera, but can be configured to return any Camera subclass
    via environment variables ZDFSUITE_TEST_CAMERA_CLASS and ZDFSUITE_TEST_CAMERA_ARGS.
    """
    cam = camera_class(**camera_kwargs)
    yield cam
    cam.close()


@pytest.fixture
def filtered_settings():
    """Settings with every filter enabled, as used for HDR brackets."""
    settings = Settings(blue_balance=1.081, red_balance=1.709)
    settings.filters.contrast.enabled = True
    settings.filters.gaussian.enabled = True
    settings.filters.outlier.enabled = True
    settings.filters.reflection.enabled = True
    settings.filters.saturated.enabled = True
    return settings


@pytest.fixture
def temp_dir():
    """Fixture providing a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture(autouse=True)
def test_logger(request):
    """
    Provides a test-specific logger with proper naming.

    This fixture is automatically used for every test (autouse=True).

    Logger name format: {module}.{class}.{function}
    Example: test_camera.TestCaptureHDR.test_hdr_covers_more
    """
    parts = []
    if request.module:
        parts.append(request.module.__name__.split('.')[-1])
    if request.cls:
        parts.append(request.cls.__name__)
    if request.function:
        parts.append(request.function.__name__)

    logger = logging.getLogger(".".join(parts))
    request.node.test_logger = logger

    logger.info("=== START ===")

    yield logger

    if hasattr(request.node, 'rep_call'):
        outcome = request.node.rep_call.outcome
        logger.info(f"=== {outcome.upper()} ===")


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Hook to capture test results for logging."""
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)


@pytest.fixture
def mpl_test():
    """
    Per-test fixture for matplotlib tests.

    Provides automatic figure cleanup and easy access to plt.
    """
    plt.close('all')

    yield plt

    plt.close('all')


def pytest_configure(config):
    """Configure pytest with dynamic log file path and logging levels."""
    matplotlib.use("Agg")
    plt.ioff()

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_dir = Path("tests/output") / timestamp
    output_dir.mkdir(parents=True, exist_ok=True)

    config.option.log_file = str(output_dir / "pytest.log")

    # Suppress external packages below WARNING; allow INFO from zdfsuite.
    logging.captureWarnings(True)
    logging.getLogger().setLevel(logging.WARNING)
    for package in ['matplotlib', 'PIL', 'numpy', 'h5py']:
        logging.getLogger(package).setLevel(logging.WARNING)
    logging.getLogger('zdfsuite').setLevel(logging.INFO)
