"""
Tests for the Camera base class using SimulatedCamera.
"""
import numpy as np
import pytest

from zdfsuite.hardware.cameras.camera import Camera
from zdfsuite.hardware.cameras.frame import Frame
from zdfsuite.hardware.cameras.settings import Settings, make_hdr_settings
from zdfsuite.hardware.cameras.simulated import SimulatedCamera

IRIS = [17, 27, 27]
EXPOSURE_TIME_US = [10000, 10000, 40000]
GAIN = [1.0, 1.0, 2.0]


def test_camera_init():
    """Test basic SimulatedCamera construction."""
    cam = SimulatedCamera(resolution=(64, 48))

    # Verify (height, width) shape convention.
    assert cam.shape == (48, 64)
    assert cam.serial == "simulated"
    assert cam.last_frame is None
    assert cam.settings == Settings()

    cam.close()


def test_camera_settings_copied():
    settings = Settings(iris=30)
    cam = SimulatedCamera(resolution=(8, 8), settings=settings)
    settings.iris = 10

    assert cam.settings.iris == 30


def test_camera_settings_type():
    with pytest.raises(TypeError):
        SimulatedCamera(resolution=(8, 8), settings={"iris": 30})


def test_abstract_camera():
    cam = Camera((8, 8))

    assert Camera.info(verbose=False) == []
    with pytest.raises(NotImplementedError):
        cam.close()
    with pytest.raises(NotImplementedError):
        cam.capture()


def test_info(capsys):
    assert SimulatedCamera.info() == ["simulated"]
    assert "simulated" in capsys.readouterr().out


class TestCapture:
    """Single-frame acquisition."""

    def test_capture_shape(self, camera):
        frame = camera.capture()

        assert isinstance(frame, Frame)
        assert frame.shape == camera.shape
        assert frame.rgb.dtype == np.uint8
        assert camera.last_frame is frame

    def test_capture_records_settings(self, camera):
        settings = Settings(iris=27, exposure_time=20000)
        frame = camera.capture(settings)

        assert frame.settings == [settings]
        assert frame.settings[0] is not settings

    def test_capture_invalid_settings(self, camera):
        with pytest.raises(ValueError, match="iris"):
            camera.capture(Settings(iris=100))

        assert camera.last_frame is None

    def test_capture_type(self, camera):
        with pytest.raises(TypeError):
            camera.capture([Settings()])

    def test_capture_closed(self):
        cam = SimulatedCamera(resolution=(8, 8))
        cam.close()

        with pytest.raises(RuntimeError, match="closed"):
            cam.capture()


class TestSimulatedImaging:
    """Physical behavior of the simulated sensor and filters."""

    @pytest.fixture
    def cam(self):
        cam = SimulatedCamera(resolution=(64, 48), noise=False)
        yield cam
        cam.close()

    def test_signal_scaling(self, cam):
        base = cam.signal(Settings(iris=22, exposure_time=10000, gain=1.0))
        longer = cam.signal(Settings(iris=22, exposure_time=40000, gain=2.0))
        wider = cam.signal(Settings(iris=44, exposure_time=10000, gain=1.0))

        np.testing.assert_allclose(base, cam.scene["reflectance"])
        np.testing.assert_allclose(longer, 8 * base)
        np.testing.assert_allclose(wider, 4 * base)

    def test_no_filters_all_valid(self, cam):
        settings = Settings()
        settings.filters.saturated.enabled = False

        frame = cam.capture(settings)
        assert np.all(frame.valid)

    def test_noiseless_depth(self, cam):
        settings = Settings()
        settings.filters.saturated.enabled = False
        frame = cam.capture(settings)

        reflection = cam.scene["reflection"]
        np.testing.assert_allclose(frame.depth[~reflection], cam.scene["z"][~reflection])
        np.testing.assert_allclose(frame.depth[reflection], cam.scene["z"][reflection] + 15)

    def test_saturated_filter(self, cam):
        settings = Settings(iris=27, exposure_time=40000, gain=2.0)
        frame = cam.capture(settings)
        saturated = cam.signal(settings) >= 1

        assert np.any(saturated)
        assert not np.any(frame.valid[saturated])
        assert np.all(frame.contrast[saturated] == 0)

    def test_contrast_filter(self, cam):
        settings = Settings(iris=17, exposure_time=10000)
        settings.filters.contrast.enabled = True
        settings.filters.contrast.threshold = 5
        frame = cam.capture(settings)
        dark = 100 * cam.signal(settings) < 5

        assert np.any(dark)
        assert not np.any(frame.valid[dark])
        assert np.all(frame.valid[~dark])

    def test_reflection_filter(self, cam):
        settings = Settings()
        settings.filters.reflection.enabled = True
        frame = cam.capture(settings)

        assert not np.any(frame.valid[cam.scene["reflection"]])

    def test_outlier_filter(self):
        scene = SimulatedCamera.make_scene((16, 16))
        scene["z"][8, 8] += 50
        cam = SimulatedCamera(resolution=(16, 16), scene=scene, noise=False)

        settings = Settings()
        settings.filters.outlier.enabled = True
        frame = cam.capture(settings)

        assert not frame.valid[8, 8]
        assert frame.valid[0, 0]

    def test_gaussian_filter_smooths(self):
        cam = SimulatedCamera(resolution=(64, 48), noise=True, seed=0)
        rough = cam.capture(Settings(iris=27))

        cam = SimulatedCamera(resolution=(64, 48), noise=True, seed=0)
        settings = Settings(iris=27)
        settings.filters.gaussian.enabled = True
        settings.filters.gaussian.sigma = 2
        smooth = cam.capture(settings)

        region = (slice(5, 15), slice(40, 60))
        residual_rough = np.nanstd(rough.depth[region] - cam.scene["z"][region])
        residual_smooth = np.nanstd(smooth.depth[region] - cam.scene["z"][region])

        assert residual_smooth < residual_rough

    def test_gaussian_filter_unbiased(self):
        """Smoothing a plane leaves it in place, also next to invalid points."""
        scene = SimulatedCamera.make_scene((48, 64))
        v, u = np.indices((48, 64), dtype=float)
        scene["z"] = 600 + 0.8 * u + 0.4 * v
        cam = SimulatedCamera(resolution=(64, 48), scene=scene, noise=False)

        settings = Settings(iris=27)
        settings.filters.reflection.enabled = True
        settings.filters.gaussian.enabled = True
        settings.filters.gaussian.sigma = 2
        frame = cam.capture(settings)

        # Saturated columns on the right border the smoothed region.
        assert not np.all(frame.valid)
        valid = frame.valid
        np.testing.assert_allclose(frame.depth[valid], scene["z"][valid], atol=1e-6)

    def test_bidirectional_reduces_noise(self):
        residuals = []
        for bidirectional in (False, True):
            cam = SimulatedCamera(resolution=(64, 48), noise=True, seed=1)
            frame = cam.capture(Settings(iris=27, bidirectional=bidirectional))
            residuals.append(np.nanstd(frame.depth - cam.scene["z"]))

        assert residuals[1] < residuals[0]

    def test_white_balance(self, cam):
        settings = Settings(iris=22, exposure_time=10000, red_balance=1.709, blue_balance=1.081)
        settings.filters.saturated.enabled = False
        frame = cam.capture(settings)

        # Balanced channels agree on a mid-gray pixel.
        pixel = frame.rgb[24, 40].astype(int)
        assert abs(pixel[0] - pixel[1]) <= 2
        assert abs(pixel[2] - pixel[1]) <= 2

    def test_seeded_noise_reproducible(self):
        a = SimulatedCamera(resolution=(16, 16), seed=3).capture()
        b = SimulatedCamera(resolution=(16, 16), seed=3).capture()

        np.testing.assert_array_equal(a.xyz, b.xyz)

    def test_scene_validation(self):
        scene = SimulatedCamera.make_scene((8, 8))

        with pytest.raises(ValueError, match="shape"):
            SimulatedCamera(resolution=(16, 16), scene=scene)

        del scene["reflection"]
        with pytest.raises(ValueError, match="missing"):
            SimulatedCamera(resolution=(8, 8), scene=scene)


class TestCaptureHDR:
    """Multi-exposure acquisition."""

    def test_bracket(self, camera, filtered_settings):
        bracket = make_hdr_settings(filtered_settings, IRIS, EXPOSURE_TIME_US, GAIN, verbose=False)
        frame = camera.capture_hdr(bracket)

        assert frame.shape == camera.shape
        assert frame.settings == bracket
        assert camera.last_frame is frame

    def test_hdr_covers_more(self, filtered_settings):
        cam = SimulatedCamera(resolution=(64, 48), noise=False)
        bracket = make_hdr_settings(filtered_settings, IRIS, EXPOSURE_TIME_US, GAIN, verbose=False)

        singles = [cam.capture(settings) for settings in bracket]
        hdr = cam.capture_hdr(bracket)

        for single in singles:
            assert np.sum(hdr.valid) > np.sum(single.valid)

        # Only the reflection is lost.
        np.testing.assert_array_equal(hdr.valid, ~cam.scene["reflection"])

    def test_frames_captured_in_order(self, filtered_settings, monkeypatch):
        cam = SimulatedCamera(resolution=(16, 16), noise=False)
        bracket = make_hdr_settings(filtered_settings, IRIS, EXPOSURE_TIME_US, GAIN, verbose=False)

        captured = []
        original = cam._capture_hw

        def spy(settings):
            captured.append(settings)
            return original(settings)

        monkeypatch.setattr(cam, "_capture_hw", spy)
        cam.capture_hdr(bracket)

        assert captured == bracket

    def test_verbose(self, camera, filtered_settings, capsys):
        bracket = make_hdr_settings(filtered_settings, IRIS, EXPOSURE_TIME_US, GAIN, verbose=False)
        camera.capture_hdr(bracket, verbose=True)

        assert "3/3" in capsys.readouterr().err

    def test_empty(self, camera):
        with pytest.raises(ValueError, match="at least one"):
            camera.capture_hdr([])

    def test_single_settings(self, camera):
        with pytest.raises(TypeError, match="list of Settings"):
            camera.capture_hdr(Settings())

    def test_single_frame_warns(self, camera):
        with pytest.warns(UserWarning, match="single frame"):
            camera.capture_hdr([Settings()])

    def test_wrong_type(self, camera):
        with pytest.raises(TypeError, match="frame 1"):
            camera.capture_hdr([Settings(), {"iris": 17}])

    def test_invalid_settings(self, camera):
        with pytest.raises(ValueError, match="gain"):
            camera.capture_hdr([Settings(), Settings(gain=0)])

    def test_hardware_hdr_preferred(self, filtered_settings):
        """Subclasses with hardware HDR skip the per-frame fallback."""
        class HardwareHDR(SimulatedCamera):
            def _capture_hdr_hw(self, settings_list):
                self.hdr_calls = getattr(self, "hdr_calls", 0) + 1
                return self._capture_hw(settings_list[-1])

        cam = HardwareHDR(resolution=(8, 8), noise=False)
        bracket = make_hdr_settings(filtered_settings, IRIS, EXPOSURE_TIME_US, GAIN, verbose=False)
        frame = cam.capture_hdr(bracket)

        assert cam.hdr_calls == 1
        assert frame.settings == [bracket[-1]]


def test_camera_pickle(camera, temp_dir):
    camera.capture()

    pickled = camera.pickle(attributes=False, metadata=False)
    assert pickled["shape"] == camera.shape
    assert pickled["settings"]["iris"] == camera.settings.iris
    assert "last_frame" not in pickled

    path = camera.save(path=temp_dir, attributes=True)
    assert path.endswith(".h5")
    assert "simulated-pickle" in path
