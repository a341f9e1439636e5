"""Unit tests for the OpenCV-backed Camera."""

from unittest.mock import MagicMock, patch

import numpy as np
import pytest


def _mock_capture(*, opened=True, width=1280, height=720, frames=None):
    cap = MagicMock()
    cap.isOpened.return_value = opened
    cap.get.side_effect = lambda prop: {3: width, 4: height}.get(prop, 0)
    if frames is None:
        frames = [(True, np.zeros((height, width, 3), dtype=np.uint8))]
    cap.read.side_effect = list(frames)
    return cap


class TestCameraOpen:
    """Test Camera.open error mapping and resolution handling."""

    def test_open_sets_resolution_and_buffer(self):
        import cv2

        from color_sampler.capture.camera import Camera

        cap = _mock_capture()
        with patch("color_sampler.capture.camera.cv2.VideoCapture", return_value=cap) as factory:
            camera = Camera(0, (1920, 1080))
            camera.open()

        factory.assert_called_once_with(0)
        cap.set.assert_any_call(cv2.CAP_PROP_FRAME_WIDTH, 1920)
        cap.set.assert_any_call(cv2.CAP_PROP_FRAME_HEIGHT, 1080)
        cap.set.assert_any_call(cv2.CAP_PROP_BUFFERSIZE, 1)
        assert camera.is_open
        assert camera.resolution == (1280, 720)

    def test_numeric_string_device_is_an_index(self):
        from color_sampler.capture.camera import Camera

        cap = _mock_capture()
        with patch("color_sampler.capture.camera.cv2.VideoCapture", return_value=cap) as factory:
            Camera("2").open()

        factory.assert_called_once_with(2)

    def test_unopened_capture_is_no_device(self):
        from color_sampler.capture.camera import Camera
        from color_sampler.errors import CaptureErrorReason, DeviceUnavailable

        cap = _mock_capture(opened=False)
        with patch("color_sampler.capture.camera.cv2.VideoCapture", return_value=cap):
            camera = Camera(0)
            with pytest.raises(DeviceUnavailable) as exc_info:
                camera.open()

        assert exc_info.value.reason is CaptureErrorReason.NO_DEVICE
        cap.release.assert_called_once()
        assert not camera.is_open

    def test_permission_error_is_permission_denied(self):
        from color_sampler.capture.camera import Camera
        from color_sampler.errors import CaptureErrorReason, DeviceUnavailable

        with patch(
            "color_sampler.capture.camera.cv2.VideoCapture",
            side_effect=PermissionError("denied"),
        ):
            with pytest.raises(DeviceUnavailable) as exc_info:
                Camera(0).open()

        assert exc_info.value.reason is CaptureErrorReason.PERMISSION_DENIED


class TestCameraFrames:
    """Test reading frames and releasing the camera."""

    def test_read_frame_returns_frame(self):
        from color_sampler.capture.camera import Camera

        frame = np.full((2, 2, 3), 7, dtype=np.uint8)
        cap = _mock_capture(frames=[(True, frame)])
        with patch("color_sampler.capture.camera.cv2.VideoCapture", return_value=cap):
            camera = Camera(0)
            camera.open()

        assert camera.read_frame() is frame

    def test_read_frame_retries_then_fails(self):
        from color_sampler.capture.camera import Camera
        from color_sampler.errors import CaptureErrorReason, DeviceUnavailable

        cap = _mock_capture(frames=[(False, None)] * 3)
        with patch("color_sampler.capture.camera.cv2.VideoCapture", return_value=cap):
            camera = Camera(0, read_attempts=3)
            camera.open()

        with patch("color_sampler.capture.camera.time.sleep"):
            with pytest.raises(DeviceUnavailable) as exc_info:
                camera.read_frame()

        assert exc_info.value.reason is CaptureErrorReason.UNKNOWN
        assert cap.read.call_count == 3

    def test_opencv_error_during_read_is_device_unavailable(self):
        import cv2

        from color_sampler.capture.camera import Camera
        from color_sampler.errors import CaptureErrorReason, DeviceUnavailable

        cap = _mock_capture()
        cap.read.side_effect = cv2.error("backend lost the stream")
        with patch("color_sampler.capture.camera.cv2.VideoCapture", return_value=cap):
            camera = Camera(0)
            camera.open()

        with pytest.raises(DeviceUnavailable) as exc_info:
            camera.read_frame()

        assert exc_info.value.reason is CaptureErrorReason.UNKNOWN
        assert isinstance(exc_info.value.__cause__, cv2.error)

    def test_read_frame_without_open_is_permission_revoked(self):
        from color_sampler.capture.camera import Camera
        from color_sampler.errors import PermissionRevoked

        with pytest.raises(PermissionRevoked):
            Camera(0).read_frame()

    def test_close_is_idempotent(self):
        from color_sampler.capture.camera import Camera

        cap = _mock_capture()
        with patch("color_sampler.capture.camera.cv2.VideoCapture", return_value=cap):
            camera = Camera(0)
            camera.open()

        camera.close()
        camera.close()
        cap.release.assert_called_once()
        assert not camera.is_open

    def test_camera_satisfies_capture_device_protocol(self):
        from color_sampler.capture.camera import Camera, CaptureDevice

        assert isinstance(Camera(0), CaptureDevice)


@pytest.mark.hardware
class TestCameraHardware:
    """Requires a local camera at index 0."""

    def test_capture_one_frame(self):
        from color_sampler.capture.camera import Camera

        camera = Camera(0, (640, 480))
        camera.open()
        try:
            frame = camera.read_frame()
        finally:
            camera.close()
        assert frame.ndim == 3
