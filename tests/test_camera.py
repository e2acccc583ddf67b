"""CameraController and OpenCV device tests"""
import asyncio
from unittest.mock import MagicMock, patch

import pytest

from src.camera.controller import CameraController, CameraState
from src.errors import (
    CameraInactiveError,
    CameraUnavailableError,
    DeviceNotReadableError,
    FrameNotReadyError,
    OperationCancelledError,
)
from src.image_source import ImageBuffer
from src.retry import RetryPolicy
from tests.fakes import (
    PNG_BYTES,
    FakeDevice,
    FakeRenderTarget,
    FakeStream,
    GatedDevice,
    NotAllowedError,
    RecordingSleep,
)


def _controller(*outcomes, target=None):
    sleep = RecordingSleep()
    device = FakeDevice(*outcomes)
    return CameraController(device, render_target=target, sleep=sleep), device, sleep


async def test_start_streams_and_attaches_render_target():
    stream = FakeStream()
    target = FakeRenderTarget()
    camera, device, sleep = _controller(stream, target=target)

    await camera.start()

    assert camera.state is CameraState.STREAMING
    assert camera.is_streaming
    assert target.attached == [stream]
    assert device.calls == 1
    assert sleep.delays == []


async def test_start_while_streaming_releases_previous_stream():
    first, second = FakeStream(), FakeStream()
    target = FakeRenderTarget()
    camera, device, _ = _controller(first, second, target=target)

    await camera.start()
    await camera.start()

    assert first.stop_calls == 1
    assert second.stop_calls == 0
    assert target.attached == [first, second]
    assert camera.is_streaming


async def test_start_retries_then_succeeds():
    stream = FakeStream()
    camera, device, sleep = _controller(NotAllowedError("denied"), stream)

    await camera.start()

    assert device.calls == 2
    assert sleep.delays == [1.0]
    assert camera.is_streaming


async def test_start_permission_denied_exhausts_budget():
    """Device keeps refusing: three attempts, two waits, error names the failure."""
    camera, device, sleep = _controller(NotAllowedError("Permission denied"))

    with pytest.raises(CameraUnavailableError) as info:
        await camera.start()

    assert device.calls == 3
    assert sleep.delays == [1.0, 2.0]
    assert camera.state is CameraState.STOPPED
    assert info.value.kind == "camera-unavailable"
    assert info.value.error_name == "NotAllowedError"
    assert "NotAllowedError" in str(info.value)
    assert "3 attempts" in str(info.value)


async def test_stop_is_idempotent():
    stream = FakeStream()
    target = FakeRenderTarget()
    camera, _, _ = _controller(stream, target=target)
    await camera.start()
    detached_before = target.detach_calls

    camera.stop()
    camera.stop()

    assert stream.stop_calls == 1
    assert camera.state is CameraState.STOPPED
    assert target.detach_calls == detached_before + 2


def test_stop_before_start_is_safe():
    camera, _, _ = _controller(FakeStream())

    camera.stop()

    assert camera.state is CameraState.STOPPED


async def test_snap_returns_buffer_and_ends_session():
    stream = FakeStream()
    camera, _, _ = _controller(stream)
    await camera.start()

    image = await camera.snap()

    assert image == ImageBuffer(data=PNG_BYTES, mime_type="image/png")
    assert stream.reads == 1
    assert stream.stop_calls == 1
    assert camera.state is CameraState.STOPPED


async def test_snap_with_empty_frame_captures_nothing():
    stream = FakeStream(width=0, height=0)
    camera, _, _ = _controller(stream)
    await camera.start()

    with pytest.raises(FrameNotReadyError, match="not ready"):
        await camera.snap()

    assert stream.reads == 0
    assert stream.stop_calls == 0
    assert camera.is_streaming


async def test_snap_without_stream_fails():
    camera, _, _ = _controller(FakeStream())

    with pytest.raises(CameraInactiveError):
        await camera.snap()


async def test_context_manager_releases_device_on_error():
    stream = FakeStream()
    device = FakeDevice(stream)

    with pytest.raises(RuntimeError):
        async with CameraController(device) as camera:
            await camera.start()
            raise RuntimeError("boom")

    assert stream.stop_calls == 1
    assert camera.state is CameraState.STOPPED


async def test_close_abandons_pending_start():
    device = FakeDevice(NotAllowedError("denied"))
    camera = CameraController(device, policy=RetryPolicy(initial_delay=30.0))

    task = asyncio.create_task(camera.start())
    for _ in range(5):
        await asyncio.sleep(0)
    camera.close()

    with pytest.raises(OperationCancelledError):
        await asyncio.wait_for(task, timeout=1.0)
    assert device.calls == 1
    assert camera.state is CameraState.STOPPED



async def test_overlapping_starts_release_the_superseded_stream():
    first, second = FakeStream(), FakeStream()
    target = FakeRenderTarget()
    device = GatedDevice(first, second)
    camera = CameraController(device, render_target=target)

    first_start = asyncio.create_task(camera.start())
    await asyncio.sleep(0)
    second_start = asyncio.create_task(camera.start())
    await asyncio.sleep(0)
    for gate in device.gates:
        gate.set()

    with pytest.raises(OperationCancelledError):
        await first_start
    await second_start

    assert first.stop_calls == 1
    assert second.stop_calls == 0
    assert target.attached == [second]
    assert camera.is_streaming

    camera.stop()

    assert second.stop_calls == 1
    assert camera.state is CameraState.STOPPED

# ── OpenCV backend ────────────────────────────────────────────────────────────


async def test_opencv_device_raises_when_not_opened():
    from src.camera.opencv import OpenCVVideoDevice

    with patch("src.camera.opencv.cv2") as mock_cv2:
        capture = MagicMock()
        capture.isOpened.return_value = False
        mock_cv2.VideoCapture.return_value = capture

        with pytest.raises(DeviceNotReadableError):
            await OpenCVVideoDevice(0).open()

    capture.release.assert_called_once()


async def test_opencv_stream_reads_png_frame():
    from src.camera.opencv import OpenCVVideoDevice

    with patch("src.camera.opencv.cv2") as mock_cv2:
        capture = MagicMock()
        capture.isOpened.return_value = True
        props = {mock_cv2.CAP_PROP_FRAME_WIDTH: 640.0, mock_cv2.CAP_PROP_FRAME_HEIGHT: 480.0}
        capture.get.side_effect = lambda prop: props[prop]
        image = MagicMock()
        image.shape = (480, 640, 3)
        capture.read.return_value = (True, image)
        encoded = MagicMock()
        encoded.tobytes.return_value = PNG_BYTES
        mock_cv2.imencode.return_value = (True, encoded)
        mock_cv2.VideoCapture.return_value = capture

        stream = await OpenCVVideoDevice(2).open()
        dimensions = stream.dimensions
        frame = await stream.read_frame()
        stream.stop()
        stream.stop()

    mock_cv2.VideoCapture.assert_called_once_with(2)
    assert dimensions == (640, 480)
    assert (frame.width, frame.height, frame.data) == (640, 480, PNG_BYTES)
    assert frame.mime_type == "image/png"
    mock_cv2.imencode.assert_called_once_with(".png", image)
    capture.release.assert_called_once()
    assert stream.dimensions == (0, 0)


async def test_opencv_stream_failed_read_is_empty_frame():
    from src.camera.opencv import OpenCVVideoStream

    capture = MagicMock()
    capture.read.return_value = (False, None)

    frame = await OpenCVVideoStream(capture).read_frame()

    assert (frame.width, frame.height) == (0, 0)


async def test_opencv_stream_encode_failure_is_frame_not_ready():
    from src.camera.opencv import OpenCVVideoStream

    with patch("src.camera.opencv.cv2") as mock_cv2:
        capture = MagicMock()
        image = MagicMock()
        image.shape = (480, 640, 3)
        capture.read.return_value = (True, image)
        mock_cv2.imencode.return_value = (False, None)

        with pytest.raises(FrameNotReadyError, match="encode"):
            await OpenCVVideoStream(capture).read_frame()
