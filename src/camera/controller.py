"""CameraController — sole owner of the live video stream."""
import logging
from enum import Enum
from typing import Optional

from src.camera.device import RenderTarget, VideoDevice, VideoStream
from src.constants import (
    MSG_CAMERA_INACTIVE,
    MSG_CAMERA_STARTED,
    MSG_CAMERA_STOPPED,
    MSG_CAMERA_UNAVAILABLE,
    MSG_FRAME_NOT_READY,
)
from src.errors import CameraInactiveError, CameraUnavailableError, FrameNotReadyError
from src.image_source import ImageBuffer, ImageSource
from src.retry import CancelToken, RetryExhaustedError, RetryPolicy, Sleep, retry_with_backoff

logger = logging.getLogger(__name__)


class CameraState(str, Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    STREAMING = "streaming"


class CameraController:
    """Manages start, stop and snapshot of one camera session at a time.

    Use as ``async with CameraController(device) as camera:`` so the device is
    released on every exit path.
    """

    def __init__(
        self,
        device: VideoDevice,
        render_target: Optional[RenderTarget] = None,
        policy: RetryPolicy = RetryPolicy(),
        sleep: Sleep | None = None,
    ) -> None:
        self._device = device
        self._render_target = render_target
        self._policy = policy
        self._sleep = sleep
        self._stream: Optional[VideoStream] = None
        self._state = CameraState.STOPPED
        self._token: Optional[CancelToken] = None

    @property
    def state(self) -> CameraState:
        return self._state

    @property
    def is_streaming(self) -> bool:
        return self._state is CameraState.STREAMING

    async def __aenter__(self) -> "CameraController":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()

    async def start(self) -> None:
        self.close()
        self._state = CameraState.STARTING
        token = CancelToken()
        self._token = token
        try:
            stream = await retry_with_backoff(
                self._device.open,
                self._policy,
                label="Camera start",
                token=token,
                sleep=self._sleep,
            )
        except RetryExhaustedError as exc:
            self._release_token(token)
            name = type(exc.last_error).__name__
            raise CameraUnavailableError(
                MSG_CAMERA_UNAVAILABLE % (exc.attempts, name), error_name=name
            ) from exc.last_error
        except BaseException:
            self._release_token(token)
            raise

        # a newer start() or close() landed while the device was opening
        if token.cancelled:
            stream.stop()
            token.raise_if_cancelled()

        self._token = None
        self._stream = stream
        if self._render_target is not None:
            self._render_target.attach(stream)
        self._state = CameraState.STREAMING
        logger.info(MSG_CAMERA_STARTED, *stream.dimensions)

    def _release_token(self, token: CancelToken) -> None:
        # a superseded start must not touch the state its successor owns
        if self._token is token:
            self._token = None
            self._state = CameraState.STOPPED

    def stop(self) -> None:
        match self._stream:
            case None:
                pass
            case stream:
                stream.stop()
                logger.info(MSG_CAMERA_STOPPED)
        self._stream = None
        if self._render_target is not None:
            self._render_target.detach()
        self._state = CameraState.STOPPED

    def close(self) -> None:
        """Teardown: abandon a pending start and release the device."""
        match self._token:
            case None:
                pass
            case token:
                token.cancel()
        self._token = None
        self.stop()

    async def snap(self) -> ImageBuffer:
        """Capture the current frame and end the live session."""
        stream = self._stream
        if stream is None or not self.is_streaming:
            raise CameraInactiveError(MSG_CAMERA_INACTIVE)

        width, height = stream.dimensions
        if width == 0 or height == 0:
            raise FrameNotReadyError(MSG_FRAME_NOT_READY)

        try:
            frame = await stream.read_frame()
            return ImageSource.from_capture(frame)
        finally:
            self.stop()
