"""OpenCVVideoDevice — cv2.VideoCapture backend for the device media API."""
import asyncio
import logging

import cv2

from src.camera.device import Frame, VideoDevice, VideoStream
from src.constants import (
    CAPTURE_EXTENSION,
    CAPTURE_MIME_TYPE,
    MSG_DEVICE_NOT_READABLE,
    MSG_FRAME_ENCODE_FAILED,
)
from src.errors import DeviceNotReadableError, FrameNotReadyError

logger = logging.getLogger(__name__)


class OpenCVVideoStream(VideoStream):

    def __init__(self, capture: cv2.VideoCapture) -> None:
        self._capture: cv2.VideoCapture | None = capture

    @property
    def dimensions(self) -> tuple[int, int]:
        match self._capture:
            case None:
                return (0, 0)
            case cap:
                return (
                    int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
                    int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
                )

    async def read_frame(self) -> Frame:
        match self._capture:
            case None:
                return Frame(width=0, height=0, data=b"")
            case cap:
                ok, image = await asyncio.to_thread(cap.read)
        if not ok or image is None:
            return Frame(width=0, height=0, data=b"")
        height, width = image.shape[:2]
        encoded, buffer = cv2.imencode(CAPTURE_EXTENSION, image)
        if not encoded:
            raise FrameNotReadyError(MSG_FRAME_ENCODE_FAILED)
        return Frame(width=width, height=height, data=buffer.tobytes(), mime_type=CAPTURE_MIME_TYPE)

    def stop(self) -> None:
        match self._capture:
            case None:
                pass
            case cap:
                cap.release()
                self._capture = None


class OpenCVVideoDevice(VideoDevice):

    def __init__(self, index: int) -> None:
        self._index = index

    async def open(self) -> VideoStream:
        capture = await asyncio.to_thread(cv2.VideoCapture, self._index)
        if not capture.isOpened():
            capture.release()
            raise DeviceNotReadableError(MSG_DEVICE_NOT_READABLE % self._index)
        logger.debug("Opened video device %s", self._index)
        return OpenCVVideoStream(capture)
