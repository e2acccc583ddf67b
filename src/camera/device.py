"""Device media API — abstract live-stream capability consumed by CameraController."""
from abc import ABC, abstractmethod
from dataclasses import dataclass

from src.constants import CAPTURE_MIME_TYPE


@dataclass(frozen=True)
class Frame:
    width: int
    height: int
    data: bytes
    mime_type: str = CAPTURE_MIME_TYPE


class VideoStream(ABC):
    @property
    @abstractmethod
    def dimensions(self) -> tuple[int, int]:
        """(width, height) of the live frame; (0, 0) until the stream has data."""
        ...

    @abstractmethod
    async def read_frame(self) -> Frame:
        """Read and encode the current frame. Raises on failure."""
        ...

    @abstractmethod
    def stop(self) -> None:
        """Stop every track of the stream. Must be safe to call twice."""
        ...


class VideoDevice(ABC):
    @abstractmethod
    async def open(self) -> VideoStream:
        """Request a live stream. Raises when the device refuses or is missing."""
        ...


class RenderTarget(ABC):
    @abstractmethod
    def attach(self, stream: VideoStream) -> None: ...

    @abstractmethod
    def detach(self) -> None: ...
