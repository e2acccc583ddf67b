"""ImageSource — normalizes camera frames and user files into ImageBuffers."""
import base64
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple, Optional

from src.camera.device import Frame
from src.constants import (
    DATA_URL_PREFIX,
    DATA_URL_SEPARATOR,
    IMAGE_MIME_PREFIX,
    MSG_FILE_READ_ERROR,
    MSG_FRAME_NOT_READY,
    MSG_INVALID_FILE_TYPE,
)
from src.errors import FileReadError, FrameNotReadyError, InvalidFileTypeError

logger = logging.getLogger(__name__)


class DataUrlParts(NamedTuple):
    mime_type: str
    base64: str


@dataclass(frozen=True)
class ImageBuffer:
    data: bytes
    mime_type: str

    @property
    def base64(self) -> str:
        return base64.standard_b64encode(self.data).decode()

    def to_data_url(self) -> str:
        return f"{DATA_URL_PREFIX}{self.mime_type}{DATA_URL_SEPARATOR}{self.base64}"


def parse_data_url(data_url: str) -> Optional[DataUrlParts]:
    """Split ``data:<mime>;base64,<payload>`` into its MIME type and payload.

    Returns None when the string does not contain exactly one base64 marker.
    Parameters after the MIME type (``;charset=...``) are dropped.
    """
    parts = data_url.split(DATA_URL_SEPARATOR)
    match parts:
        case [header, payload] if header.startswith(DATA_URL_PREFIX):
            mime_type = header[len(DATA_URL_PREFIX):].split(";")[0]
            return DataUrlParts(mime_type=mime_type, base64=payload)
        case _:
            return None


class ImageSource:
    """Acquires still images. A successful call is the only thing that may
    start an analysis; every rejection raises before a buffer exists."""

    @staticmethod
    def from_capture(frame: Frame) -> ImageBuffer:
        if frame.width == 0 or frame.height == 0:
            raise FrameNotReadyError(MSG_FRAME_NOT_READY)
        return ImageBuffer(data=bytes(frame.data), mime_type=frame.mime_type)

    @staticmethod
    def from_file(data: bytes, mime_type: str) -> ImageBuffer:
        if not mime_type.startswith(IMAGE_MIME_PREFIX):
            logger.info("Rejected file with type %r", mime_type)
            raise InvalidFileTypeError(MSG_INVALID_FILE_TYPE)
        # buffers carry the bare type/subtype
        return ImageBuffer(data=bytes(data), mime_type=mime_type.split(";")[0].strip())

    @staticmethod
    def from_path(path: Path) -> ImageBuffer:
        mime_type, _ = mimetypes.guess_type(path.name)
        match mime_type:
            case str() as m if m.startswith(IMAGE_MIME_PREFIX):
                pass
            case _:
                logger.info("Rejected %s (type %r)", path.name, mime_type)
                raise InvalidFileTypeError(MSG_INVALID_FILE_TYPE)
        try:
            data = path.read_bytes()
        except OSError as exc:
            logger.error("Reading %s failed: %s", path, exc)
            raise FileReadError(MSG_FILE_READ_ERROR) from exc
        return ImageSource.from_file(data, mime_type)
