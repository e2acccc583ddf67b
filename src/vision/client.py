"""VisionClient — abstract base for image analysis backends."""
from abc import ABC, abstractmethod
from dataclasses import dataclass

from src.constants import SYSTEM_PROMPT, USER_PROMPT
from src.image_source import ImageBuffer


@dataclass(frozen=True)
class AnalysisRequest:
    image: ImageBuffer
    system_prompt: str = SYSTEM_PROMPT
    user_prompt: str = USER_PROMPT


@dataclass(frozen=True)
class AnalysisResult:
    classification: str
    description: str

    def description_lines(self) -> list[str]:
        return [line for line in self.description.split("\n") if line.strip()]


class VisionClient(ABC):

    def __init__(self, api_key: str | None) -> None:
        self._api_key = api_key

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    @abstractmethod
    async def generate(self, request: AnalysisRequest) -> str:
        """Send one request and return the structured-output JSON text. Raises on failure."""
        ...
