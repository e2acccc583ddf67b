from dataclasses import dataclass
from typing import Optional
import os
from dotenv import load_dotenv

from src.constants import (
    CLAUDE_VISION_MODEL,
    DEFAULT_CAMERA_INDEX,
    DEFAULT_CAMERA_WARMUP,
    DEFAULT_GEMINI_BASE_URL,
    DEFAULT_GEMINI_MODEL,
    OPENAI_VISION_MODEL,
    PROVIDER_ANTHROPIC,
    PROVIDER_GEMINI,
    PROVIDER_OPENAI,
    PROVIDERS,
)


@dataclass(frozen=True)
class Config:
    vision_provider: str
    log_level: str
    gemini_api_key: Optional[str]
    gemini_base_url: str
    gemini_model: str
    openai_api_key: Optional[str]
    openai_model: str
    anthropic_api_key: Optional[str]
    claude_model: str
    camera_index: int
    camera_warmup: float

    @classmethod
    def from_env(cls) -> "Config":
        load_dotenv()

        provider = os.getenv("VISION_PROVIDER", PROVIDER_GEMINI)
        log_level = os.getenv("LOG_LEVEL", "INFO")
        gemini_api_key = os.getenv("GEMINI_API_KEY") or None
        gemini_base_url = os.getenv("GEMINI_BASE_URL") or DEFAULT_GEMINI_BASE_URL
        gemini_model = os.getenv("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL
        openai_api_key = os.getenv("OPENAI_API_KEY") or None
        openai_model = os.getenv("OPENAI_VISION_MODEL") or OPENAI_VISION_MODEL
        anthropic_api_key = os.getenv("ANTHROPIC_API_KEY") or None
        claude_model = os.getenv("CLAUDE_VISION_MODEL") or CLAUDE_VISION_MODEL
        camera_index = os.getenv("CAMERA_INDEX", str(DEFAULT_CAMERA_INDEX))
        camera_warmup = os.getenv("CAMERA_WARMUP", str(DEFAULT_CAMERA_WARMUP))

        return cls._validate(
            vision_provider=provider.strip().lower(),
            log_level=log_level,
            gemini_api_key=gemini_api_key,
            gemini_base_url=gemini_base_url.rstrip("/"),
            gemini_model=gemini_model,
            openai_api_key=openai_api_key,
            openai_model=openai_model,
            anthropic_api_key=anthropic_api_key,
            claude_model=claude_model,
            camera_index=camera_index,
            camera_warmup=camera_warmup,
        )

    @staticmethod
    def _validate(
        vision_provider: str,
        log_level: str,
        gemini_api_key: Optional[str],
        gemini_base_url: str,
        gemini_model: str,
        openai_api_key: Optional[str],
        openai_model: str,
        anthropic_api_key: Optional[str],
        claude_model: str,
        camera_index: str,
        camera_warmup: str,
    ) -> "Config":
        match vision_provider:
            case p if p in PROVIDERS:
                pass
            case p:
                raise ValueError(f"VISION_PROVIDER must be one of {', '.join(PROVIDERS)}, got {p!r}")

        try:
            index = int(camera_index)
        except ValueError:
            raise ValueError(f"CAMERA_INDEX must be an integer, got {camera_index!r}") from None

        try:
            warmup = float(camera_warmup)
        except ValueError:
            raise ValueError(f"CAMERA_WARMUP must be a number, got {camera_warmup!r}") from None
        if warmup < 0:
            raise ValueError("CAMERA_WARMUP must not be negative")

        return Config(
            vision_provider=vision_provider,
            log_level=log_level,
            gemini_api_key=gemini_api_key,
            gemini_base_url=gemini_base_url,
            gemini_model=gemini_model,
            openai_api_key=openai_api_key,
            openai_model=openai_model,
            anthropic_api_key=anthropic_api_key,
            claude_model=claude_model,
            camera_index=index,
            camera_warmup=warmup,
        )

    @property
    def credential(self) -> Optional[str]:
        """Credential of the active provider; None when not configured."""
        match self.vision_provider:
            case "openai":
                return self.openai_api_key
            case "anthropic":
                return self.anthropic_api_key
            case _:
                return self.gemini_api_key

    @property
    def model(self) -> str:
        match self.vision_provider:
            case "openai":
                return self.openai_model
            case "anthropic":
                return self.claude_model
            case _:
                return self.gemini_model
