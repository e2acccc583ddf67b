"""GeminiVisionClient — generateContent REST backend over httpx."""
import logging
from typing import Any, Optional

import httpx

from src.constants import (
    MSG_EMPTY_RESPONSE,
    MSG_HTTP_ERROR,
    MSG_INVALID_FILE_TYPE,
    REQUEST_TIMEOUT_SECONDS,
    RESPONSE_MIME_TYPE,
    RESPONSE_SCHEMA,
)
from src.errors import InvalidFileTypeError, MalformedResponseError, TransportError
from src.image_source import parse_data_url
from src.vision.client import AnalysisRequest, VisionClient

logger = logging.getLogger(__name__)


def build_payload(request: AnalysisRequest) -> dict[str, Any]:
    image = parse_data_url(request.image.to_data_url())
    if image is None:
        raise InvalidFileTypeError(MSG_INVALID_FILE_TYPE)
    return {
        "contents": [
            {
                "role": "user",
                "parts": [
                    {"text": request.user_prompt},
                    {
                        "inlineData": {
                            "mimeType": image.mime_type,
                            "data": image.base64,
                        }
                    },
                ],
            }
        ],
        "systemInstruction": {"parts": [{"text": request.system_prompt}]},
        "generationConfig": {
            "responseMimeType": RESPONSE_MIME_TYPE,
            "responseSchema": RESPONSE_SCHEMA,
        },
    }


def extract_text(body: Any) -> Optional[str]:
    """Pull ``candidates[0].content.parts[0].text`` out of a response body."""
    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) else None


class GeminiVisionClient(VisionClient):

    def __init__(
        self,
        api_key: str | None,
        base_url: str,
        model: str,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(api_key)
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._http_client = http_client

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/{self._model}:generateContent"

    async def generate(self, request: AnalysisRequest) -> str:
        payload = build_payload(request)
        try:
            response = await self._post(payload)
        except httpx.HTTPError as exc:
            raise TransportError(str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            raise TransportError(MSG_HTTP_ERROR % response.status_code)

        try:
            body = response.json()
        except ValueError as exc:
            raise MalformedResponseError(MSG_EMPTY_RESPONSE) from exc

        match extract_text(body):
            case str() as text if text.strip():
                return text
            case _:
                raise MalformedResponseError(MSG_EMPTY_RESPONSE)

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        params = {"key": self._api_key or ""}
        match self._http_client:
            case None:
                async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT_SECONDS) as client:
                    return await client.post(self.endpoint, params=params, json=payload)
            case client:
                return await client.post(self.endpoint, params=params, json=payload)
