"""ClaudeVisionClient — Anthropic Claude vision backend."""
from anthropic import AsyncAnthropic

from src.constants import CLAUDE_MAX_TOKENS, CLAUDE_VISION_MODEL, MSG_EMPTY_RESPONSE
from src.errors import MalformedResponseError
from src.vision.client import AnalysisRequest, VisionClient

_FENCE = "```"


def strip_code_fence(text: str) -> str:
    """Claude sometimes wraps JSON in a ```json fence even when told not to."""
    stripped = text.strip()
    if not (stripped.startswith(_FENCE) and stripped.endswith(_FENCE)):
        return stripped
    body = stripped[len(_FENCE):-len(_FENCE)]
    first_newline = body.find("\n")
    match first_newline:
        case -1:
            return body.strip()
        case n:
            return body[n + 1:].strip()


class ClaudeVisionClient(VisionClient):

    def __init__(self, api_key: str | None, model: str = CLAUDE_VISION_MODEL) -> None:
        super().__init__(api_key)
        self._model = model

    async def generate(self, request: AnalysisRequest) -> str:
        client = AsyncAnthropic(api_key=self._api_key, max_retries=0)
        message = await client.messages.create(
            model=self._model,
            max_tokens=CLAUDE_MAX_TOKENS,
            system=request.system_prompt,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": request.image.mime_type,
                                "data": request.image.base64,
                            },
                        },
                        {"type": "text", "text": request.user_prompt},
                    ],
                }
            ],
        )
        match message.content:
            case [first, *_] if getattr(first, "text", "").strip():
                return strip_code_fence(first.text)
            case _:
                raise MalformedResponseError(MSG_EMPTY_RESPONSE)
