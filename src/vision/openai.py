"""OpenAIVisionClient — OpenAI chat completions backend with structured outputs."""
from openai import AsyncOpenAI

from src.constants import MSG_EMPTY_RESPONSE, OPENAI_VISION_MODEL, RESPONSE_JSON_SCHEMA
from src.errors import MalformedResponseError
from src.vision.client import AnalysisRequest, VisionClient


class OpenAIVisionClient(VisionClient):

    def __init__(self, api_key: str | None, model: str = OPENAI_VISION_MODEL) -> None:
        super().__init__(api_key)
        self._model = model

    async def generate(self, request: AnalysisRequest) -> str:
        # retries are owned by AnalysisClient
        client = AsyncOpenAI(api_key=self._api_key, max_retries=0)
        response = await client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": request.system_prompt},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": request.user_prompt},
                        {
                            "type": "image_url",
                            "image_url": {"url": request.image.to_data_url()},
                        },
                    ],
                },
            ],
            response_format={"type": "json_schema", "json_schema": RESPONSE_JSON_SCHEMA},
        )
        content = response.choices[0].message.content
        match content:
            case str() as text if text.strip():
                return text.strip()
            case _:
                raise MalformedResponseError(MSG_EMPTY_RESPONSE)
