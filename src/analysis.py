"""AnalysisClient — credential check, retry envelope and response validation
around a single VisionClient backend."""
import json
import logging
from typing import Optional

from src.constants import (
    MSG_ANALYSIS_FAILED,
    MSG_CREDENTIAL_MISSING,
    MSG_INVALID_JSON,
    MSG_MISSING_FIELD,
    MSG_NOT_AN_OBJECT,
    PROVIDER_GEMINI,
    RESULT_FIELDS,
)
from src.errors import AnalysisFailedError, CredentialMissingError, MalformedResponseError
from src.image_source import ImageBuffer
from src.retry import CancelToken, RetryExhaustedError, RetryPolicy, Sleep, retry_with_backoff
from src.vision.client import AnalysisRequest, AnalysisResult, VisionClient

logger = logging.getLogger(__name__)


def parse_result(text: str) -> AnalysisResult:
    """Validate the structured-output text. Raises MalformedResponseError."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(MSG_INVALID_JSON % exc.msg) from exc

    if not isinstance(data, dict):
        raise MalformedResponseError(MSG_NOT_AN_OBJECT)

    missing = [field for field in RESULT_FIELDS if not isinstance(data.get(field), str)]
    match missing:
        case []:
            return AnalysisResult(
                classification=data["classification"],
                description=data["description"],
            )
        case [field, *_]:
            raise MalformedResponseError(MSG_MISSING_FIELD % field)


class AnalysisClient:
    """Turns an ImageBuffer into an AnalysisResult or a typed failure.

    Never touches display state: outcomes go back to the caller only.
    """

    def __init__(
        self,
        backend: VisionClient,
        provider: str = PROVIDER_GEMINI,
        policy: RetryPolicy = RetryPolicy(),
        sleep: Sleep | None = None,
    ) -> None:
        self._backend = backend
        self._provider = provider
        self._policy = policy
        self._sleep = sleep

    @property
    def is_configured(self) -> bool:
        return self._backend.is_configured

    @property
    def provider(self) -> str:
        return self._provider

    async def analyze(
        self, image: ImageBuffer, token: Optional[CancelToken] = None
    ) -> AnalysisResult:
        if not self.is_configured:
            raise CredentialMissingError(MSG_CREDENTIAL_MISSING % self._provider)

        request = AnalysisRequest(image=image)

        async def attempt() -> AnalysisResult:
            return parse_result(await self._backend.generate(request))

        try:
            return await retry_with_backoff(
                attempt,
                self._policy,
                label="Analysis",
                token=token,
                sleep=self._sleep,
            )
        except RetryExhaustedError as exc:
            raise AnalysisFailedError(
                MSG_ANALYSIS_FAILED % (exc.attempts, exc.last_error),
                attempts=exc.attempts,
                last_error=exc.last_error,
            ) from exc.last_error
