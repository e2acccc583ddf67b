"""AnalysisStateMachine — owns the analysis lifecycle and publishes snapshots."""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from src.analysis import AnalysisClient
from src.constants import (
    MSG_CREDENTIAL_MISSING,
    MSG_OBSERVER_FAILED,
    MSG_STALE_RESULT,
    MSG_TRANSITION,
)
from src.errors import CredentialMissingError, OperationCancelledError, VisionAnalystError
from src.image_source import ImageBuffer
from src.retry import CancelToken
from src.vision.client import AnalysisResult

logger = logging.getLogger(__name__)


class AnalysisState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    COMPLETE = "complete"
    FAILED = "failed"
    CREDENTIAL_MISSING = "credential-missing"


_ERROR_STATES = (AnalysisState.FAILED, AnalysisState.CREDENTIAL_MISSING)


@dataclass(frozen=True)
class AnalysisSnapshot:
    state: AnalysisState
    result: Optional[AnalysisResult] = None
    error: Optional[str] = None

    def __post_init__(self) -> None:
        match self.state:
            case AnalysisState.COMPLETE:
                valid = self.result is not None and self.error is None
            case s if s in _ERROR_STATES:
                valid = self.result is None and bool(self.error)
            case _:
                valid = self.result is None and self.error is None
        if not valid:
            raise ValueError(f"Inconsistent snapshot for state {self.state.value}")


Observer = Callable[[AnalysisSnapshot], None]


class AnalysisStateMachine:
    """idle/loading/complete/failed/credential-missing.

    Every state accepts a new acquisition, and the newest acquisition wins:
    an older in-flight analysis is cancelled and whatever it returns later is
    dropped.
    """

    def __init__(self, client: AnalysisClient) -> None:
        self._client = client
        self._snapshot = AnalysisSnapshot(AnalysisState.IDLE)
        self._observers: list[Observer] = []
        self._generation = 0
        self._token: Optional[CancelToken] = None

    @property
    def snapshot(self) -> AnalysisSnapshot:
        return self._snapshot

    @property
    def state(self) -> AnalysisState:
        return self._snapshot.state

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    async def image_acquired(self, image: ImageBuffer) -> AnalysisSnapshot:
        """Run one analysis cycle for ``image``. Never raises on analysis failure."""
        self._supersede()
        generation = self._generation

        if not self._client.is_configured:
            self._transition(
                AnalysisSnapshot(
                    AnalysisState.CREDENTIAL_MISSING,
                    error=MSG_CREDENTIAL_MISSING % self._client.provider,
                )
            )
            return self._snapshot

        token = CancelToken()
        self._token = token
        self._transition(AnalysisSnapshot(AnalysisState.LOADING))

        try:
            result = await self._client.analyze(image, token=token)
            outcome = AnalysisSnapshot(AnalysisState.COMPLETE, result=result)
        except OperationCancelledError:
            logger.debug(MSG_STALE_RESULT, generation, self._generation)
            return self._snapshot
        except CredentialMissingError as exc:
            outcome = AnalysisSnapshot(AnalysisState.CREDENTIAL_MISSING, error=str(exc))
        except VisionAnalystError as exc:
            outcome = AnalysisSnapshot(AnalysisState.FAILED, error=str(exc))
        except Exception as exc:
            logger.exception("Unexpected analysis error")
            outcome = AnalysisSnapshot(AnalysisState.FAILED, error=str(exc) or type(exc).__name__)

        if generation != self._generation:
            logger.debug(MSG_STALE_RESULT, generation, self._generation)
            return self._snapshot

        self._token = None
        self._transition(outcome)
        return self._snapshot

    def reset(self) -> None:
        self._supersede()
        self._transition(AnalysisSnapshot(AnalysisState.IDLE))

    def close(self) -> None:
        """Teardown: abandon any in-flight analysis without publishing."""
        self._supersede()

    def _supersede(self) -> None:
        match self._token:
            case None:
                pass
            case token:
                token.cancel()
        self._token = None
        self._generation += 1

    def _transition(self, snapshot: AnalysisSnapshot) -> None:
        logger.debug(MSG_TRANSITION, self._snapshot.state.value, snapshot.state.value)
        self._snapshot = snapshot
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception:
                logger.exception(MSG_OBSERVER_FAILED)
