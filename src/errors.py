"""Failure taxonomy. Every error carries a stable ``kind`` tag for observers."""


class VisionAnalystError(Exception):
    kind = "error"


# ── acquisition ───────────────────────────────────────────────────────────────


class InvalidFileTypeError(VisionAnalystError):
    kind = "invalid-file-type"


class FileReadError(VisionAnalystError):
    kind = "file-read-error"


class FrameNotReadyError(VisionAnalystError):
    kind = "frame-not-ready"


class CameraInactiveError(VisionAnalystError):
    kind = "camera-inactive"


class CameraUnavailableError(VisionAnalystError):
    kind = "camera-unavailable"

    def __init__(self, message: str, error_name: str) -> None:
        super().__init__(message)
        self.error_name = error_name


class DeviceNotReadableError(VisionAnalystError):
    """Raised by a device backend when the video device cannot be opened."""

    kind = "device-not-readable"


# ── analysis ──────────────────────────────────────────────────────────────────


class CredentialMissingError(VisionAnalystError):
    kind = "credential-missing"


class TransportError(VisionAnalystError):
    kind = "transport-failure"


class MalformedResponseError(VisionAnalystError):
    kind = "malformed-response"


class AnalysisFailedError(VisionAnalystError):
    """Terminal failure after the retry budget is spent."""

    def __init__(self, message: str, attempts: int, last_error: BaseException) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error
        self.kind = getattr(last_error, "kind", TransportError.kind)


class OperationCancelledError(VisionAnalystError):
    kind = "cancelled"
