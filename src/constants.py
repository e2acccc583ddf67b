"""All magic values live here — no inline literals anywhere else."""

# Retry envelope shared by camera acquisition and analysis requests.
# Attempt i (0-based) that fails waits INITIAL_DELAY_SECONDS * 2**i before the next.
MAX_ATTEMPTS = 3
INITIAL_DELAY_SECONDS: float = 1.0
BACKOFF_MULTIPLIER: float = 2.0

# Providers
PROVIDER_GEMINI = "gemini"
PROVIDER_OPENAI = "openai"
PROVIDER_ANTHROPIC = "anthropic"
PROVIDERS = (PROVIDER_GEMINI, PROVIDER_OPENAI, PROVIDER_ANTHROPIC)

DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
OPENAI_VISION_MODEL = "gpt-4o"
CLAUDE_VISION_MODEL = "claude-opus-4-6"
CLAUDE_MAX_TOKENS = 1024
# Per-request ceiling; a timeout counts as one failed attempt.
REQUEST_TIMEOUT_SECONDS: float = 60.0

# Camera
DEFAULT_CAMERA_INDEX = 0
DEFAULT_CAMERA_WARMUP: float = 1.0
CAPTURE_MIME_TYPE = "image/png"
CAPTURE_EXTENSION = ".png"

# Data URL
DATA_URL_PREFIX = "data:"
DATA_URL_SEPARATOR = ";base64,"
IMAGE_MIME_PREFIX = "image/"

# Prompts and structured output
SYSTEM_PROMPT = (
    "You are a world-class object recognition and descriptive AI. "
    "Based on the input image, identify the primary subject and provide a detailed, "
    "engaging summary of it. Respond only with a JSON object."
)
USER_PROMPT = (
    "Analyze this image. Identify the object and provide a detailed description. "
    "Focus on high accuracy for the primary classification."
)
RESULT_FIELDS = ("classification", "description")
RESPONSE_MIME_TYPE = "application/json"
RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "classification": {"type": "STRING"},
        "description": {"type": "STRING"},
    },
    "required": list(RESULT_FIELDS),
}
# JSON-Schema spelling of the same contract, for OpenAI structured outputs.
RESPONSE_JSON_SCHEMA = {
    "name": "image_analysis",
    "strict": True,
    "schema": {
        "type": "object",
        "properties": {
            "classification": {"type": "string"},
            "description": {"type": "string"},
        },
        "required": list(RESULT_FIELDS),
        "additionalProperties": False,
    },
}

# Error messages
MSG_CREDENTIAL_MISSING = "API key is missing. Set the credential for the '%s' provider in .env."
MSG_INVALID_FILE_TYPE = "Please select a valid image file."
MSG_FILE_READ_ERROR = "Error reading the selected file."
MSG_FRAME_NOT_READY = "Video stream not ready. Try again in a moment."
MSG_CAMERA_INACTIVE = "Camera is not active. Please start the camera first."
MSG_CAMERA_UNAVAILABLE = "Cannot start camera after %d attempts. Error: %s. Check permissions."
MSG_DEVICE_NOT_READABLE = "Could not open video device %s"
MSG_FRAME_ENCODE_FAILED = "Could not encode the captured frame"
MSG_HTTP_ERROR = "HTTP error! status: %d"
MSG_EMPTY_RESPONSE = "API returned an empty or malformed response."
MSG_INVALID_JSON = "API returned text that is not valid JSON: %s"
MSG_NOT_AN_OBJECT = "API returned JSON that is not an object."
MSG_MISSING_FIELD = "API response is missing string field '%s'."
MSG_ANALYSIS_FAILED = "Analysis failed after %d attempts. Error: %s"
MSG_CANCELLED = "Operation cancelled"

# Log messages
MSG_ATTEMPT_FAILED = "%s failed (attempt %d/%d): %s"
MSG_RETRYING = "Retrying %s in %.1fs"
MSG_CAMERA_STARTED = "Camera streaming (%dx%d)"
MSG_CAMERA_STOPPED = "Camera stopped"
MSG_TRANSITION = "Analysis state: %s -> %s"
MSG_STALE_RESULT = "Discarding stale analysis (generation %d, current %d)"
MSG_OBSERVER_FAILED = "Analysis observer raised"

# Status bar (label, rich style)
STATUS_READY = ("Ready for Analysis", "white on blue")
STATUS_STREAMING = ("Camera Active - Snap to Analyze", "black on yellow")
STATUS_LOADING = ("Analyzing...", "white on purple")
STATUS_COMPLETE = ("Analysis Complete", "white on green")
STATUS_FAILED = ("Analysis Failed", "white on red")
STATUS_CREDENTIAL_MISSING = ("API Key Missing!", "bold white on dark_red")

# Result panel
MSG_NO_DESCRIPTION = "No description available."
MSG_DESCRIPTION_FAILED = "Failed to retrieve description."
MSG_CLASSIFICATION_PENDING = "Identifying primary subject..."
MSG_DESCRIPTION_PENDING = "Generating detailed summary..."
MSG_NOT_AVAILABLE = "N/A"
LABEL_CLASSIFICATION = "Classification:"
LABEL_DESCRIPTION = "Detailed Description:"
PANEL_TITLE = "AI Analysis Feed"

# CLI
PROG_NAME = "vision-analyst"
MSG_CLI_DESCRIPTION = "Classify and describe a still image with a multimodal model."
MSG_STARTING = "Starting vision analyst (provider: %s)"
MSG_NO_INPUT = "Provide an image path or --camera."
