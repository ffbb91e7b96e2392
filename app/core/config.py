"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

# CORS (the web frontend calls the backend cross-origin)
CORS_ORIGINS: list[str] = [
    o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
]

# Remote generation provider (Replicate-style predictions API)
GENERATION_API_BASE: str = (
    os.getenv("GENERATION_API_BASE", "https://api.replicate.com/v1").strip().rstrip("/")
    or "https://api.replicate.com/v1"
)
# Pre-issued API token. Takes precedence; only when it is unset is a bearer
# token exchanged at the IAM endpoint for IBM_CLOUD_API_KEY.
REPLICATE_API_TOKEN: str = os.getenv("REPLICATE_API_TOKEN", "").strip()

# IBM Cloud IAM (account-level auth)
IBM_CLOUD_API_KEY: str = os.getenv("IBM_CLOUD_API_KEY", "").strip()
IAM_TOKEN_URL: str = os.getenv("IAM_TOKEN_URL", "https://iam.cloud.ibm.com/identity/token").strip()
IAM_GRANT_TYPE: str = "urn:ibm:params:oauth:grant-type:apikey"
# Tokens are treated as expired this many seconds before their real expiry.
TOKEN_REFRESH_MARGIN_SECONDS: float = 60.0

# Models
DEFAULT_TEXT_MODEL: str = "ibm-granite/granite-3.3-8b-instruct"
# Retired model ids still found in old deployments; rewritten to the default.
DEPRECATED_TEXT_MODELS: frozenset[str] = frozenset({
    "ibm/granite-13b-chat-v2",
    "ibm-granite/granite-3.0-8b-instruct",
    "ibm-granite/granite-3.1-8b-instruct",
    "ibm-granite/granite-3.2-8b-instruct",
})
VISION_MODEL: str = (
    os.getenv("VISION_MODEL", "ibm-granite/granite-vision-3.3-2b").strip()
    or "ibm-granite/granite-vision-3.3-2b"
)


def resolve_text_model(model_id: str) -> str:
    """Return the text model to call, rewriting deprecated ids to the current default."""
    model_id = (model_id or "").strip()
    if not model_id or model_id in DEPRECATED_TEXT_MODELS:
        return DEFAULT_TEXT_MODEL
    return model_id


TEXT_MODEL: str = resolve_text_model(os.getenv("TEXT_MODEL", DEFAULT_TEXT_MODEL))

# Generation parameters
MAX_NEW_TOKENS: int = 512
TEMPERATURE: float = 0.6
TOP_P: float = 0.9
# Only used with the instruct template; stops the model from writing the next turn.
STOP_SEQUENCES: tuple[str, ...] = ("User:", "\nUser")

# Polling (90 x 1s covers provider cold starts)
POLL_INTERVAL_SECONDS: float = 1.0
MAX_POLL_ATTEMPTS: int = 90

# API timeouts (seconds)
GENERATION_HTTP_TIMEOUT: float = 60.0
IAM_HTTP_TIMEOUT: float = 15.0

# Retrieval
RETRIEVAL_TOP_K: int = 3

# Streamlit UI -> backend
API_BASE: str = os.getenv("API_BASE", "http://localhost:8000").strip().rstrip("/")
