"""
Runtime Configuration

Loads config.env once and exposes environment-derived settings as module constants.
"""

# Standard library
import os

# Third-party
from dotenv import load_dotenv

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

load_dotenv(dotenv_path=os.path.join(PROJECT_ROOT, "config.env"))


def _is_true(name: str, default: str = "false") -> bool:
    """Parse boolean-like env vars."""
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _get_int(name: str, default: int) -> int:
    """Parse integer env vars, falling back to default on bad input."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    """Parse float env vars, falling back to default on bad input."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# DeepL
DEEPL_API_KEY = os.getenv("DEEPL_API_KEY", "")
DEEPL_API_URL = os.getenv("DEEPL_API_URL", "")  # Overrides the plan-derived endpoint
TRANSLATION_TIMEOUT_SECONDS = _get_float("TRANSLATION_TIMEOUT_SECONDS", 60.0)

# DeepL rejects requests above 50,000 characters; stay below it
MAX_CHUNK_CHARS = _get_int("MAX_CHUNK_CHARS", 45000)
CHUNK_PIN_SOURCE_LANG = _is_true("CHUNK_PIN_SOURCE_LANG", "true")

# Request limits
MAX_UPLOAD_BYTES = _get_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024)
MAX_TEXT_CHARS = _get_int("MAX_TEXT_CHARS", 5000)

# Rendering font
FONT_URL = os.getenv(
    "FONT_URL",
    "https://github.com/google/fonts/raw/main/ofl/notosansjp/NotoSansJP%5Bwght%5D.ttf",
)
FONT_CACHE_PATH = os.getenv(
    "FONT_CACHE_PATH",
    os.path.join(PROJECT_ROOT, "fonts", "NotoSansJP-Regular.ttf"),
)
FONT_DOWNLOAD_TIMEOUT_SECONDS = _get_float("FONT_DOWNLOAD_TIMEOUT_SECONDS", 30.0)

# Audit log store
LOG_DIR = os.getenv("LOG_DIR", os.path.join(PROJECT_ROOT, "logs"))
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")


def use_fake_providers() -> bool:
    """
    Decide whether external services should be replaced by fakes.

    Rules:
    - TEST_MODE=true -> always fake (test safety)
    - USE_FAKE_PROVIDERS=true -> fake
    """
    return _is_true("TEST_MODE") or _is_true("USE_FAKE_PROVIDERS")
