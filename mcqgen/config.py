import os

# Prefer env vars (e.g. set on Render). Values are read once at import time.
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_TIMEOUT = float(os.getenv("OPENAI_TIMEOUT", "30"))

# Only the head of the study text is sent to the model
PRIMARY_TEXT_LIMIT = int(os.getenv("PRIMARY_TEXT_LIMIT", "8000"))

MIN_TEXT_LENGTH = int(os.getenv("MIN_TEXT_LENGTH", "20"))
MAX_TEXT_LENGTH = int(os.getenv("MAX_TEXT_LENGTH", "200000"))
MAX_QUESTIONS = 50
DEFAULT_QUESTIONS = 10

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
GENERATION_RATE_LIMIT = os.getenv("GENERATION_RATE_LIMIT", "20/minute")
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() not in ("0", "false", "no")


def primary_enabled() -> bool:
    return bool(OPENAI_API_KEY)
