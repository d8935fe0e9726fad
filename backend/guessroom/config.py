import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Used to build join links when the request carries no Host header
    PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL", "")

    # Rooms
    ROOM_CODE_LENGTH = int(os.environ.get("ROOM_CODE_LENGTH", "6"))

    # Question generation (OpenAI-compatible chat completions). Empty key -> offline samples.
    OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY", "")
    OPENAI_BASE_URL = os.environ.get("OPENAI_BASE_URL", "https://api.openai.com/v1")
    OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
    QUESTION_TIMEOUT_SEC = float(os.environ.get("QUESTION_TIMEOUT_SEC", "20"))
    QUESTION_FALLBACK_ON_ERROR = os.environ.get("QUESTION_FALLBACK_ON_ERROR", "1") == "1"

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Socket.IO async mode; empty picks a default for the platform.
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()
