import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Rooms
    ROOM_CODE_LENGTH = int(os.environ.get("ROOM_CODE_LENGTH", "3"))
    ROOM_CODE_ATTEMPTS = int(os.environ.get("ROOM_CODE_ATTEMPTS", "50"))

    # Content generation
    CONTENT_MODE = os.environ.get("CONTENT_MODE", "songs")
    CONTENT_LANGUAGES = [
        l.strip() for l in os.environ.get("CONTENT_LANGUAGES", "").split(",") if l.strip()
    ]
    CONTENT_TARGET_SIZE = int(os.environ.get("CONTENT_TARGET_SIZE", "75"))
    CONTENT_INITIAL_BATCH = int(os.environ.get("CONTENT_INITIAL_BATCH", "3"))
    CONTENT_BATCH_SIZE = int(os.environ.get("CONTENT_BATCH_SIZE", "5"))

    # Upstream suppliers (empty generator URL: built-in catalog only)
    CONTENT_GENERATOR_URL = os.environ.get("CONTENT_GENERATOR_URL", "")
    DEEZER_ENABLED = os.environ.get("DEEZER_ENABLED", "0") == "1"
    DEEZER_BASE_URL = os.environ.get("DEEZER_BASE_URL", "https://api.deezer.com")
    HTTP_TIMEOUT_SEC = float(os.environ.get("HTTP_TIMEOUT_SEC", "10"))
    SUPPLIER_MAX_ATTEMPTS = int(os.environ.get("SUPPLIER_MAX_ATTEMPTS", "3"))
    SUPPLIER_BACKOFF_SEC = float(os.environ.get("SUPPLIER_BACKOFF_SEC", "0.5"))
