import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


class Config:
    class APP:
        NAME = "Hybrid Math Solver API"
        VERSION = "2.0.0"
        ENVIRONMENT = os.getenv("APP_ENV", "development")

    # === LLM Backend ===

    class GEMINI:
        API_KEY = os.getenv("GEMINI_API_KEY")
        MODEL_NAME = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
        BASE_URL = os.getenv(
            "GEMINI_BASE_URL",
            "https://generativelanguage.googleapis.com/v1beta/openai/",
        )
        TEMPERATURE = float(os.getenv("GEMINI_TEMPERATURE", "0.7"))
        TOP_P = float(os.getenv("GEMINI_TOP_P", "0.9"))
        _max_tokens = os.getenv("GEMINI_MAX_TOKENS")
        MAX_TOKENS: int | None = int(_max_tokens) if _max_tokens else None
        TIMEOUT = float(os.getenv("GEMINI_TIMEOUT", "60"))

    # === Server ===

    class SERVER:
        HOST = os.getenv("HOST", "0.0.0.0")
        PORT = int(os.getenv("PORT", "3000"))

    class CORS:
        DEFAULT_ORIGINS = [
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "https://math-solver2.vercel.app",
        ]
        ALLOW_ALL = _env_flag("CORS_ALLOW_ALL")
        _extra = os.getenv("ALLOWED_ORIGINS", "")
        EXTRA_ORIGINS = [o.strip().rstrip("/") for o in _extra.split(",") if o.strip()]
        FRONTEND_URL = os.getenv("FRONTEND_URL")

    # === Input Processing ===

    class INPUT_PROCESSING:
        MAX_PROBLEM_LENGTH = int(os.getenv("MAX_PROBLEM_LENGTH", "5000"))

    # === Logging ===

    class LOGGING:
        DIR = os.getenv("LOG_DIR", "logs")
        LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        KEEP_DAYS = int(os.getenv("LOG_KEEP_DAYS", "7"))


def cors_allows_all() -> bool:
    """Any origin is accepted in development or when CORS_ALLOW_ALL is set."""
    return Config.APP.ENVIRONMENT == "development" or Config.CORS.ALLOW_ALL


def allowed_origins() -> list[str]:
    """Default frontend origins plus any configured through ALLOWED_ORIGINS."""
    origins = list(Config.CORS.DEFAULT_ORIGINS)
    for origin in Config.CORS.EXTRA_ORIGINS:
        if origin not in origins:
            origins.append(origin)
    return origins
