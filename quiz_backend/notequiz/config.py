import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv


DEFAULT_MODEL = "claude-sonnet-4-5"
DEFAULT_DATA_FILE = "./data/notequiz.json"
DEFAULT_UPLOADS_DIR = "uploads"


def _split_origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()] or ["*"]


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, read once from the environment."""
    anthropic_api_key: Optional[str] = None
    anthropic_model: str = DEFAULT_MODEL
    max_tokens: int = 1000
    temperature: float = 0.5
    question_count: int = 5
    data_file: str = DEFAULT_DATA_FILE
    notes_root: str = field(default_factory=os.getcwd)
    uploads_dir: str = DEFAULT_UPLOADS_DIR
    ocr_language: str = "eng"
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    # PUBLIC_INTERFACE
    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables.

        A .env file in the working directory is loaded first if present;
        variables already set in the process environment take precedence.
        """
        load_dotenv()
        return cls(
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
            anthropic_model=os.getenv("ANTHROPIC_MODEL", DEFAULT_MODEL),
            max_tokens=int(os.getenv("QUIZ_MAX_TOKENS", "1000")),
            temperature=float(os.getenv("QUIZ_TEMPERATURE", "0.5")),
            question_count=int(os.getenv("QUIZ_QUESTION_COUNT", "5")),
            data_file=os.getenv("QUIZ_DATA_FILE", DEFAULT_DATA_FILE),
            notes_root=os.getenv("NOTES_ROOT") or os.getcwd(),
            uploads_dir=os.getenv("UPLOADS_DIR", DEFAULT_UPLOADS_DIR),
            ocr_language=os.getenv("OCR_LANGUAGE", "eng"),
            cors_allow_origins=_split_origins(os.getenv("CORS_ALLOW_ORIGINS")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
        )


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached process-wide settings."""
    return Settings.from_env()
