"""Configuration management for the OpenAI compatibility shim."""

import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    """Application settings."""

    # Server
    PORT: int = int(os.getenv("PORT", "8790"))
    HOST: str = os.getenv("HOST", "0.0.0.0")

    # Native service
    NATIVE_BASE_URL: str = os.getenv("NATIVE_BASE_URL", "http://localhost:11434")
    NATIVE_TIMEOUT: float = float(os.getenv("NATIVE_TIMEOUT", "600"))

    # Option mapping applied when forwarding public sampling values.
    # Defaults double both (temperature 0.8 -> 1.6) to match the native scale;
    # set to 1.0 to forward values unchanged.
    TEMPERATURE_SCALE: float = float(os.getenv("TEMPERATURE_SCALE", "2.0"))
    PENALTY_SCALE: float = float(os.getenv("PENALTY_SCALE", "2.0"))

    # Usage reporting
    # When the native response carries no token counts, usage is omitted
    # unless the whitespace estimator is enabled here.
    ESTIMATE_USAGE: bool = _env_bool("ESTIMATE_USAGE")

    SYSTEM_FINGERPRINT: str = os.getenv("SYSTEM_FINGERPRINT", "fp_ollama")

    # Logging
    DEBUG_MODE: bool = _env_bool("DEBUG_MODE")
    LOG_TO_FILE: bool = _env_bool("LOG_TO_FILE")
    LOG_DIR: str = os.getenv("LOG_DIR", "logs")
    LOG_FILE: str = os.getenv("LOG_FILE", "openai_compat.log")

    # Payload logging (see utils/debug_logger.py)
    DEBUG_LOG_PAYLOADS: bool = _env_bool("DEBUG_LOG_PAYLOADS")
    DEBUG_LOG_MAX_LENGTH: int = int(os.getenv("DEBUG_LOG_MAX_LENGTH", "2000"))


settings = Settings()
