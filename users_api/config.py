# users_api/config.py
import logging
import os
from dataclasses import dataclass
from typing import Tuple

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    api_host: str = "localhost"
    api_port: int = 5000
    log_level: str = "INFO"
    cors_origins: Tuple[str, ...] = ("*",)


def get_settings() -> Settings:
    load_dotenv()

    port = os.environ.get("API_PORT", "5000")
    try:
        api_port = int(port)
    except ValueError:
        raise RuntimeError(f"API_PORT must be an integer, got {port!r}")

    origins = os.environ.get("CORS_ORIGINS", "*")
    return Settings(
        api_host=os.environ.get("API_HOST", "localhost"),
        api_port=api_port,
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
    )


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("users_api").setLevel(level)
