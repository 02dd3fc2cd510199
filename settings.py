import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple, Union

from rendering import RenderOptions

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: Union[str, Tuple[str, ...]] = "*"
    log_level: str = "INFO"
    render: RenderOptions = field(default_factory=RenderOptions)


def _parse_origins(raw: str) -> Union[str, Tuple[str, ...]]:
    raw = raw.strip()
    if raw == "*" or not raw:
        return "*"
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.
    Only PORT, HOST, CORS_ORIGINS and LOG_LEVEL are read; render options are fixed.
    """
    env = os.environ if environ is None else environ

    raw_port = env.get("PORT", "3000")
    try:
        port = int(raw_port)
    except ValueError:
        raise ValueError(f"PORT must be an integer, got {raw_port!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"PORT out of range: {port}")

    log_level = env.get("LOG_LEVEL", "INFO").upper()
    if log_level not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid LOG_LEVEL {log_level!r}. Use: {', '.join(VALID_LOG_LEVELS)}"
        )

    return Settings(
        host=env.get("HOST", "0.0.0.0"),
        port=port,
        cors_origins=_parse_origins(env.get("CORS_ORIGINS", "*")),
        log_level=log_level,
    )
