import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    env: str
    port: str
    prefix: str

    sirius_url: str
    sirius_public_url: str
    platform_timeout_seconds: float


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def load_settings() -> Settings:
    sirius_url = _getenv("SIRIUS_URL", "http://localhost:9001")
    return Settings(
        env=_getenv("ENV", "development"),
        port=_getenv("PORT", "8080"),
        prefix=_getenv("PREFIX", "").rstrip("/"),
        sirius_url=sirius_url.rstrip("/"),
        sirius_public_url=_getenv("SIRIUS_PUBLIC_URL", sirius_url).rstrip("/"),
        platform_timeout_seconds=float(_getenv("PLATFORM_TIMEOUT_SECONDS", "30")),
    )


def load_config() -> dict:
    s = load_settings()
    return {
        "ENV": s.env,
        "PORT": s.port,
        "PREFIX": s.prefix,
        "SIRIUS_URL": s.sirius_url,
        "SIRIUS_PUBLIC_URL": s.sirius_public_url,
        "PLATFORM_TIMEOUT_SECONDS": s.platform_timeout_seconds,
    }
