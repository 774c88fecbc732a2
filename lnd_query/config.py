"""
Environment-driven configuration.

Values come from the process environment, optionally seeded from a
.env file in the working directory. load_config() validates everything
up front and raises ValueError with a readable message.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

from .channels import DEFAULT_MAX_LOCAL_RATIO, DEFAULT_MIN_LOCAL_RATIO, HealthCriteria


DEFAULT_REST_URL = "https://localhost:8080"
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_LOG_LEVEL = "INFO"


def _is_local_host(hostname: str) -> bool:
    return hostname in {"127.0.0.1", "localhost", "::1"}


def _flag(env: Mapping[str, str], name: str) -> bool:
    return env.get(name, "false").lower() == "true"


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


@dataclass
class LndConfig:
    rest_url: str
    macaroon_path: str
    tls_cert_path: Optional[str] = None
    allow_insecure_tls: bool = False
    allow_insecure_http: bool = False
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    health_criteria: HealthCriteria = field(default_factory=HealthCriteria)
    log_level: str = DEFAULT_LOG_LEVEL


def _validate_rest_url(rest_url: str, allow_insecure_http: bool) -> Optional[str]:
    parsed = urlparse(rest_url)
    if not parsed.scheme or not parsed.netloc:
        return f"LND_REST_URL is not a valid URL: {rest_url!r}"
    if parsed.scheme not in ("http", "https"):
        return f"LND_REST_URL must use http or https, got {parsed.scheme!r}"
    if parsed.scheme == "http" and not _is_local_host(parsed.hostname or "") and not allow_insecure_http:
        return "LND_REST_URL uses http for non-local host. Set LND_ALLOW_INSECURE_HTTP=true to override."
    return None


def load_config(env: Optional[Mapping[str, str]] = None) -> LndConfig:
    """
    Build an LndConfig from environment variables.

    Args:
        env: Mapping to read instead of os.environ (no .env loading then)

    Raises:
        ValueError: on missing or invalid settings
    """
    if env is None:
        load_dotenv()
        env = os.environ

    macaroon_path = env.get("LND_MACAROON_PATH")
    if not macaroon_path:
        raise ValueError("Missing required environment variable: LND_MACAROON_PATH")

    rest_url = env.get("LND_REST_URL") or DEFAULT_REST_URL
    allow_insecure_http = _flag(env, "LND_ALLOW_INSECURE_HTTP")
    error = _validate_rest_url(rest_url, allow_insecure_http)
    if error:
        raise ValueError(error)

    http_timeout = _float(env, "LND_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT)
    if http_timeout <= 0:
        raise ValueError(f"LND_HTTP_TIMEOUT must be positive, got {http_timeout}")

    criteria = HealthCriteria(
        min_local_ratio=_float(env, "LND_HEALTH_MIN_LOCAL_RATIO", DEFAULT_MIN_LOCAL_RATIO),
        max_local_ratio=_float(env, "LND_HEALTH_MAX_LOCAL_RATIO", DEFAULT_MAX_LOCAL_RATIO),
    )

    return LndConfig(
        rest_url=rest_url,
        macaroon_path=macaroon_path,
        tls_cert_path=env.get("LND_TLS_CERT_PATH") or None,
        allow_insecure_tls=_flag(env, "LND_ALLOW_INSECURE_TLS"),
        allow_insecure_http=allow_insecure_http,
        http_timeout=http_timeout,
        health_criteria=criteria,
        log_level=(env.get("LND_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
    )
