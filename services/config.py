"""Runtime settings read from Streamlit secrets and environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

import openai

from services.classifier import DEFAULT_MODEL, DEFAULT_TIMEOUT

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


@dataclass(frozen=True)
class Settings:
    api_key: str
    model: str = DEFAULT_MODEL
    api_base: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    hierarchy_path: Optional[str] = None


def _lookup(
    key: str,
    secrets: Mapping[str, object] | None,
    environ: Mapping[str, str],
) -> str:
    if secrets is not None:
        try:
            value = secrets.get(key)
        except Exception as exc:  # st.secrets raises when no secrets.toml exists
            logger.debug("Secrets lookup for %s failed: %s", key, exc)
            value = None
        if value not in (None, ""):
            return str(value).strip()
    return str(environ.get(key, "") or "").strip()


def load_settings(
    secrets: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Build :class:`Settings`; secrets take precedence over the environment."""

    env = os.environ if environ is None else environ

    api_key = _lookup("OPENAI_API_KEY", secrets, env)
    if not api_key:
        raise ConfigError("OpenAI API key is not configured (OPENAI_API_KEY).")

    raw_timeout = _lookup("OPENAI_TIMEOUT", secrets, env)
    try:
        timeout = float(raw_timeout) if raw_timeout else float(DEFAULT_TIMEOUT)
    except ValueError:
        raise ConfigError(f"OPENAI_TIMEOUT must be a number, got {raw_timeout!r}") from None
    if timeout <= 0:
        raise ConfigError("OPENAI_TIMEOUT must be positive")

    api_base = _lookup("OPENAI_API_BASE", secrets, env)
    return Settings(
        api_key=api_key,
        model=_lookup("OPENAI_MODEL", secrets, env) or DEFAULT_MODEL,
        api_base=api_base.rstrip("/") or None,
        timeout=timeout,
        hierarchy_path=_lookup("HIERARCHY_PATH", secrets, env) or None,
    )


def build_openai_client(settings: Settings) -> openai.OpenAI:
    kwargs: dict[str, object] = {"api_key": settings.api_key}
    if settings.api_base:
        kwargs["base_url"] = settings.api_base
    try:
        return openai.OpenAI(**kwargs)
    except Exception as exc:  # pragma: no cover - client init safety
        raise ConfigError(f"OpenAI client init failed: {exc}") from exc


def configure_logging(level: str | None = None) -> None:
    """Install a console handler once; ``LOG_LEVEL`` picks the default level."""

    root = logging.getLogger()
    if root.handlers:
        return
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
