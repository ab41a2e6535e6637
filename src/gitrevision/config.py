"""Runtime settings for revision detection, read from the environment."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

DEFAULT_REMOTE_URL = "https://www.phpmyadmin.net"
DEFAULT_REMOTE_TIMEOUT = 10.0

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    """Feature toggles and remote API location."""

    show_git_revision: bool = True
    remote_enabled: bool = True
    remote_url: str = DEFAULT_REMOTE_URL
    remote_timeout: float = DEFAULT_REMOTE_TIMEOUT


def _parse_bool(name: str, value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


def load_settings(environ: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> Settings:
    """Build Settings from ``GITREVISION_*`` variables.

    Args:
        environ: Mapping to read instead of ``os.environ``.
        dotenv: Load a ``.env`` file into the process environment first.
    """
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True))
    env = os.environ if environ is None else environ

    timeout_raw = env.get("GITREVISION_REMOTE_TIMEOUT")
    try:
        timeout = float(timeout_raw) if timeout_raw else DEFAULT_REMOTE_TIMEOUT
    except ValueError:
        raise ValueError(f"GITREVISION_REMOTE_TIMEOUT must be a number, got {timeout_raw!r}")

    return Settings(
        show_git_revision=_parse_bool("GITREVISION_SHOW", env.get("GITREVISION_SHOW"), True),
        remote_enabled=_parse_bool("GITREVISION_REMOTE_ENABLED", env.get("GITREVISION_REMOTE_ENABLED"), True),
        remote_url=(env.get("GITREVISION_REMOTE_URL") or DEFAULT_REMOTE_URL).rstrip("/"),
        remote_timeout=timeout,
    )
