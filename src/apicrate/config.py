"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles the small amount of user configuration apicrate reads:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.apicrate/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- An optional :class:`~apicrate.models.GlobalConfig`
  JSON file storing defaults (extra authors, generator option overrides,
  executables).
* **Precedence resolution** -- :func:`resolve_config` layers environment
  variables over the global config file.

Every generated document apicrate writes goes through
:func:`atomic_write` so an interrupted run never leaves a half-written file.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from apicrate.exceptions import ConfigError
from apicrate.models import GlobalConfig
from apicrate.output import debug

_APP_NAME = "apicrate"
_CONFIG_FILENAME = "config.json"

ENV_AUTHORS = "APICRATE_AUTHORS"
"""Semicolon-separated extra authors, used when ``--authors`` is absent."""

ENV_CARGO = "APICRATE_CARGO"
"""Overrides the package manager executable (``cargo``)."""


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory without creating it.

    On Linux/BSD: ``$XDG_CONFIG_HOME/apicrate/`` (default ``~/.config/apicrate/``).
    On macOS/Windows: ``~/.apicrate/``.

    apicrate only ever reads ``config.json`` from here, so a missing
    directory simply means there is no user configuration.

    Returns:
        Absolute path to the configuration directory.
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_CONFIG_HOME", (".config",))
        return base / _APP_NAME
    return _fallback_base_dir()


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/apicrate/`` (default ``~/.local/share/apicrate/``).
    On macOS/Windows: ``~/.apicrate/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_DATA_HOME", (".local", "share"))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the original exception re-raised.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~apicrate.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


# --- Precedence resolution ---


def resolve_config() -> GlobalConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. Environment variables (``APICRATE_AUTHORS``, ``APICRATE_CARGO``)
        2. User config (``~/.config/apicrate/config.json``)
        3. Defaults

    CLI flags sit above all of these; they are applied by
    :func:`apicrate.parameters.resolve_context`.

    Returns:
        The effective :class:`~apicrate.models.GlobalConfig`.
    """
    config = load_global_config()

    env_authors = os.environ.get(ENV_AUTHORS)
    if env_authors:
        config.authors = env_authors.split(";")
        debug(f"Authors taken from {ENV_AUTHORS}")

    env_cargo = os.environ.get(ENV_CARGO)
    if env_cargo:
        config.cargo = env_cargo
        debug(f"Package manager taken from {ENV_CARGO}: {env_cargo}")

    return config
