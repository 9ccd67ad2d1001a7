"""Typed configuration for the ``lingo-quiz`` command line.

Settings come from ``lingo-quiz.toml``. Every key has a default, so the file
is optional unless a path is given explicitly.
"""

from __future__ import annotations

import copy
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional

__all__ = [
    "CONFIG_FILENAME",
    "CONFIG_PATH_ENV",
    "ConfigError",
    "ConfigOrigin",
    "LoggingSettings",
    "QuizSettings",
    "SessionSettings",
    "StorageSettings",
    "config_template",
    "default_tree",
    "load_settings",
    "resolve_config_path",
    "write_template",
]

CONFIG_FILENAME = "lingo-quiz.toml"
CONFIG_PATH_ENV = "LINGO_QUIZ_CONFIG"

ConfigOrigin = Literal["flag", "env", "cwd"]

_ORIGIN_LABELS: Dict[str, str] = {
    "flag": "--config",
    "env": CONFIG_PATH_ENV,
    "cwd": "the working directory",
}

_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class SessionSettings:
    show_explanations: bool


@dataclass(frozen=True)
class StorageSettings:
    attempts_path: Path


@dataclass(frozen=True)
class LoggingSettings:
    level: str
    verbose: bool
    log_dir: Path


@dataclass(frozen=True)
class QuizSettings:
    session: SessionSettings
    storage: StorageSettings
    logging: LoggingSettings
    source: Optional[Path] = None


_DEFAULTS: Dict[str, Any] = {
    "session": {
        "show_explanations": True,
    },
    "storage": {
        "attempts_path": "~/.lingo-quiz/attempts.jsonl",
    },
    "logging": {
        "level": "INFO",
        "verbose": False,
        "log_dir": "~/.lingo-quiz/logs",
    },
}


def default_tree() -> Dict[str, Any]:
    """Return a copy of the default configuration tree."""

    return copy.deepcopy(_DEFAULTS)


def resolve_config_path(
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
) -> tuple[Path, ConfigOrigin]:
    """Return the config path and where it was chosen from.

    Only a ``cwd`` path may be missing; the other origins name a file the
    user asked for.
    """

    env_map = os.environ if env is None else env
    if explicit_path is not None:
        return Path(explicit_path).expanduser().resolve(), "flag"
    override = env_map.get(CONFIG_PATH_ENV)
    if override:
        return Path(override).expanduser().resolve(), "env"
    return (Path.cwd() / CONFIG_FILENAME).resolve(), "cwd"


def load_settings(
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
) -> QuizSettings:
    """Load settings, laying the TOML tables over the defaults."""

    path, origin = resolve_config_path(explicit_path=explicit_path, env=env)
    tree = default_tree()
    if origin == "cwd" and not path.exists():
        return _build_settings(tree, None)
    _apply_tables(tree, _read_config(path, origin), path)
    return _build_settings(tree, path)


def config_template() -> str:
    return _CONFIG_TEMPLATE.strip() + "\n"


def write_template(path: Path, *, overwrite: bool = False) -> Path:
    """Write the commented template; refuse to clobber without ``overwrite``."""

    if path.exists() and not overwrite:
        raise ConfigError(
            f"{path} already exists; pass --force to replace it."
        )
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(config_template(), encoding="utf-8")
    try:
        path.chmod(0o600)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path


def _read_config(path: Path, origin: ConfigOrigin) -> Mapping[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ConfigError(
            f"Config file not found: {path} (from {_ORIGIN_LABELS[origin]})."
        ) from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc


def _apply_tables(
    tree: Dict[str, Dict[str, Any]],
    document: Mapping[str, Any],
    path: Path,
) -> None:
    # Settings are exactly two levels deep: [table] then scalar keys.
    for table, values in document.items():
        if table not in tree:
            known = ", ".join(f"[{name}]" for name in tree)
            raise ConfigError(
                f"{path.name}: unknown table [{table}]; expected {known}."
            )
        if not isinstance(values, Mapping):
            raise ConfigError(
                f"{path.name}: '{table}' must be a [{table}] table, "
                f"found {type(values).__name__}."
            )
        defaults = tree[table]
        for key, value in values.items():
            if key not in defaults:
                allowed = ", ".join(sorted(defaults))
                raise ConfigError(
                    f"{path.name}: unknown key '{table}.{key}' "
                    f"(allowed: {allowed})."
                )
            defaults[key] = value


def _build_settings(
    tree: Mapping[str, Any], source: Optional[Path]
) -> QuizSettings:
    session = tree["session"]
    storage = tree["storage"]
    log = tree["logging"]
    level = _require_string(log["level"], field="logging.level").upper()
    if level not in _LEVELS:
        raise ConfigError(
            "logging.level must be one of "
            "DEBUG, INFO, WARNING, ERROR, CRITICAL."
        )
    return QuizSettings(
        session=SessionSettings(
            show_explanations=_require_bool(
                session["show_explanations"],
                field="session.show_explanations",
            ),
        ),
        storage=StorageSettings(
            attempts_path=_require_path(
                storage["attempts_path"], field="storage.attempts_path"
            ),
        ),
        logging=LoggingSettings(
            level=level,
            verbose=_require_bool(log["verbose"], field="logging.verbose"),
            log_dir=_require_path(log["log_dir"], field="logging.log_dir"),
        ),
        source=source,
    )


def _require_bool(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"'{field}' must be a boolean.")
    return value


def _require_string(value: Any, *, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{field}' must be a non-empty string.")
    return value.strip()


def _require_path(value: Any, *, field: str) -> Path:
    return Path(_require_string(value, field=field)).expanduser()


_CONFIG_TEMPLATE = """
# lingo-quiz configuration

[session]
# Show question explanations in the review after submitting
show_explanations = true

[storage]
# JSON-lines file that receives one record per submitted attempt
attempts_path = "~/.lingo-quiz/attempts.jsonl"

[logging]
level = "INFO"
# Mirror log records to stderr
verbose = false
log_dir = "~/.lingo-quiz/logs"
"""
