#!/usr/bin/env python3
# conch/config.py
from __future__ import annotations

"""
Configuration loader (stdlib-only).

Precedence (low → high):
  1) Built-in defaults
  2) Files in the search directory: .env, conch.ini, conch.json, conch.toml
  3) Environment variables prefixed with CONCH_ (CONCH_PROMPT, ...)

Validation:
  - PROMPT / MULTI_PROMPT: str (may be empty)
  - HISTORY_FILE / LOG_FILE_PATH: None or normalized path
  - IGNORE_CASE / AUTO_HELP / ENABLE_COMPLETION: bool
  - LOG_LEVEL: one of {'DEBUG','INFO','WARNING','ERROR','CRITICAL'}
  - LINE_SOURCE: one of {'auto','prompt_toolkit','readline','plain'}
"""

from dataclasses import dataclass, field
from typing import Any, Mapping
from pathlib import Path
import configparser
import json
import os
import re
import tomllib  # stdlib in 3.11+

from conch.interface.source import SOURCE_KINDS

ENV_PREFIX = "CONCH_"

# ---------- defaults ----------

DEFAULTS: dict[str, Any] = {
    "PROMPT": ">>> ",
    "MULTI_PROMPT": "... ",
    "HISTORY_FILE": None,
    "IGNORE_CASE": False,
    "AUTO_HELP": True,
    "ENABLE_COMPLETION": True,
    "LOG_LEVEL": "WARNING",
    "LOG_FILE_PATH": None,
    "LINE_SOURCE": "auto",
}

# ---------- data model ----------


@dataclass(frozen=True)
class ShellConfig:
    prompt: str = DEFAULTS["PROMPT"]
    multi_prompt: str = DEFAULTS["MULTI_PROMPT"]
    history_file: Path | None = None

    ignore_case: bool = False
    auto_help: bool = True
    enable_completion: bool = True

    log_level: str = DEFAULTS["LOG_LEVEL"]
    log_file_path: Path | None = None
    line_source: str = DEFAULTS["LINE_SOURCE"]

    # Unrecognized keys preserved for debugging/forward-compat
    extra: dict[str, Any] = field(default_factory=dict)


# ---------- file loaders (stdlib) ----------

def _load_env_file(path: Path) -> dict[str, str]:
    """Very small .env parser: KEY=VALUE, supports quotes; ignores comments/blank lines."""
    out: dict[str, str] = {}
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return out

    line_re = re.compile(r"""^\s*([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*?)\s*$""")
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        m = line_re.match(line)
        if not m:
            continue
        k, v = m.group(1), m.group(2)
        if (v.startswith("'") and v.endswith("'")) or (v.startswith('"') and v.endswith('"')):
            v = v[1:-1]
        out[k] = v
    return out


def _load_ini_file(path: Path) -> dict[str, str]:
    cfg = configparser.ConfigParser()
    cfg.read(path, encoding="utf-8")  # missing files are skipped
    flat: dict[str, str] = {}
    for sec in cfg.sections():
        for k, v in cfg.items(sec):
            flat[k.upper()] = v
    return flat


def _load_json_file(path: Path) -> dict[str, Any]:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}


def _load_toml_file(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        return {}


def _flatten_mapping(obj: Any, prefix: str = "") -> dict[str, Any]:
    """
    Flatten nested dicts to UPPER_SNAKE keys.
    Example: {'shell': {'prompt': '> '}} -> {'SHELL_PROMPT': '> '}
    """
    flat: dict[str, Any] = {}
    if isinstance(obj, Mapping):
        for k, v in obj.items():
            key = f"{prefix}_{k}" if prefix else str(k)
            if isinstance(v, Mapping):
                flat.update(_flatten_mapping(v, key))
            else:
                flat[str(key).upper()] = v
    return flat


def _find_config_files(directory: Path) -> list[Path]:
    return [
        directory / ".env",
        directory / "conch.ini",
        directory / "conch.json",
        directory / "conch.toml",
    ]


# ---------- normalization & coercion ----------

_BOOL_TRUE = {"1", "true", "yes", "y", "on"}
_BOOL_FALSE = {"0", "false", "no", "n", "off"}


def _as_bool(key: str, val: Any) -> bool:
    if isinstance(val, bool):
        return val
    s = str(val).strip().lower()
    if s in _BOOL_TRUE:
        return True
    if s in _BOOL_FALSE:
        return False
    raise ValueError(f"{key}: expected boolean, got {val!r}")


def _as_opt_str(val: Any) -> str | None:
    return None if val is None or str(val).strip().lower() in {"", "none"} else str(val)


def _as_log_level(val: Any) -> str:
    up = str(val).strip().upper()
    allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if up not in allowed:
        raise ValueError(
            f"LOG_LEVEL must be one of {sorted(allowed)}, got {val!r}")
    return up


def _as_line_source(val: Any) -> str:
    kind = str(val).strip().lower()
    if kind not in SOURCE_KINDS:
        raise ValueError(
            f"LINE_SOURCE must be one of {list(SOURCE_KINDS)}, got {val!r}")
    return kind


def _as_opt_path(val: Any) -> Path | None:
    v = _as_opt_str(val)
    if v is None:
        return None
    # expand both ~ and env vars
    return Path(os.path.expandvars(os.path.expanduser(v))).resolve()


def _normalize_keys(d: Mapping[str, Any]) -> dict[str, Any]:
    return {str(k).upper(): v for k, v in d.items()}


def _strip_prefix(d: Mapping[str, Any]) -> dict[str, Any]:
    """Accept both 'PROMPT' and 'CONCH_PROMPT' spellings in files."""
    return {(k[len(ENV_PREFIX):] if k.startswith(ENV_PREFIX) else k): v for k, v in d.items()}


# ---------- merge & load ----------

def _merge_sources(directory: Path, environ: Mapping[str, str]) -> dict[str, Any]:
    merged: dict[str, Any] = dict(DEFAULTS)

    for file in _find_config_files(directory):
        if file.suffix == ".env" or file.name == ".env":
            loaded: Mapping[str, Any] = _load_env_file(file)
        elif file.suffix == ".ini":
            loaded = _load_ini_file(file)
        elif file.suffix == ".json":
            loaded = _flatten_mapping(_load_json_file(file))
        else:
            loaded = _flatten_mapping(_load_toml_file(file))
        merged.update(_strip_prefix(_normalize_keys(loaded)))

    # Environment variables override all; only CONCH_ prefixed keys
    env_overrides = {k[len(ENV_PREFIX):]: v for k, v in environ.items()
                     if k.startswith(ENV_PREFIX)}
    merged.update(env_overrides)
    return merged


def _validate_and_build(config: dict[str, Any]) -> ShellConfig:
    prompt = config.get("PROMPT", DEFAULTS["PROMPT"])
    multi_prompt = config.get("MULTI_PROMPT", DEFAULTS["MULTI_PROMPT"])

    recognized = set(DEFAULTS.keys())
    extra = {k: v for k, v in config.items() if k not in recognized}

    return ShellConfig(
        prompt="" if prompt is None else str(prompt),
        multi_prompt="" if multi_prompt is None else str(multi_prompt),
        history_file=_as_opt_path(config.get("HISTORY_FILE")),
        ignore_case=_as_bool("IGNORE_CASE", config.get("IGNORE_CASE", DEFAULTS["IGNORE_CASE"])),
        auto_help=_as_bool("AUTO_HELP", config.get("AUTO_HELP", DEFAULTS["AUTO_HELP"])),
        enable_completion=_as_bool(
            "ENABLE_COMPLETION", config.get("ENABLE_COMPLETION", DEFAULTS["ENABLE_COMPLETION"])),
        log_level=_as_log_level(config.get("LOG_LEVEL", DEFAULTS["LOG_LEVEL"])),
        log_file_path=_as_opt_path(config.get("LOG_FILE_PATH")),
        line_source=_as_line_source(config.get("LINE_SOURCE", DEFAULTS["LINE_SOURCE"])),
        extra=extra,
    )


# ---------- public API ----------

def load_config(
    directory: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> ShellConfig:
    """
    Load, merge, normalize, and validate configuration.

    `directory` defaults to the CWD, `environ` to os.environ.
    No filesystem side-effects. Raises ValueError on invalid values.
    """
    base = Path(directory) if directory is not None else Path.cwd()
    raw = _merge_sources(base, os.environ if environ is None else environ)
    return _validate_and_build(raw)
