"""File config loader — parses YAML/TOML, layers command-line overrides, validates."""

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from rxec.config.domain.config import RunConfig
from rxec.config.domain.observer import ConfigObserver
from rxec.config.infrastructure.errors import (
    ConfigFormatError,
    ConfigLoadError,
    ConfigValidationError,
)

YAML_SUFFIXES = (".yaml", ".yml")
TOML_SUFFIXES = (".toml",)
SUPPORTED_SUFFIXES = [*TOML_SUFFIXES, *YAML_SUFFIXES]


class FileConfigLoader:
    """Builds a RunConfig from an optional config file plus command-line overrides."""

    def __init__(self, observer: ConfigObserver) -> None:
        self._observer = observer

    def load(self, path: Path, overrides: Mapping[str, Any] | None = None) -> RunConfig:
        """
        Load *path* (if it exists), apply *overrides*, validate and return a RunConfig.

        Precedence: override values that are not None, then file values, then
        RunConfig defaults. A missing config file is not an error.

        Raises:
            ConfigFormatError: if *path* has an unsupported extension.
            ConfigLoadError: if the file exists but cannot be read or parsed.
            ConfigValidationError: if the merged values violate the schema or
                the working directory does not exist.
        """
        _check_suffix(path=path)
        from_file = path.is_file()
        if from_file:
            raw = _parse_file(path=path)
        else:
            self._observer.config_file_missing(path=str(path))
            raw = {}

        merged = _merge(raw=raw, overrides=overrides or {})
        cfg = _build_config(merged=merged)
        _check_cwd(cfg=cfg)
        self._observer.config_loaded(
            path=str(path),
            command=cfg.command,
            from_file=from_file,
        )
        return cfg


def _check_suffix(path: Path) -> None:
    if path.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise ConfigFormatError(path=path, supported=SUPPORTED_SUFFIXES)


def _parse_file(path: Path) -> dict[str, Any]:
    try:
        if path.suffix.lower() in TOML_SUFFIXES:
            with path.open("rb") as fh:
                data: Any = tomllib.load(fh)
        else:
            with path.open("r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh)
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(path=path, reason=str(exc)) from exc
    except (yaml.YAMLError, tomllib.TOMLDecodeError) as exc:
        raise ConfigLoadError(path=path, reason=f"invalid syntax: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigLoadError(path=path, reason="top level must be a mapping")
    return data


def _merge(raw: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    explicit = {key: value for key, value in overrides.items() if value is not None}
    return {**raw, **explicit}


def _build_config(merged: dict[str, Any]) -> RunConfig:
    try:
        return RunConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigValidationError(str(exc)) from exc


def _check_cwd(cfg: RunConfig) -> None:
    if not cfg.cwd.is_dir():
        raise ConfigValidationError(f"working directory is not a directory: {cfg.cwd}")
