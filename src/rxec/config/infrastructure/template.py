"""Config template rendering for `rxec template`."""

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic.fields import FieldInfo

from rxec.config.domain.config import RunConfig
from rxec.config.domain.observer import ConfigObserver
from rxec.config.infrastructure.errors import ConfigFormatError
from rxec.config.infrastructure.file_loader import SUPPORTED_SUFFIXES, TOML_SUFFIXES

# Shown for required fields, which have no default to print.
_EXAMPLES: dict[str, Any] = {"cmd": ["echo", "hello"]}


def render_template(fmt: str) -> str:
    """Render a fully commented RunConfig template as TOML (``"toml"``) or YAML."""
    blocks: list[str] = []
    for name, info in RunConfig.model_fields.items():
        lines = [f"# {line}" for line in _describe(info=info)]
        value = _EXAMPLES.get(name) if info.is_required() else info.get_default(
            call_default_factory=True
        )
        if value is None:
            lines.append(f"# {name} =" if fmt == "toml" else f"# {name}:")
        else:
            lines.append(f"# {_render_assignment(name=name, value=value, fmt=fmt)}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n"


def write_template(path: Path, observer: ConfigObserver) -> None:
    """Write a config template to *path*, choosing the format from its extension.

    Raises:
        ConfigFormatError: if the extension is not .toml, .yaml or .yml.
    """
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ConfigFormatError(path=path, supported=SUPPORTED_SUFFIXES)
    fmt = "toml" if suffix in TOML_SUFFIXES else "yaml"
    path.write_text(render_template(fmt=fmt), encoding="utf-8")
    observer.template_written(path=str(path))


def _describe(info: FieldInfo) -> list[str]:
    lines = [info.description or ""]
    if info.is_required():
        lines.append("Required!")
    else:
        default = info.get_default(call_default_factory=True)
        if default is None:
            lines.append("Can be omitted.")
    return lines


def _render_assignment(name: str, value: Any, fmt: str) -> str:
    if isinstance(value, Path):
        value = str(value)
    if fmt == "toml":
        return f"{name} = {_toml_value(value)}"
    return yaml.safe_dump(
        {name: value}, default_flow_style=None, sort_keys=False
    ).strip()


def _toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return repr(value)
    if isinstance(value, list):
        return "[" + ", ".join(_toml_value(item) for item in value) + "]"
    # JSON string escapes are valid TOML basic-string escapes.
    return json.dumps(str(value))
