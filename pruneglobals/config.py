"""Configuration loading for prune-globals (.prune-globals.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".prune-globals.yml"

DEFAULT_SOURCE_DIR = "src"
DEFAULT_EXTENSIONS = (".js",)
DEFAULT_MARKER = "// Temporary globals"
DEFAULT_NAMESPACE = "window"
DEFAULT_ENCODING = "utf-8"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class PruneConfig:
    """Represents the settings defined in .prune-globals.yml."""

    root: Path
    source_dir: Path
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    marker: str = DEFAULT_MARKER
    namespace: str = DEFAULT_NAMESPACE
    encoding: str = DEFAULT_ENCODING


def load_config(config_path: Path) -> PruneConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return PruneConfig(root=root, source_dir=root / DEFAULT_SOURCE_DIR)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    source_dir_str = _as_str(data.get("source_dir")) or DEFAULT_SOURCE_DIR
    extensions = [_normalise_extension(ext) for ext in _as_str_list(data.get("extensions"))]

    return PruneConfig(
        root=root,
        source_dir=(root / source_dir_str).resolve(),
        extensions=extensions or list(DEFAULT_EXTENSIONS),
        marker=_as_str(data.get("marker")) or DEFAULT_MARKER,
        namespace=_as_str(data.get("namespace")) or DEFAULT_NAMESPACE,
        encoding=_as_str(data.get("encoding")) or DEFAULT_ENCODING,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Unable to read {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _normalise_extension(value: str) -> str:
    value = value.strip()
    return value if value.startswith(".") else f".{value}"


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, str) and item.strip()]
    return []


__all__ = ["ConfigError", "PruneConfig", "load_config", "CONFIG_FILENAME"]
