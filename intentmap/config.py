"""Configuration loading for intentmap (.intentmap.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .anchors.fingerprint import (
    ALGORITHM_ROLLING,
    NORMALIZE_TRIM,
    HashPolicy,
)
from .errors import ConfigError
from .parsing.language import DEFAULT_LANGUAGES

CONFIG_FILENAME = ".intentmap.yml"
DEFAULT_INTENT_DIR = ".intent"


@dataclass
class ManifestConfig:
    """Manifest parsing policy."""

    strict_entries: bool = False


@dataclass
class HashingConfig:
    """Normalisation and digest used for chunk fingerprints."""

    normalize: str = NORMALIZE_TRIM
    algorithm: str = ALGORITHM_ROLLING

    @property
    def policy(self) -> HashPolicy:
        return HashPolicy(normalize=self.normalize, algorithm=self.algorithm)


@dataclass
class CacheConfig:
    """Caller-side resolution cache settings."""

    path: Path
    ttl: Optional[float] = None


@dataclass
class IntentMapConfig:
    """Represents the settings defined in .intentmap.yml."""

    root: Path
    intent_dir: Path = Path(DEFAULT_INTENT_DIR)
    default_lang: Optional[str] = None
    languages: List[str] = field(default_factory=lambda: list(DEFAULT_LANGUAGES))
    manifest: ManifestConfig = field(default_factory=ManifestConfig)
    hashing: HashingConfig = field(default_factory=HashingConfig)
    cache: Optional[CacheConfig] = None

    @property
    def intent_root(self) -> Path:
        return self.root / self.intent_dir


def load_config(config_path: Path) -> IntentMapConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return IntentMapConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = IntentMapConfig(root=root)

    intent_dir = _as_str(data.get("intent_dir"))
    if intent_dir:
        config.intent_dir = Path(intent_dir)

    default_lang = _as_str(data.get("default_lang"))
    if default_lang:
        config.default_lang = default_lang.lower()

    languages = _as_str_list(data.get("languages"))
    if languages:
        config.languages = [code.lower() for code in languages]

    manifest_data = _as_dict(data.get("manifest"))
    if manifest_data:
        config.manifest.strict_entries = _as_bool(manifest_data.get("strict_entries")) or False

    hashing_data = _as_dict(data.get("hashing"))
    if hashing_data:
        normalize = _as_str(hashing_data.get("normalize")) or NORMALIZE_TRIM
        algorithm = _as_str(hashing_data.get("algorithm")) or ALGORITHM_ROLLING
        try:
            HashPolicy(normalize=normalize, algorithm=algorithm)
        except ValueError as exc:
            raise ConfigError(f"Invalid hashing settings in {CONFIG_FILENAME}: {exc}") from exc
        config.hashing = HashingConfig(normalize=normalize, algorithm=algorithm)

    cache_data = _as_dict(data.get("cache"))
    cache_path = _as_str(cache_data.get("path")) if cache_data else None
    if cache_path:
        config.cache = CacheConfig(
            path=root / cache_path,
            ttl=_as_float(cache_data.get("ttl")),
        )

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "CacheConfig",
    "ConfigError",
    "HashingConfig",
    "IntentMapConfig",
    "ManifestConfig",
    "load_config",
]
