"""
Spell Checker Configuration Module
==================================
Centralized configuration for the checker and dictionary layers.

Configuration can be set via:
1. Environment variables (SPELLCORE_CONFIDENCE_THRESHOLD=0.6)
2. Config file (spellcore_config.json, or the path in $SPELLCORE_CONFIG)
3. Direct API calls (config.set('checker.max_suggestions', 3))

All settings have sensible defaults for offline operation.
"""

import os
import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from config_logging import get_logger, ValidationError

__version__ = "1.0.0"

logger = get_logger('spellcore.config')

# Default configuration path
CONFIG_FILE = Path(os.environ.get(
    'SPELLCORE_CONFIG',
    str(Path(__file__).parent.parent / "spellcore_config.json")
))

DEFAULT_ACRONYMS = [
    "api", "http", "https", "url", "uri", "html", "css", "js", "ts",
    "json", "xml", "sql", "nosql", "cpu", "gpu", "ram", "rom", "usb",
    "ssd", "hdd", "lan", "wan", "vpn", "dns", "ip", "tcp", "udp",
]


@dataclass
class CheckerConfig:
    """Per-check settings."""
    suggestions_enabled: bool = True
    case_sensitive: bool = False
    max_suggestions: int = 5
    confidence_threshold: float = 0.7
    workers: int = 0  # 0 or 1 = check lines sequentially
    parallel_line_threshold: int = 200
    common_acronyms: list = field(default_factory=lambda: list(DEFAULT_ACRONYMS))

    def validate(self):
        """
        Coerce option values to their declared types and check ranges.

        Values arriving from JSON or the environment may be strings;
        "0.5" becomes 0.5 and "false" becomes False.

        Raises:
            ValidationError: a value cannot be converted or is out of range
        """
        self._coerce('suggestions_enabled', _to_bool)
        self._coerce('case_sensitive', _to_bool)
        self._coerce('max_suggestions', int)
        self._coerce('confidence_threshold', float)
        self._coerce('workers', int)
        self._coerce('parallel_line_threshold', int)
        self._coerce('common_acronyms', _to_word_list)

        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValidationError(
                f"confidence_threshold must be between 0 and 1: {self.confidence_threshold}",
                field='confidence_threshold')
        if self.max_suggestions < 0:
            raise ValidationError(
                f"max_suggestions must not be negative: {self.max_suggestions}",
                field='max_suggestions')
        if self.workers < 0:
            raise ValidationError(f"workers must not be negative: {self.workers}",
                                  field='workers')
        return self

    def _coerce(self, name: str, converter):
        value = getattr(self, name)
        try:
            setattr(self, name, converter(value))
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid value for {name}: {value!r}", field=name) from None

    def replace(self, **overrides) -> 'CheckerConfig':
        """Copy with overrides applied; unknown keys raise ValidationError."""
        data = asdict(self)
        for key, value in overrides.items():
            if key not in data:
                raise ValidationError(f"Unknown checker option: {key}", field=key)
            data[key] = value
        return CheckerConfig(**data).validate()


@dataclass
class DictionaryConfig:
    """Dictionary discovery and loading."""
    default_language: str = "eng"
    min_word_length: int = 2
    search_dirs: list = field(default_factory=list)
    include_default_dirs: bool = True
    user_data_dir: Optional[str] = None  # None = ~/.spellcore
    use_bundled_english: bool = True
    load_workers: int = 0
    max_edit_distance: int = 2
    prefix_length: int = 7

    @property
    def user_data_path(self) -> Path:
        if self.user_data_dir:
            return Path(self.user_data_dir).expanduser()
        return Path.home() / '.spellcore'

    @property
    def search_paths(self) -> List[Path]:
        return [Path(p).expanduser() for p in self.search_dirs]


@dataclass
class SpellCoreConfig:
    """Master configuration."""
    checker: CheckerConfig = field(default_factory=CheckerConfig)
    dictionary: DictionaryConfig = field(default_factory=DictionaryConfig)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'checker': asdict(self.checker),
            'dictionary': asdict(self.dictionary),
        }


# Global configuration instance
_config: Optional[SpellCoreConfig] = None


def get_config() -> SpellCoreConfig:
    """Get the global configuration."""
    global _config
    if _config is None:
        _config = _load_config()
    return _config


def _load_config(path: Optional[Path] = None) -> SpellCoreConfig:
    """Load configuration from file and environment."""
    config = SpellCoreConfig()
    path = Path(path or CONFIG_FILE)

    if path.exists():
        try:
            with open(path, 'r', encoding='utf-8') as f:
                file_config = json.load(f)
            _apply_dict_to_config(config, file_config)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load config file: {e}", config_path=str(path))

    _apply_env_to_config(config)
    return config


def load_config(path: Path) -> SpellCoreConfig:
    """Load a config file (plus environment overrides) without touching the global."""
    return _load_config(path)


def _apply_dict_to_config(config: SpellCoreConfig, data: Dict[str, Any]):
    """Apply dictionary values to config object."""
    for section_name, section_data in data.items():
        if hasattr(config, section_name) and isinstance(section_data, dict):
            section = getattr(config, section_name)
            for key, value in section_data.items():
                if hasattr(section, key):
                    setattr(section, key, value)


def _apply_env_to_config(config: SpellCoreConfig):
    """Apply environment variables to config."""
    env_mappings = {
        'SPELLCORE_SUGGESTIONS_ENABLED': ('checker', 'suggestions_enabled', _parse_bool),
        'SPELLCORE_CASE_SENSITIVE': ('checker', 'case_sensitive', _parse_bool),
        'SPELLCORE_MAX_SUGGESTIONS': ('checker', 'max_suggestions', int),
        'SPELLCORE_CONFIDENCE_THRESHOLD': ('checker', 'confidence_threshold', float),
        'SPELLCORE_WORKERS': ('checker', 'workers', int),
        'SPELLCORE_DEFAULT_LANGUAGE': ('dictionary', 'default_language', str),
        'SPELLCORE_MIN_WORD_LENGTH': ('dictionary', 'min_word_length', int),
        'SPELLCORE_DICTIONARY_DIRS': ('dictionary', 'search_dirs', _parse_path_list),
        'SPELLCORE_USER_DATA_DIR': ('dictionary', 'user_data_dir', str),
        'SPELLCORE_USE_BUNDLED_ENGLISH': ('dictionary', 'use_bundled_english', _parse_bool),
        'SPELLCORE_LOAD_WORKERS': ('dictionary', 'load_workers', int),
        'SPELLCORE_MAX_EDIT_DISTANCE': ('dictionary', 'max_edit_distance', int),
    }

    for env_var, (section, key, converter) in env_mappings.items():
        value = os.environ.get(env_var)
        if value is not None:
            try:
                section_obj = getattr(config, section)
                setattr(section_obj, key, converter(value))
            except (ValueError, AttributeError) as e:
                logger.warning(f"Invalid env var {env_var}={value}: {e}")


def _parse_bool(value: str) -> bool:
    """Parse boolean from string."""
    return value.lower() in ('true', '1', 'yes', 'on')


def _to_bool(value) -> bool:
    """Strict bool for option values; unknown strings are rejected."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ('true', '1', 'yes', 'on'):
            return True
        if lowered in ('false', '0', 'no', 'off'):
            return False
    raise ValueError(f"not a boolean: {value!r}")


def _to_word_list(value) -> list:
    if isinstance(value, str):
        raise TypeError("expected a list of strings")
    items = list(value)
    if not all(isinstance(v, str) for v in items):
        raise TypeError("expected a list of strings")
    return items


def _parse_path_list(value: str) -> list:
    return [p for p in value.split(os.pathsep) if p]


def get(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by dot-notation key.

    Example: get('checker.max_suggestions') -> 5
    """
    config = get_config()
    obj = config
    for part in key.split('.'):
        if hasattr(obj, part):
            obj = getattr(obj, part)
        else:
            return default
    return obj


def set(key: str, value: Any):
    """
    Set a configuration value by dot-notation key.

    Example: set('checker.confidence_threshold', 0.6)
    """
    config = get_config()
    parts = key.split('.')

    if len(parts) < 2:
        raise ValueError(f"Key must be in format 'section.key': {key}")

    section_name, attr_name = parts[0], parts[1]

    if hasattr(config, section_name):
        section = getattr(config, section_name)
        if hasattr(section, attr_name):
            setattr(section, attr_name, value)
        else:
            raise ValueError(f"Unknown config key: {attr_name}")
    else:
        raise ValueError(f"Unknown config section: {section_name}")


def save_config(path: Optional[Path] = None):
    """Save current configuration to file."""
    path = Path(path or CONFIG_FILE)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(get_config().to_dict(), f, indent=2)


def reset_config():
    """Reset configuration to defaults."""
    global _config
    _config = SpellCoreConfig()
