"""
Configuration manager.
Loads YAML configs and provides typed access with defaults.

Each component receives its section as a plain dict, so a Config is
only needed at the application edge (CLI, host integration). Instances
are independent; create one per engine if settings differ.
"""

import os
import yaml
import logging

logger = logging.getLogger(__name__)

_PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
_CONFIG_DIR = os.path.join(_PACKAGE_DIR, "config")

DEFAULT_CONFIG_PATH = os.path.join(_CONFIG_DIR, "config.yaml")
DEFAULT_GESTURES_PATH = os.path.join(_CONFIG_DIR, "gestures.yaml")

# Schema: known sections and their expected types
_CONFIG_SCHEMA = {
    "logging": {
        "level": str,
        "max_size_mb": int,
        "backup_count": int,
        "console_level": str,
    },
    "geometry": {
        "extension_thresholds": dict,
        "confidences": dict,
    },
    "resolver": {
        "agreement_boost": float,
        "agreement_min_confidence": float,
        "override_min_confidence": float,
    },
    "learner": {
        "alpha": float,
        "target_score": float,
        "max_offset": float,
        "min_confirmations": int,
    },
    "smoother": {
        "window_size": int,
        "min_vote_ratio": float,
    },
    "engine": {
        "score_threshold": float,
        "max_candidates": int,
    },
    "debouncing": {
        "debounce_ms": int,
        "cooldown_ms": int,
    },
}


class Config:
    """YAML-backed configuration."""

    def __init__(self, data: dict = None):
        self._data = data or {}

    def load(self, config_path=None, gestures_path=None):
        """Load config.yaml and record the gesture registry path."""
        config_path = config_path or DEFAULT_CONFIG_PATH
        gestures_path = gestures_path or DEFAULT_GESTURES_PATH

        try:
            with open(config_path, "r") as f:
                self._data = yaml.safe_load(f) or {}
            logger.info("Loaded config from %s", config_path)
        except FileNotFoundError:
            logger.warning("Config file not found: %s, using defaults", config_path)
            self._data = {}

        if not isinstance(self._data, dict):
            logger.warning("Config file %s is not a mapping, using defaults", config_path)
            self._data = {}

        # The registry itself is parsed once, by the gesture bank
        self._data["gestures_path"] = gestures_path
        if not os.path.isfile(gestures_path):
            logger.warning("Gestures file not found: %s", gestures_path)

        self._validate()

        return self

    def _validate(self):
        """Validate known config fields against schema."""
        warnings = []
        for section_name, fields in _CONFIG_SCHEMA.items():
            section = self._data.get(section_name)
            if section is None:
                warnings.append(f"Missing config section: '{section_name}'")
                continue
            if not isinstance(section, dict):
                warnings.append(f"Section '{section_name}' should be a dict, got {type(section).__name__}")
                continue
            for field_name, expected_type in fields.items():
                if field_name in section:
                    value = section[field_name]
                    # Allow int where float is expected
                    if expected_type is float and isinstance(value, (int, float)) \
                            and not isinstance(value, bool):
                        continue
                    if not isinstance(value, expected_type):
                        warnings.append(
                            f"{section_name}.{field_name}: expected {expected_type.__name__}, "
                            f"got {type(value).__name__} ({value!r})"
                        )

        if warnings:
            for w in warnings:
                logger.warning("Config validation: %s", w)
        else:
            logger.debug("Config validation passed")
        return warnings

    def get(self, key_path: str, default=None):
        """Get nested config value using dot notation: 'engine.score_threshold'."""
        keys = key_path.split(".")
        value = self._data
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def to_dict(self) -> dict:
        """Shallow copy of all loaded sections."""
        return dict(self._data)

    def get_section(self, section: str) -> dict:
        """Get an entire config section."""
        value = self._data.get(section, {})
        return value if isinstance(value, dict) else {}

    @property
    def logging(self) -> dict:
        return self.get_section("logging")

    @property
    def geometry(self) -> dict:
        return self.get_section("geometry")

    @property
    def resolver(self) -> dict:
        return self.get_section("resolver")

    @property
    def learner(self) -> dict:
        return self.get_section("learner")

    @property
    def smoother(self) -> dict:
        return self.get_section("smoother")

    @property
    def engine(self) -> dict:
        return self.get_section("engine")

    @property
    def debouncing(self) -> dict:
        return self.get_section("debouncing")

    @property
    def gestures_path(self) -> str:
        return self._data.get("gestures_path", DEFAULT_GESTURES_PATH)
