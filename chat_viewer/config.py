"""Configuration — YAML file merged over defaults, env overrides, schema-validated."""

import copy
import json
import logging
import os
from pathlib import Path

import jsonschema
import yaml

logger = logging.getLogger(__name__)

SCHEMA_PATH = os.path.join(os.path.dirname(__file__), "schemas", "config_schema.json")

# Environment variable → (section, key)
ENV_OVERRIDES = {
    "CLAUDE_PROJECTS_DIR": ("paths", "projects_dir"),
    "CLAUDE_TODOS_DIR": ("paths", "todos_dir"),
}

CONFIG_ENV = "CHAT_VIEWER_CONFIG"


class ConfigError(ValueError):
    """Raised when the merged configuration does not match the schema."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("Invalid configuration: " + "; ".join(self.errors))


class Config:
    """Configuration manager that loads from YAML and merges with defaults."""

    DEFAULTS = {
        "paths": {
            "projects_dir": "~/.claude/projects",
            "todos_dir": "~/.claude/todos",
        },
        "output": {
            "dir": ".",
            "todo_theme": "grid",
        },
        "logging": {
            "level": "WARNING",
        },
    }

    def __init__(self, config_path=None, environ=None):
        environ = os.environ if environ is None else environ
        self._config = copy.deepcopy(self.DEFAULTS)

        if config_path is None:
            config_path = environ.get(CONFIG_ENV)

        if config_path is not None:
            user_config = self._load_yaml(config_path)
            if user_config:
                self._config = self._deep_merge(self._config, user_config)

        self.validate(self._config)

        for var, (section, key) in ENV_OVERRIDES.items():
            if environ.get(var):
                self._config[section][key] = environ[var]

    @staticmethod
    def _load_yaml(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            logger.info("Config file %s not found, using defaults", path)
            return {}
        except yaml.YAMLError:
            logger.warning("Invalid YAML in %s, using defaults", path)
            return {}

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError([f"{path}: top level must be a mapping"])
        logger.info("Loaded config from %s", path)
        return data

    @staticmethod
    def _deep_merge(base, override):
        """Recursively merge override dict into base dict."""
        result = copy.deepcopy(base)
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = Config._deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)
        return result

    @staticmethod
    def validate(data):
        """Raise ConfigError listing every schema violation in ``data``."""
        with open(SCHEMA_PATH, "r", encoding="utf-8") as f:
            schema = json.load(f)
        validator = jsonschema.Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
        if errors:
            raise ConfigError(
                f"{'.'.join(str(p) for p in e.path) or '<root>'}: {e.message}"
                for e in errors
            )

    def path(self, section, key) -> Path:
        """Config value as an expanded filesystem path."""
        return Path(self._config[section][key]).expanduser()

    def __getitem__(self, key):
        return self._config[key]
