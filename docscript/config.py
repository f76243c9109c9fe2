"""Configuration management for docscript."""

import logging
import os
from pathlib import Path
from typing import Optional, Dict, Any
import yaml

_log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.config/docscript/config.yaml"


class ConfigManager:
    """Manage docscript configuration from YAML."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(
            config_path or os.getenv("DOCSCRIPT_CONFIG") or DEFAULT_CONFIG_PATH
        ).expanduser()
        self.data = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            self._create_default_config()

        return self._read_yaml()

    def _read_yaml(self) -> Dict[str, Any]:
        """Read and parse YAML file."""
        try:
            with open(self.config_path, "r") as f:
                content = yaml.safe_load(f)
                return content or {}
        except (OSError, yaml.YAMLError) as e:
            _log.error("Error reading config %s: %s", self.config_path, e)
            return {}

    def _create_default_config(self) -> None:
        """Create default configuration file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        default_config = {
            "scripts": [],
            "hooks": [],
            "authz": [],
            "globals": {},
            "defaults": {
                "timezone": "UTC",
                "log_level": "WARNING",
            },
        }

        with open(self.config_path, "w") as f:
            yaml.dump(default_config, f, default_flow_style=False)

    def _resolve_env_var(self, value: Any) -> Any:
        """Resolve environment variable references like ${VAR_NAME}."""
        if not isinstance(value, str):
            return value
        if not value.startswith("${") or not value.endswith("}"):
            return value

        var_name = value[2:-1]
        return os.getenv(var_name, "")

    def get_script_paths(self) -> list[Path]:
        """Script files to load, relative paths resolved against the config dir."""
        paths = []
        for entry in self.data.get("scripts") or []:
            resolved = self._resolve_env_var(entry)
            if not resolved:
                continue
            path = Path(resolved).expanduser()
            if not path.is_absolute():
                path = self.config_path.parent / path
            paths.append(path)
        return paths

    def get_hooks_config(self) -> list:
        """Get hooks configuration (list of hook definitions)."""
        return self.data.get("hooks") or []

    def get_authz_config(self) -> list:
        """Get authorization rules (list of effect/action/match dicts)."""
        return self.data.get("authz") or []

    def get_globals_config(self) -> Dict[str, Any]:
        """Extra names injected into every script namespace."""
        config = self.data.get("globals") or {}
        return {key: self._resolve_env_var(value) for key, value in config.items()}

    def get_defaults(self) -> Dict[str, Any]:
        defaults = {
            "timezone": "UTC",
            "log_level": "WARNING",
        }
        config = self.data.get("defaults", {})
        return {**defaults, **config} if config else defaults

    def get_timezone(self) -> str:
        return os.getenv("DOCSCRIPT_TZ") or self.get_defaults()["timezone"]

    def get_log_level(self) -> str:
        return str(self.get_defaults()["log_level"]).upper()

    def save(self) -> None:
        """Save configuration to file."""
        with open(self.config_path, "w") as f:
            yaml.dump(self.data, f, default_flow_style=False)
