import yaml
from pathlib import Path
import os
from typing import Any, Dict, Optional
import logging
import re

from powerschool.core.exceptions import ConfigError

DEFAULT_CONFIG = {
    "powerschool": {
        "url": "${POWERSCHOOL_URL}",
        "username": "${POWERSCHOOL_USERNAME}",
        "password": "${POWERSCHOOL_PASSWORD}",
        "api_username": "pearson",
        "api_password": "m0bApP5",
        "timeout": 30,
        "max_attempts": 3,
    },
    "logging": {
        "level": "INFO",
    },
}


class Config:
    def __init__(self, config_path: Optional[str] = None):
        logging.debug("Initializing Config class")

        if config_path:
            self.config_file = Path(config_path).expanduser().resolve()
            self.config_dir = self.config_file.parent
        else:
            self.config_dir = Path.cwd()
            self.config_file = self.config_dir / "config.yaml"

        logging.debug(f"Using config file: {self.config_file}")

        # Load environment variables from .env file
        self._load_env_file()

        self._ensure_config_exists()
        self._load_config()

    def _ensure_config_exists(self) -> None:
        """Create default config if it doesn't exist"""
        if not self.config_dir.exists():
            logging.info(f"Creating config directory: {self.config_dir}")
            self.config_dir.mkdir(parents=True)

        if not self.config_file.exists():
            logging.info(f"Creating default config file: {self.config_file}")
            self.config_file.write_text(yaml.safe_dump(DEFAULT_CONFIG, sort_keys=False))

    def _load_env_file(self) -> None:
        """Load environment variables from .env file"""
        # Look for .env file in config directory or project root
        env_files = [
            self.config_dir / ".env",
            self.config_dir.parent / ".env",
            Path.cwd() / ".env"
        ]

        env_file = None
        for path in env_files:
            if path.exists():
                env_file = path
                break

        if not env_file:
            logging.debug("No .env file found, skipping environment variable loading")
            return

        logging.info(f"Loading environment variables from: {env_file}")
        try:
            with open(env_file, 'r') as f:
                for line in f:
                    line = line.strip()
                    # Skip empty lines and comments
                    if not line or line.startswith('#'):
                        continue

                    match = re.match(r'^([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$', line)
                    if match:
                        key, value = match.groups()
                        value = value.strip('"').strip("'")
                        # Never override the real environment
                        if key not in os.environ:
                            os.environ[key] = value
                            logging.debug(f"Loaded env var: {key}")
        except OSError as e:
            logging.warning(f"Error loading .env file: {e}")

    def _substitute_env_vars(self, data: Any) -> Any:
        """Recursively substitute ${VAR} / $VAR string values from the environment"""
        if isinstance(data, dict):
            return {key: self._substitute_env_vars(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [self._substitute_env_vars(item) for item in data]
        elif isinstance(data, str):
            if data.startswith('${') and data.endswith('}'):
                var_name = data[2:-1]
                return os.environ.get(var_name, data)
            elif data.startswith('$') and len(data) > 1:
                var_name = data[1:]
                return os.environ.get(var_name, data)
            return data
        else:
            return data

    def _load_config(self) -> None:
        """Load configuration from file"""
        logging.debug(f"Loading config from: {self.config_file}")
        try:
            with open(self.config_file) as f:
                new_data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config file {self.config_file}: {e}") from e

        if not isinstance(new_data, dict):
            raise ConfigError(f"Invalid config format in {self.config_file}: root must be a mapping")

        self.data = self._substitute_env_vars(new_data)

        # Expand ~ in log file path
        log_file = (self.data.get("logging") or {}).get("file")
        if log_file:
            self.data["logging"]["file"] = os.path.expanduser(log_file)

    def get_section(self, name: str) -> Dict[str, Any]:
        """Return a top-level section, or an empty dict if it is missing"""
        section = self.data.get(name)
        return section if isinstance(section, dict) else {}

    def require(self, section: str, key: str) -> Any:
        """Return a setting that must be present and resolved (no leftover $VAR reference)"""
        value = self.get_section(section).get(key)
        if value is None or value == "" or (isinstance(value, str) and value.startswith("$")):
            raise ConfigError(f"Missing setting {section}.{key} in {self.config_file}")
        return value
