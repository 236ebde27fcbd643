import os
import yaml
from pathlib import Path

SETTINGS_PATH_ENV = "DYNAMIC_CONFIG_SETTINGS"


class Settings:
    def __init__(self, config_path=None):
        explicit = config_path or os.environ.get(SETTINGS_PATH_ENV)
        self.config_path = Path(explicit) if explicit else Path.cwd() / "config" / "config.yaml"
        self._explicit = bool(explicit)
        self.config = self.load_config()

    def load_config(self):
        """Load configuration from YAML file"""
        try:
            with open(self.config_path, 'r') as file:
                return yaml.safe_load(file) or {}
        except FileNotFoundError:
            # Running without a settings file is normal; only complain when one was asked for
            if self._explicit:
                print(f"Config file not found at {self.config_path}")
            return {}
        except yaml.YAMLError as e:
            print(f"Error parsing config file: {e}")
            return {}

    def get(self, key, default=None):
        """Get configuration value by dotted key"""
        value = self.config
        for k in key.split('.'):
            if not isinstance(value, dict) or k not in value:
                return default
            value = value[k]
        return value

# Global settings instance
settings = Settings()
