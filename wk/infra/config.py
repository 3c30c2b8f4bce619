"""
Configuration management using Pydantic Settings.

Sources, lowest priority first:
1. Default values (store at ~/wk/db.sqlite)
2. YAML file <data_dir>/settings.yaml
3. Environment variables prefixed WK_
"""

from pathlib import Path
from typing import Optional
import logging

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from wk.domain.errors import ConfigError, StorageUnavailable

logger = logging.getLogger(__name__)

# Keys the YAML file may set. data_dir is excluded since it locates the file.
YAML_KEYS = ("database_file", "database_url", "log_level")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='WK_', validate_assignment=True)

    data_dir: Path = Field(default_factory=lambda: Path.home() / 'wk')
    database_file: str = "db.sqlite"
    database_url: Optional[str] = None
    log_level: str = "WARNING"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._init_paths()
        self._load_yaml_config()

    def _init_paths(self):
        """Create the data directory if it doesn't exist"""
        self.data_dir = self.data_dir.expanduser()
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailable(f"Cannot create data directory {self.data_dir}: {e}") from e

    def _load_yaml_config(self):
        """Fill in values not already set by env vars or keyword arguments"""
        config_file = self.data_dir / "settings.yaml"
        if not config_file.exists():
            return

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read {config_file}: {e}") from e
        if not config_data:
            return
        if not isinstance(config_data, dict):
            raise ConfigError(f"{config_file} must contain a mapping of settings")

        for key, value in config_data.items():
            if key not in YAML_KEYS:
                logger.warning(f"Ignoring unknown setting '{key}' in {config_file}")
                continue
            if key not in self.model_fields_set:
                setattr(self, key, value)

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.database_file

    def get_db_url(self) -> str:
        """Get database URL, defaulting to the file under data_dir"""
        if self.database_url:
            return self.database_url
        return f"sqlite+aiosqlite:///{self.db_path}"


def get_settings(**overrides) -> Settings:
    """
    Read settings fresh; each CLI invocation builds its own.

    Raises:
        ConfigError: a value from the environment or settings.yaml is invalid
        StorageUnavailable: the data directory cannot be created
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid setting: {e.errors()[0]['loc']}: {e.errors()[0]['msg']}") from e
