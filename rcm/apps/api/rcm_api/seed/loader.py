"""
Seed configuration loader with JSON Schema validation
"""

import json
from pathlib import Path
from typing import Optional

from jsonschema import ValidationError as JsonSchemaValidationError
from jsonschema import validate
from pydantic import ValidationError as PydanticValidationError

from rcm_api.config.env import get_seed_config_path
from rcm_api.errors import ConfigurationError

from .models import SeedConfig

FIXTURES_DIR = Path(__file__).parent / "fixtures"
DEFAULT_CONFIG_PATH = FIXTURES_DIR / "admin_seed.json"
SCHEMA_PATH = FIXTURES_DIR / "admin_seed_schema.json"


class SeedConfigLoader:
    """
    Load and validate the seed configuration document against its JSON Schema
    """

    def __init__(self, config_path: Path, schema_path: Path = SCHEMA_PATH):
        self.config_path = config_path
        self.schema_path = schema_path
        self._config: Optional[SeedConfig] = None

    def load(self) -> SeedConfig:
        """
        Load the document, validate it and parse it into ``SeedConfig``

        Raises:
            ConfigurationError: file missing, malformed, or failing validation
        """
        try:
            with open(self.schema_path, "r", encoding="utf-8") as f:
                schema = json.load(f)
            with open(self.config_path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Seed configuration not found: {e.filename}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Seed configuration is not valid JSON: {e}") from e

        try:
            validate(instance=raw, schema=schema)
        except JsonSchemaValidationError as e:
            raise ConfigurationError(f"Seed configuration failed schema validation: {e.message}") from e

        try:
            config = SeedConfig.model_validate(raw)
        except PydanticValidationError as e:
            raise ConfigurationError(f"Seed configuration is invalid: {e}") from e

        self._config = config
        return config

    def get_config(self) -> SeedConfig:
        """Get loaded configuration (loads on first use)"""
        if self._config is None:
            return self.load()
        return self._config


# Singleton instance
_seed_loader: Optional[SeedConfigLoader] = None


def get_seed_loader() -> SeedConfigLoader:
    """Get singleton loader; RCM_SEED_CONFIG overrides the bundled fixture"""
    global _seed_loader
    if _seed_loader is None:
        _seed_loader = SeedConfigLoader(get_seed_config_path() or DEFAULT_CONFIG_PATH)
    return _seed_loader


def load_seed_config() -> SeedConfig:
    """Convenience accessor for the process-wide seed configuration"""
    return get_seed_loader().get_config()
