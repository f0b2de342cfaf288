"""
Gallformers Central Configuration
Glossary source selection, API server settings and logging
"""

from dataclasses import dataclass, field
from typing import List, Optional
import logging
import os

import yaml

logger = logging.getLogger(__name__)

_TRUTHY = ("true", "1", "yes")


def _env_int(name: str, default: int) -> int:
    """Integer environment override; malformed values keep the default"""
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring {name}={value!r}: not an integer")
        return default


@dataclass
class GlossaryConfig:
    """Where the glossary is fetched from"""

    # "yaml" reads a local file (or the embedded default), "http" fetches JSON
    source: str = "yaml"
    path: Optional[str] = None
    url: Optional[str] = None

    # Seconds, only used by the http source
    timeout: int = 10


@dataclass
class APIConfig:
    """Configuration for the REST API server"""

    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    debug: bool = False


@dataclass
class GallformersConfig:
    """Main configuration class combining all settings"""

    glossary: GlossaryConfig
    api: APIConfig

    # Logging
    log_level: str = "INFO"

    def __init__(self,
                 glossary: Optional[GlossaryConfig] = None,
                 api: Optional[APIConfig] = None,
                 log_level: str = "INFO"):
        """Initialize with optional custom configurations"""
        self.glossary = glossary or GlossaryConfig()
        self.api = api or APIConfig()
        self.log_level = log_level

        # Override with environment variables if present
        self._load_env_overrides()

    def _load_env_overrides(self):
        """Load configuration overrides from environment variables"""
        if os.getenv("GALLFORMERS_GLOSSARY_SOURCE"):
            self.glossary.source = os.getenv("GALLFORMERS_GLOSSARY_SOURCE").lower()

        if os.getenv("GALLFORMERS_GLOSSARY_PATH"):
            self.glossary.path = os.getenv("GALLFORMERS_GLOSSARY_PATH")

        if os.getenv("GALLFORMERS_GLOSSARY_URL"):
            self.glossary.url = os.getenv("GALLFORMERS_GLOSSARY_URL")

        self.glossary.timeout = _env_int("GALLFORMERS_GLOSSARY_TIMEOUT", self.glossary.timeout)

        if os.getenv("GALLFORMERS_API_HOST"):
            self.api.host = os.getenv("GALLFORMERS_API_HOST")

        self.api.port = _env_int("GALLFORMERS_API_PORT", self.api.port)

        if os.getenv("GALLFORMERS_LOG_LEVEL"):
            self.log_level = os.getenv("GALLFORMERS_LOG_LEVEL").upper()

        # Debug override
        if os.getenv("GALLFORMERS_DEBUG", "").lower() in _TRUTHY:
            self.api.debug = True
            self.log_level = "DEBUG"

    @classmethod
    def load_from_file(cls, config_path: str) -> 'GallformersConfig':
        """Load configuration from YAML file"""
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}

            glossary = GlossaryConfig(**config_data.get('glossary', {}))
            api = APIConfig(**config_data.get('api', {}))

            # Environment overrides still win over the file
            return cls(glossary=glossary, api=api,
                       log_level=config_data.get('log_level', 'INFO'))

        except Exception as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}") from e

    def save_to_file(self, config_path: str):
        """Save configuration to YAML file"""
        config_data = {
            'glossary': {
                'source': self.glossary.source,
                'path': self.glossary.path,
                'url': self.glossary.url,
                'timeout': self.glossary.timeout
            },
            'api': {
                'host': self.api.host,
                'port': self.api.port,
                'cors_origins': list(self.api.cors_origins),
                'debug': self.api.debug
            },
            'log_level': self.log_level
        }

        with open(config_path, 'w') as f:
            yaml.dump(config_data, f, default_flow_style=False, indent=2)

