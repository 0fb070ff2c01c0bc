from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List, Dict, Any
from pathlib import Path

from .errors import ChunkingConfigError


class Settings(BaseSettings):
    # Message limits
    MESSAGE_MAX_LENGTH: int = Field(
        default=2000,
        gt=0,
        description="Transport maximum characters per delivered message",
    )
    CHUNK_SAFE_OVERHEAD: int = Field(
        default=50,
        ge=8,
        description="Reserved for the '[i/N] ' prefix plus a safety margin",
    )

    # Preprocessing
    KNOWN_BARE_DOMAINS: List[str] = ["fractalsoftworks"]  # joined back onto prose
    FORMAT_SOURCE_REFERENCES: bool = False  # rewrite (n) url citations as links
    FORMAT_URLS: bool = False  # tidy social, video and forum links

    # Boundary repair
    SPLIT_DOMAIN_SUFFIXES: List[str] = [
        "com",
        "org",
        "net",
        "edu",
        "gov",
        "io",
        "me",
    ]

    # Observability
    LOG_FORMAT: str = "auto"  # json|plain|auto
    LOG_LEVEL: str = "info"  # debug|info|warning|error

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @classmethod
    def load_config(cls, config_file: Optional[str] = None) -> "Settings":
        """Load settings with config file -> env -> CLI precedence."""
        config_data: Dict[str, Any] = {}

        # Find config file
        config_path: Optional[Path]
        if config_file:
            config_path = Path(config_file)
        else:
            # Auto-discover .chunksmith.{yaml,yml,toml}
            for ext in ["yaml", "yml", "toml"]:
                config_path = Path(f".chunksmith.{ext}")
                if config_path.exists():
                    break
            else:
                config_path = None

        if config_path and config_path.exists():
            if config_path.suffix in [".yaml", ".yml"]:
                import yaml  # type: ignore[import-untyped]

                with open(config_path) as f:
                    config_data = yaml.safe_load(f) or {}
            elif config_path.suffix == ".toml":
                import tomllib

                with open(config_path, "rb") as f:
                    config_data = tomllib.load(f)

        # File values are init arguments, so they win over env and .env
        return cls(**config_data)


def effective_max_length(max_length: int, overhead: int) -> int:
    """Content budget per chunk once the numbering overhead is reserved."""
    safe = max_length - overhead
    if safe <= 0:
        raise ChunkingConfigError(
            f"max_length {max_length} leaves no room for content after "
            f"reserving {overhead} characters of overhead"
        )
    return safe


# Default settings - replaced by load_config() during CLI startup
SETTINGS = Settings()
