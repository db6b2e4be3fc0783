"""
Configuration management for the cue sheet service.

Provides centralized configuration for CUE parsing, serialization and
logging settings.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ParserConfig:
    """Configuration for CUE parsing."""

    # CUE files are small text files; anything larger is rejected unread
    max_file_size_bytes: int = 10 * 1024 * 1024
    default_encoding: str = "utf-8"
    detect_encoding: bool = True


@dataclass
class SerializerConfig:
    """Configuration for CUE serialization."""

    indentation: str = "  "
    encoding: str = "utf-8"


@dataclass
class ServiceConfig:
    """Main configuration for the cue sheet service."""

    parser: ParserConfig = field(default_factory=ParserConfig)
    serializer: SerializerConfig = field(default_factory=SerializerConfig)

    # Service-level settings
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        """Create configuration from environment variables.

        Environment variables follow the pattern:
        CUESHEET_<SECTION>_<SETTING>

        Examples:
        - CUESHEET_PARSER_MAX_FILE_SIZE_BYTES=1048576
        - CUESHEET_PARSER_DETECT_ENCODING=false
        - CUESHEET_SERIALIZER_INDENTATION="    "
        """
        config = cls()

        # Parser configuration
        if val := os.getenv("CUESHEET_PARSER_MAX_FILE_SIZE_BYTES"):
            config.parser.max_file_size_bytes = int(val)
        config.parser.default_encoding = os.getenv("CUESHEET_PARSER_DEFAULT_ENCODING", config.parser.default_encoding)
        if val := os.getenv("CUESHEET_PARSER_DETECT_ENCODING"):
            config.parser.detect_encoding = val.lower() in ("true", "1", "yes")

        # Serializer configuration
        if (val := os.getenv("CUESHEET_SERIALIZER_INDENTATION")) is not None:
            config.serializer.indentation = val
        config.serializer.encoding = os.getenv("CUESHEET_SERIALIZER_ENCODING", config.serializer.encoding)

        # Service-level settings
        config.log_level = os.getenv("CUESHEET_LOG_LEVEL", config.log_level)
        if val := os.getenv("CUESHEET_LOG_JSON"):
            config.log_json = val.lower() in ("true", "1", "yes")

        return config

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceConfig":
        """Create configuration from a dictionary.

        Useful for loading from JSON or YAML files.
        """
        config = cls()

        if "parser" in data:
            for key, value in data["parser"].items():
                if hasattr(config.parser, key):
                    setattr(config.parser, key, value)

        if "serializer" in data:
            for key, value in data["serializer"].items():
                if hasattr(config.serializer, key):
                    setattr(config.serializer, key, value)

        for key in ["log_level", "log_json"]:
            if key in data:
                setattr(config, key, data[key])

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "parser": {
                "max_file_size_bytes": self.parser.max_file_size_bytes,
                "default_encoding": self.parser.default_encoding,
                "detect_encoding": self.parser.detect_encoding,
            },
            "serializer": {
                "indentation": self.serializer.indentation,
                "encoding": self.serializer.encoding,
            },
            "log_level": self.log_level,
            "log_json": self.log_json,
        }

    def validate(self) -> list:
        """Validate configuration values.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if self.parser.max_file_size_bytes <= 0:
            errors.append("Parser max_file_size_bytes must be positive")
        if self.serializer.indentation.strip():
            errors.append("Serializer indentation must contain only whitespace")
        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"Invalid log level: {self.log_level}")

        return errors


# Global configuration instance, used by the command line entry point only
_config: Optional[ServiceConfig] = None


def get_config() -> ServiceConfig:
    """Get the global configuration instance.

    Creates the configuration from environment variables on first call.
    """
    global _config
    if _config is None:
        _config = ServiceConfig.from_env()
    return _config


def set_config(config: ServiceConfig) -> None:
    """Set the global configuration instance.

    Useful for testing or when loading configuration from files.
    """
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
