"""
Configuration management for the SLIP codec.

Loads/saves TOML configuration for custom encoding profiles, stream
parameters and logging.

Example::

    [stream]
    profile = "radio"
    chunk_size = 512

    [profiles.radio]
    end = 0x7E
    end_escaped = 0x5E
    esc = 0x7D
    esc_escaped = 0x5D
"""

import logging
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, Field

from slipcodec.encoding import PROFILES, Encoding
from slipcodec.splitter import DEFAULT_CHUNK_SIZE, ByteSource, PacketStream


class EncodingConfig(BaseModel):
    """Custom SLIP control-byte set."""

    start: Optional[int] = Field(default=None, ge=0, le=0xFF, description="START byte (None = no START)")
    start_escaped: Optional[int] = Field(
        default=None, ge=0, le=0xFF, description="Substitute for START in payload"
    )
    end: int = Field(default=0xC0, ge=0, le=0xFF, description="END byte")
    end_escaped: int = Field(default=0xDC, ge=0, le=0xFF, description="Substitute for END in payload")
    esc: int = Field(default=0xDB, ge=0, le=0xFF, description="ESC byte")
    esc_escaped: int = Field(default=0xDD, ge=0, le=0xFF, description="Substitute for ESC in payload")

    def to_encoding(self) -> Encoding:
        """
        Build the Encoding.

        Raises:
            EncodingConfigError: If the bytes do not form a valid encoding.
        """
        return Encoding(**self.model_dump())

    @classmethod
    def from_encoding(cls, encoding: Encoding) -> "EncodingConfig":
        """Create config from an existing Encoding."""
        return cls(
            start=encoding.start,
            start_escaped=encoding.start_escaped,
            end=encoding.end,
            end_escaped=encoding.end_escaped,
            esc=encoding.esc,
            esc_escaped=encoding.esc_escaped,
        )


class StreamConfig(BaseModel):
    """Packet stream configuration."""

    profile: str = Field(default="standard", description="Encoding profile name")
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0, description="Bytes per source read")
    strict: bool = Field(default=True, description="Stop on malformed packets instead of skipping")
    skip_empty: bool = Field(default=False, description="Drop zero-length packets")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    log_file: Optional[str] = Field(default=None, description="Log file (None = stderr)")


class Config(BaseModel):
    """Complete codec configuration."""

    stream: StreamConfig = Field(default_factory=StreamConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    profiles: Dict[str, EncodingConfig] = Field(default_factory=dict)

    def resolve_encoding(self, name: Optional[str] = None) -> Encoding:
        """
        Look up an encoding profile.

        Args:
            name: Profile name. If None, uses stream.profile.

        Returns:
            Custom profile if defined, else the bundled one.

        Raises:
            KeyError: If no profile has this name.
        """
        if name is None:
            name = self.stream.profile

        if name in self.profiles:
            return self.profiles[name].to_encoding()
        if name in PROFILES:
            return PROFILES[name]

        raise KeyError(f"Encoding profile '{name}' not found")

    def open_stream(self, source: ByteSource) -> PacketStream:
        """Create a PacketStream over source using the stream settings."""
        return PacketStream(
            source,
            encoding=self.resolve_encoding(),
            chunk_size=self.stream.chunk_size,
            strict=self.stream.strict,
            skip_empty=self.stream.skip_empty,
        )


def load_config(path: Path) -> Config:
    """
    Load configuration from TOML file.

    Args:
        path: Configuration file path.

    Returns:
        Loaded configuration object (defaults if the file does not exist).
    """
    if not path.exists():
        return Config()

    import tomli

    with open(path, "rb") as f:
        data = tomli.load(f)

    return Config(**data)


def save_config(config: Config, path: Path) -> None:
    """
    Save configuration to TOML file.

    Args:
        config: Configuration object to save.
        path: Configuration file path.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    import tomli_w

    # TOML has no null
    with open(path, "wb") as f:
        tomli_w.dump(config.model_dump(exclude_none=True), f)


def configure_logging(config: Config) -> None:
    """Apply logging settings to the root logger."""
    handlers: list[logging.Handler] = []
    if config.logging.log_file is not None:
        handlers.append(logging.FileHandler(config.logging.log_file))
    else:
        handlers.append(logging.StreamHandler())

    logging.basicConfig(
        level=config.logging.level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )
