"""
ethrecords Configuration
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field, asdict, fields
from typing import List, Optional

from ethrecords.constants import CHAIN_ID_MAINNET
from ethrecords.errors import InvalidConfigError

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class SignerConfig:
    """Signer configuration. chain_id None selects the legacy signer."""
    chain_id: Optional[int] = CHAIN_ID_MAINNET


@dataclass
class CodecConfig:
    """JSON output configuration."""
    json_indent: Optional[int] = None
    json_sort_keys: bool = False


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_size_mb: int = 100
    backup_count: int = 5


@dataclass
class Config:
    """
    Complete tool configuration.

    Used by the command line; library code takes its parameters
    explicitly and never reads configuration.
    """
    signer: SignerConfig = field(default_factory=SignerConfig)
    codec: CodecConfig = field(default_factory=CodecConfig)
    log: LogConfig = field(default_factory=LogConfig)

    # Hex private key file used by `sign` when no key is given
    keyfile: Optional[str] = None

    @property
    def chain_id(self) -> Optional[int]:
        return self.signer.chain_id

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        # Signer validation
        chain_id = self.signer.chain_id
        if chain_id is not None:
            if isinstance(chain_id, bool) or not isinstance(chain_id, int) or chain_id < 1:
                errors.append(f"Invalid chain id: {chain_id!r}")

        # Codec validation
        indent = self.codec.json_indent
        if indent is not None and (isinstance(indent, bool) or not isinstance(indent, int) or indent < 0):
            errors.append(f"Invalid JSON indent: {indent!r}")

        if not isinstance(self.codec.json_sort_keys, bool):
            errors.append(f"Invalid json_sort_keys: {self.codec.json_sort_keys!r}")

        # Log validation
        if not isinstance(self.log.level, str) or self.log.level.upper() not in LOG_LEVELS:
            errors.append(f"Invalid log level: {self.log.level!r}")

        if not isinstance(self.log.format, str):
            errors.append(f"Invalid log format: {self.log.format!r}")

        if self.log.file is not None and not isinstance(self.log.file, str):
            errors.append(f"Invalid log file: {self.log.file!r}")

        if not _is_int(self.log.max_size_mb) or self.log.max_size_mb < 1:
            errors.append("max_size_mb must be an integer of at least 1")

        if not _is_int(self.log.backup_count) or self.log.backup_count < 0:
            errors.append("backup_count must be a non-negative integer")

        if self.keyfile is not None and not isinstance(self.keyfile, str):
            errors.append(f"Invalid keyfile: {self.keyfile!r}")

        return errors

    def to_dict(self) -> dict:
        """Export configuration as dictionary."""
        return {
            "keyfile": self.keyfile,
            "signer": asdict(self.signer),
            "codec": asdict(self.codec),
            "log": asdict(self.log),
        }

    def save(self, path: str) -> None:
        """Save configuration to file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.info(f"Configuration saved to {path}")

    @classmethod
    def load(cls, path: str) -> "Config":
        """
        Load configuration from file.

        Raises:
            InvalidConfigError: unreadable JSON, unknown keys or a
                configuration that fails validate()
        """
        with open(path, 'r') as f:
            try:
                data = json.load(f)
            except ValueError as e:
                raise InvalidConfigError([f"{path}: invalid JSON: {e}"]) from e

        if not isinstance(data, dict):
            raise InvalidConfigError([f"{path}: expected a JSON object"])

        known = {"keyfile", "signer", "codec", "log"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidConfigError([f"Unknown key: {key}" for key in unknown])

        config = cls(keyfile=data.get("keyfile"))

        if "signer" in data:
            config.signer = _section(SignerConfig, data["signer"], "signer")

        if "codec" in data:
            config.codec = _section(CodecConfig, data["codec"], "codec")

        if "log" in data:
            config.log = _section(LogConfig, data["log"], "log")

        errors = config.validate()
        if errors:
            raise InvalidConfigError(errors)

        logger.info(f"Configuration loaded from {path}")
        return config

    @classmethod
    def default_mainnet(cls) -> "Config":
        """Create default mainnet configuration (EIP-155, chain id 1)."""
        return cls(signer=SignerConfig(chain_id=CHAIN_ID_MAINNET))

    @classmethod
    def default_legacy(cls) -> "Config":
        """Create configuration for the pre-EIP-155 (Homestead) signer."""
        return cls(signer=SignerConfig(chain_id=None))


def _section(section_cls, data, name: str):
    if not isinstance(data, dict):
        raise InvalidConfigError([f"Section '{name}' must be an object"])
    allowed = {f.name for f in fields(section_cls)}
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise InvalidConfigError([f"Unknown key: {name}.{key}" for key in unknown])
    try:
        return section_cls(**data)
    except TypeError as e:
        raise InvalidConfigError([f"Section '{name}': {e}"]) from e


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def setup_logging(config: LogConfig) -> None:
    """Configure logging based on config."""
    level = getattr(logging, config.level.upper(), logging.INFO)

    handlers = [logging.StreamHandler()]

    if config.file:
        from logging.handlers import RotatingFileHandler
        file_handler = RotatingFileHandler(
            config.file,
            maxBytes=config.max_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format=config.format,
        handlers=handlers,
    )
