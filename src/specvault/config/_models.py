"""Configuration models.

Each section is a frozen Pydantic model that ignores unknown keys, so a
configuration file written for a newer release still loads.
"""

from enum import StrEnum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from specvault._identifiers import validate_folder_name
from specvault.cache import DEFAULT_MAX_BYTES, DEFAULT_MAX_ITEMS

__all__ = [
    "CacheConfiguration",
    "LogFormat",
    "LogLevel",
    "LoggingConfiguration",
    "StorageConfiguration",
    "VaultConfiguration",
]


class LogLevel(StrEnum):
    """Log level threshold values, most verbose first."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class StorageConfiguration(BaseModel):
    """Storage configuration section.

    Attributes:
        base_path: Directory holding the vault.
        default_folder: Folder used for APIs created without one.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    base_path: str = Field(default="./data", min_length=1)
    default_folder: str = "active"

    @field_validator("default_folder")
    @classmethod
    def _check_folder_name(cls, value: str) -> str:
        return validate_folder_name(value)


class CacheConfiguration(BaseModel):
    """Cache configuration section.

    Attributes:
        max_bytes: Upper bound on the estimated size of cached values.
        max_items: Upper bound on the number of cached entries.
        revalidate: Refresh entries in the background after a hit.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    max_bytes: int = Field(default=DEFAULT_MAX_BYTES, gt=0)
    max_items: int = Field(default=DEFAULT_MAX_ITEMS, gt=0)
    revalidate: bool = True


class LoggingConfiguration(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty logs to stderr).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    file: str = ""


class VaultConfiguration(BaseModel):
    """Complete vault configuration."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    storage: StorageConfiguration = Field(default_factory=StorageConfiguration)
    cache: CacheConfiguration = Field(default_factory=CacheConfiguration)
    logging: LoggingConfiguration = Field(default_factory=LoggingConfiguration)
