"""
Pydantic configuration schemas for spoollog.

Every field has a default, so an empty YAML document is a valid config.

Usage:
    config = SpoolLogConfig.from_yaml("logging.yaml")
    log = SpoolLogger.from_config(config)
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from spoollog.buffer import OverflowPolicy


class FlushMode(str, Enum):
    TIMER = "timer"      # background thread flushes every interval
    INLINE = "inline"    # log() flushes when the interval has elapsed


class FlushConfig(BaseModel):
    mode: FlushMode = FlushMode.TIMER
    interval_ms: int = Field(3000, gt=0)


class QueueConfig(BaseModel):
    capacity: Optional[int] = Field(None, ge=1)       # None = unbounded
    overflow: OverflowPolicy = OverflowPolicy.DROP_OLDEST
    block_timeout: float = Field(1.0, ge=0)


class RetentionConfig(BaseModel):
    on_startup: bool = True
    max_age_days: int = Field(60, ge=0)
    size_threshold: int = Field(5000, ge=0)          # in size_block_bytes blocks
    size_block_bytes: int = Field(2048, ge=1)


class CompressionConfig(BaseModel):
    suffix: str = ".gz"
    level: int = Field(9, ge=0, le=9)

    @field_validator("suffix")
    @classmethod
    def suffix_is_distinct(cls, v: str) -> str:
        if not v.startswith(".") or v == ".log":
            raise ValueError(f"compression suffix must start with '.' and differ from '.log', got {v!r}")
        return v


class ConsoleConfig(BaseModel):
    enabled: bool = True
    color: bool = False


class SpoolLogConfig(BaseModel):
    directory: str = "logs"
    flush: FlushConfig = Field(default_factory=FlushConfig)
    queue: QueueConfig = Field(default_factory=QueueConfig)
    retention: RetentionConfig = Field(default_factory=RetentionConfig)
    compression: CompressionConfig = Field(default_factory=CompressionConfig)
    console: ConsoleConfig = Field(default_factory=ConsoleConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "SpoolLogConfig":
        """Load and validate from a YAML file."""
        path = Path(path)
        return cls.from_yaml_string(path.read_text(encoding="utf-8"))

    @classmethod
    def from_yaml_string(cls, yaml_string: str) -> "SpoolLogConfig":
        """Load and validate from a YAML string."""
        data = yaml.safe_load(yaml_string) or {}
        return cls.model_validate(data)

    @classmethod
    def from_dict(cls, data: dict) -> "SpoolLogConfig":
        """Load and validate from a dict."""
        return cls.model_validate(data)

    def to_dict(self, exclude_none: bool = False) -> dict:
        return self.model_dump(mode="json", exclude_none=exclude_none)
