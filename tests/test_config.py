"""
Tests for the pydantic config schemas.

Covers:
- Defaults (empty YAML is valid)
- YAML parsing and validation
- Error cases
"""

import pytest
from pydantic import ValidationError

from spoollog.buffer import OverflowPolicy
from spoollog.config import (
    CompressionConfig,
    FlushMode,
    QueueConfig,
    RetentionConfig,
    SpoolLogConfig,
)


FULL_YAML = """
directory: var/logs
flush:
  mode: inline
  interval_ms: 1500
queue:
  capacity: 500
  overflow: block
  block_timeout: 0.25
retention:
  on_startup: false
  max_age_days: 14
  size_threshold: 10
  size_block_bytes: 1048576
compression:
  suffix: .clog
  level: 6
console:
  enabled: false
  color: true
"""


class TestDefaults:
    def test_defaults(self):
        config = SpoolLogConfig()
        assert config.directory == "logs"
        assert config.flush.mode is FlushMode.TIMER
        assert config.flush.interval_ms == 3000
        assert config.queue.capacity is None
        assert config.queue.overflow is OverflowPolicy.DROP_OLDEST
        assert config.retention.max_age_days == 60
        assert config.retention.size_threshold == 5000
        assert config.retention.size_block_bytes == 2048
        assert config.compression.suffix == ".gz"
        assert config.console.enabled is True

    def test_empty_yaml_is_valid(self):
        assert SpoolLogConfig.from_yaml_string("") == SpoolLogConfig()


class TestYaml:
    def test_full_document(self):
        config = SpoolLogConfig.from_yaml_string(FULL_YAML)
        assert config.directory == "var/logs"
        assert config.flush.mode is FlushMode.INLINE
        assert config.flush.interval_ms == 1500
        assert config.queue.overflow is OverflowPolicy.BLOCK
        assert config.queue.block_timeout == 0.25
        assert config.retention.on_startup is False
        assert config.retention.size_block_bytes == 1024 * 1024
        assert config.compression.suffix == ".clog"
        assert config.console.color is True

    def test_from_file(self, tmp_path):
        path = tmp_path / "logging.yaml"
        path.write_text(FULL_YAML)
        assert SpoolLogConfig.from_yaml(path).queue.capacity == 500

    def test_partial_sections_keep_defaults(self):
        config = SpoolLogConfig.from_yaml_string("flush:\n  mode: inline\n")
        assert config.flush.interval_ms == 3000
        assert config.retention.max_age_days == 60

    def test_to_dict_round_trip(self):
        config = SpoolLogConfig.from_yaml_string(FULL_YAML)
        assert SpoolLogConfig.from_dict(config.to_dict()) == config

    def test_unbounded_queue(self):
        assert SpoolLogConfig.from_dict({"queue": {"capacity": None}}).queue.capacity is None


class TestValidation:
    def test_unknown_flush_mode(self):
        with pytest.raises(ValidationError):
            SpoolLogConfig.from_dict({"flush": {"mode": "sometimes"}})

    def test_non_positive_interval(self):
        with pytest.raises(ValidationError):
            SpoolLogConfig.from_dict({"flush": {"interval_ms": 0}})

    def test_unknown_overflow_policy(self):
        with pytest.raises(ValidationError):
            QueueConfig(overflow="explode")

    def test_zero_capacity(self):
        with pytest.raises(ValidationError):
            QueueConfig(capacity=0)

    def test_negative_age(self):
        with pytest.raises(ValidationError):
            RetentionConfig(max_age_days=-1)

    def test_zero_block_size(self):
        with pytest.raises(ValidationError):
            RetentionConfig(size_block_bytes=0)

    def test_compression_suffix_must_differ(self):
        with pytest.raises(ValidationError):
            CompressionConfig(suffix=".log")

    def test_compression_suffix_needs_dot(self):
        with pytest.raises(ValidationError):
            CompressionConfig(suffix="gz")

    def test_compression_level_range(self):
        with pytest.raises(ValidationError):
            CompressionConfig(level=10)
