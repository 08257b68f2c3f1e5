"""
Tests for entry records.

Covers:
- Severity resolution
- Frame rendering and dedupe
- Payload stringification
- Entry construction (regular and exception)
"""

import json

import pytest

from spoollog.records import (
    Entry,
    Frame,
    Severity,
    dedupe_frames,
    stringify_payload,
)


# ═══════════════════════════════════════════════════════════════════
#  Severity
# ═══════════════════════════════════════════════════════════════════

class TestSeverity:
    def test_ordered(self):
        assert Severity.DEBUG < Severity.INFO < Severity.WARN < Severity.ERROR

    def test_python_compatible_values(self):
        assert Severity.DEBUG == 10
        assert Severity.INFO == 20
        assert Severity.WARN == 30
        assert Severity.ERROR == 40

    def test_from_name_case_insensitive(self):
        assert Severity.from_name("info") == Severity.INFO
        assert Severity.from_name("Error") == Severity.ERROR

    def test_warning_alias(self):
        assert Severity.from_name("warning") == Severity.WARN

    def test_from_name_invalid(self):
        with pytest.raises(ValueError, match="Unknown severity"):
            Severity.from_name("fatal")

    def test_from_value(self):
        assert Severity.from_value(20) == Severity.INFO
        assert Severity.from_value("debug") == Severity.DEBUG
        assert Severity.from_value(Severity.WARN) is Severity.WARN

    def test_from_value_unknown_int(self):
        with pytest.raises(ValueError, match="No severity"):
            Severity.from_value(25)

    def test_from_value_bad_type(self):
        with pytest.raises(TypeError):
            Severity.from_value(2.5)


# ═══════════════════════════════════════════════════════════════════
#  Frames
# ═══════════════════════════════════════════════════════════════════

class TestFrame:
    def test_signature(self):
        frame = Frame("app.Worker", "run", "app.py", 42)
        assert frame.signature() == "app.Worker#run:42"

    def test_str(self):
        frame = Frame("app.Worker", "run", "app.py", 42)
        assert str(frame) == "app.Worker.run(app.py:42)"

    def test_dedupe_keeps_first_occurrence_in_order(self):
        a = Frame("app.A", "f", "a.py", 1)
        b = Frame("app.B", "g", "b.py", 2)
        a_again = Frame("app.A", "f", "other.py", 1)   # same line+owner+function
        a_other_line = Frame("app.A", "f", "a.py", 9)
        result = dedupe_frames([a, b, a_again, a_other_line])
        assert result == (a, b, a_other_line)


# ═══════════════════════════════════════════════════════════════════
#  Payloads
# ═══════════════════════════════════════════════════════════════════

class TestStringifyPayload:
    def test_text_unchanged(self):
        assert stringify_payload("hello") == "hello"

    def test_dict_is_json(self):
        assert json.loads(stringify_payload({"a": 1})) == {"a": 1}

    def test_list_is_json(self):
        assert json.loads(stringify_payload([1, "two"])) == [1, "two"]

    def test_bytes_become_byte_values(self):
        assert stringify_payload(b"\x01\x02\xff") == "[1, 2, 255]"

    def test_other_objects_use_str(self):
        assert stringify_payload(42) == "42"


# ═══════════════════════════════════════════════════════════════════
#  Entry
# ═══════════════════════════════════════════════════════════════════

class TestEntry:
    TS = 1_700_000_000.123

    def test_create_basic(self):
        entry = Entry.create("info", "hello", call_site="app.Main", timestamp=self.TS)
        assert entry.severity is Severity.INFO
        assert entry.message == "hello"
        assert entry.timestamp_millis == 1_700_000_000_123
        assert entry.call_site == "app.Main"
        assert not entry.is_exception

    def test_date_label_day_granularity(self):
        entry = Entry.create(Severity.INFO, "x", call_site="c", timestamp=self.TS)
        month, day, year = entry.date_label.split("_")
        assert len(month) == 2 and len(day) == 2 and len(year) == 4

    def test_immutable(self):
        entry = Entry.create(Severity.INFO, "x", call_site="c")
        with pytest.raises(AttributeError):
            entry.message = "changed"

    def test_structured_payload_stringified(self):
        entry = Entry.create(Severity.DEBUG, {"k": "v"}, call_site="c")
        assert json.loads(entry.message) == {"k": "v"}

    def test_from_exception(self):
        chain = [
            Frame("app.A", "f", "a.py", 1),
            Frame("app.B", "g", "b.py", 2),
            Frame("app.A", "f", "a.py", 1),
        ]
        entry = Entry.from_exception(ValueError("boom"), call_site="app.A", call_chain=chain)
        assert entry.severity is Severity.ERROR
        assert entry.is_exception
        assert entry.exception_type == "ValueError"
        assert entry.exception_message == "boom"
        assert entry.message == "boom"
        assert len(entry.call_chain) == 3
        assert entry.summary == ("app.A#f:1", "app.B#g:2")

    def test_from_exception_without_message(self):
        entry = Entry.from_exception(RuntimeError(), call_site="c")
        assert entry.exception_message == "null"
