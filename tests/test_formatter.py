"""Tests for StreamFormatter, using recording table and output sinks."""

import logging as _logging
import sys as _sys

import pytest as _pytest

import streamformatter.config as config
import streamformatter.formatter as formatter
import streamformatter.table.base as table_base

SEPARATOR = table_base.SEPARATOR


def _chain() -> BaseException:
    try:
        try:
            try:
                raise KeyError("c")
            except KeyError as c:
                raise ValueError("b") from c
        except ValueError as b:
            raise RuntimeError("a") from b
    except RuntimeError as a:
        return a


class TestLayout:
    """Order of writes and rows."""

    def test_level_name_is_table_title(self, make_formatter, make_entry, recording_table) -> None:
        make_formatter().format(make_entry(level_name="WARNING"))
        assert recording_table.title == "WARNING"

    def test_empty_record(self, make_formatter, make_entry, recording_table) -> None:
        """Only General Info is emitted when context and extra are empty."""
        f = make_formatter()
        output = f.format(make_entry())

        assert recording_table.rows == [
            ["General Info"],
            SEPARATOR,
            ["Time", "2024-01-02T03:04:05+0000"],
            ["Level", "ERROR"],
        ]
        assert output.count("test message") == 1

    def test_block_structure(self, make_formatter, make_entry) -> None:
        f = make_formatter()
        lines = f.format(make_entry()).split("\n")

        assert lines[0] == "=" * 270
        assert lines[1] == "[2024-01-02T03:04:05+0000] app.ERROR: test message"
        assert lines[2] == ""
        assert lines[3] == "General Info"
        assert lines[-3:] == ["Level|ERROR", "", ""]

    def test_table_is_configured(self, make_formatter, make_entry, recording_table) -> None:
        f = make_formatter(table_style="box-double", column_widths=(10, 15, 50))
        f.format(make_entry())

        assert recording_table.style == "box-double"
        assert recording_table.max_widths == [10, 15, 50]
        assert recording_table.widths == [10, 15, 50]

    def test_section_order(self, make_formatter, make_entry, recording_table) -> None:
        """General Info, then Extra, then Context."""
        f = make_formatter()
        f.format(make_entry(context={"app": "x"}, extra={"host": "web1"}))

        assert recording_table.rows == [
            ["General Info"],
            SEPARATOR,
            ["Time", "2024-01-02T03:04:05+0000"],
            ["Level", "ERROR"],
            SEPARATOR,
            ["Extra"],
            SEPARATOR,
            ["Host", "web1"],
            SEPARATOR,
            ["Context"],
            SEPARATOR,
            ["App", "x"],
        ]

    def test_empty_message_still_writes_a_line(
        self, make_formatter, make_entry, recording_output
    ) -> None:
        f = make_formatter(format="%message%")
        lines = f.format(make_entry(message="")).split("\n")
        assert lines[1] == ""
        assert lines[3] == "General Info"


class TestFactRows:
    """Key/value row rules."""

    def test_flat_value_round_trip(self, make_formatter, make_entry, recording_table) -> None:
        make_formatter().format(make_entry(context={"app": "x"}))
        assert recording_table.rows_for("App") == [["App", "x"]]

    def test_label_transform(self, make_formatter, make_entry, recording_table) -> None:
        make_formatter().format(make_entry(context={"  user_id_": 7}))
        assert recording_table.data_rows()[-1] == ["User id", "7"]

    def test_sequence_value(self, make_formatter, make_entry, recording_table) -> None:
        make_formatter().format(make_entry(context={"four": ["abc", "xyz"]}))
        assert recording_table.rows_for("four") == [["four", "abc"], ["", "xyz"]]

    def test_mapping_value_uses_three_cells(
        self, make_formatter, make_entry, recording_table
    ) -> None:
        make_formatter().format(make_entry(context={"user": {"id": 1, "name": "ann"}}))
        assert recording_table.rows_for("user") == [["user", "id", "1"], ["", "name", "ann"]]

    def test_multi_row_labels_are_not_capitalized(
        self, make_formatter, make_entry, recording_table
    ) -> None:
        make_formatter().format(
            make_entry(context={"_read_only_ ": ["a", "b"], "Owner_info": {"id": 2}})
        )
        assert recording_table.rows_for("read only") == [["read only", "a"], ["", "b"]]
        assert recording_table.rows_for("Owner info") == [["Owner info", "id", "2"]]

    def test_empty_containers(self, make_formatter, make_entry, recording_table) -> None:
        make_formatter().format(make_entry(context={"tags": [], "meta": {}}))
        assert recording_table.data_rows()[-2:] == [["Tags", "[]"], ["Meta", "{}"]]

    def test_literals(self, make_formatter, make_entry, recording_table) -> None:
        make_formatter().format(make_entry(context={"a": None, "b": True, "c": False}))
        assert recording_table.data_rows()[-3:] == [["A", "null"], ["B", "true"], ["C", "false"]]

    def test_numeric_key(self, make_formatter, make_entry, recording_table) -> None:
        make_formatter().format(make_entry(context={0: "zero"}))
        assert recording_table.data_rows()[-1] == ["0", "zero"]

    def test_truncation(self, make_formatter, make_entry, recording_table) -> None:
        make_formatter().format(make_entry(context={"long": "x" * 1500}))
        assert len(recording_table.data_rows()[-1][1]) == 1000

    def test_truncation_limit_is_configurable(
        self, make_formatter, make_entry, recording_table
    ) -> None:
        make_formatter(max_value_length=5).format(make_entry(context={"long": "abcdefgh"}))
        assert recording_table.data_rows()[-1] == ["Long", "abcde"]

    def test_normalization_limits_apply(self, make_formatter, make_entry, recording_table) -> None:
        make_formatter(max_normalize_item_count=1).format(make_entry(context={"ids": [1, 2, 3]}))
        assert recording_table.rows_for("Ids") == [
            ["Ids", "1"],
            ["", "Over 1 items (3 total), aborting normalization"],
        ]


class TestNewlinePolicy:
    """Line breaks in values."""

    def test_collapsed_when_disallowed(self, make_formatter, make_entry, recording_table) -> None:
        f = make_formatter(format="%context.note%")
        output = f.format(make_entry(context={"note": "one\ntwo"}))

        assert output.split("\n")[1] == "one two"
        assert recording_table.data_rows()[-1] == ["Note", "one two"]

    def test_preserved_when_allowed(self, make_formatter, make_entry, recording_table) -> None:
        f = make_formatter(format="%context.note%", allow_inline_line_breaks=True)
        output = f.format(make_entry(context={"note": "one\ntwo"}))

        assert "one\ntwo" in output
        assert recording_table.data_rows()[-1] == ["Note", "one\ntwo"]


class TestTemplate:
    """Message line substitution."""

    def test_top_level_fields(self, make_formatter, make_entry) -> None:
        f = make_formatter(format="%channel%|%level%|%level_name%|%message%")
        assert f.format(make_entry()).split("\n")[1] == "app|400|ERROR|test message"

    def test_context_and_extra_keys(self, make_formatter, make_entry) -> None:
        f = make_formatter(format="%context.user% on %extra.host%")
        line = f.format(make_entry(context={"user": "ann"}, extra={"host": "web1"})).split("\n")[1]
        assert line == "ann on web1"

    def test_keys_with_spaces_and_punctuation(self, make_formatter, make_entry) -> None:
        f = make_formatter(format="%context.user id% %extra.a:b% %context.user%")
        entry = make_entry(context={"user id": "ann", "user": "bob"}, extra={"a:b": "c"})
        assert f.format(entry).split("\n")[1] == "ann c bob"

    def test_longest_key_wins(self, make_formatter, make_entry) -> None:
        f = make_formatter(format="%context.a.b%")
        entry = make_entry(context={"a": "short", "a.b": "long"})
        assert f.format(entry).split("\n")[1] == "long"

    def test_whole_mappings(self, make_formatter, make_entry) -> None:
        f = make_formatter(format="%message% %context% %extra%")
        line = f.format(make_entry(context={"a": 1})).split("\n")[1]
        assert line == 'test message {"a":1} '

    def test_unknown_tokens_stay(self, make_formatter, make_entry) -> None:
        f = make_formatter(format="%nope% %context.missing% 100%")
        line = f.format(make_entry()).split("\n")[1]
        assert line == "%nope% %context.missing% 100%"

    def test_substituted_keys_stay_in_table(
        self, make_formatter, make_entry, recording_table
    ) -> None:
        f = make_formatter(format="%context.user%")
        f.format(make_entry(context={"user": "ann"}))
        assert recording_table.rows_for("User") == [["User", "ann"]]

    def test_exception_renders_inline(self, make_formatter, make_entry) -> None:
        f = make_formatter(format="%context.error%")
        line = f.format(make_entry(context={"error": RuntimeError("error")})).split("\n")[1]
        assert line == "[object] (RuntimeError(code: 0): error at unknown location)"

    def test_message_formatter_strategy(self, make_formatter, make_entry) -> None:
        f = make_formatter()
        f.set_formatter(lambda entry: f"custom {entry.channel}")
        assert f.format(make_entry()).split("\n")[1] == "custom app"

        f.set_formatter(None)
        assert f.format(make_entry()).split("\n")[1].endswith("test message")


class TestExceptionRows:
    """Exceptions in context or extra expand into row groups."""

    def test_chain_of_three(self, make_formatter, make_entry, recording_table) -> None:
        make_formatter().format(make_entry(context={"exception": _chain()}))

        rows = recording_table.rows
        start = rows.index(["Context"]) + 2
        expansion = rows[start:]
        leading = [r[0] for r in expansion if r is not SEPARATOR and r[0].endswith("Throwable")]
        assert leading == ["Throwable", "previous Throwable", "previous Throwable"]
        assert expansion.count(SEPARATOR) == 2
        assert [r[1] for r in expansion if r is not SEPARATOR and r[0] == "Message"] == [
            "a",
            "b",
            "'c'",
        ]

    def test_trace_rows_follow_toggle(self, make_formatter, make_entry, recording_table) -> None:
        f = make_formatter()
        f.format(make_entry(extra={"exception": _chain()}))
        assert not [r for r in recording_table.data_rows() if r[0] == "Trace"]

        f.include_stacktraces()
        f.format(make_entry(extra={"exception": _chain()}))
        traces = [r for r in recording_table.data_rows() if r[0] == "Trace"]
        assert len(traces) == 3
        assert "\n" in traces[0][1]

    def test_log_record_exc_info(self, make_formatter, recording_table) -> None:
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _logging.getLogger("jobs").makeRecord(
                "jobs", _logging.ERROR, __file__, 1, "job failed", (), _sys.exc_info()
            )

        make_formatter().format(record)
        assert ["Extra"] in recording_table.rows
        assert ["Throwable", "0"] in recording_table.rows
        assert ["Message", "boom"] in recording_table.rows


class TestToggles:
    """Configuration toggles and properties."""

    def test_stacktrace_toggle_enables_line_breaks(self, make_formatter) -> None:
        f = make_formatter()
        assert f.include_stacktraces() is f
        assert f.config.include_stacktraces
        assert f.config.allow_inline_line_breaks

    def test_stacktrace_toggle_is_idempotent(self, make_formatter) -> None:
        once = make_formatter().include_stacktraces().config
        twice = make_formatter().include_stacktraces().include_stacktraces().config
        assert once == twice

    def test_disabling_stacktraces_keeps_line_breaks(self, make_formatter) -> None:
        f = make_formatter().include_stacktraces().include_stacktraces(False)
        assert not f.config.include_stacktraces
        assert f.config.allow_inline_line_breaks

    def test_line_break_toggle(self, make_formatter) -> None:
        f = make_formatter()
        f.allow_inline_line_breaks()
        assert f.config.allow_inline_line_breaks
        f.allow_inline_line_breaks(False)
        assert not f.config.allow_inline_line_breaks

    def test_properties(self, make_formatter) -> None:
        f = make_formatter(date_format="%H:%M", max_normalize_depth=3, max_normalize_item_count=7)
        assert f.date_format == "%H:%M"
        assert f.max_normalize_depth == 3
        assert f.max_normalize_item_count == 7

    def test_public_stringify(self, make_formatter) -> None:
        f = make_formatter()
        assert f.stringify({"a": "x\ny"}) == '{"a":"x\\ny"}'
        f.allow_inline_line_breaks()
        assert f.stringify({"a": "x\ny"}) == '{"a":"x\ny"}'


class TestStateAndBatch:
    """Sink reuse across calls."""

    def test_batch_is_concatenation(self, make_formatter, make_entry) -> None:
        entries = [
            make_entry(message="one", context={"a": 1}),
            make_entry(message="two", extra={"b": [1, 2]}),
            make_entry(message="three"),
        ]
        f = make_formatter()
        expected = "".join(f.format(e) for e in entries)
        assert f.format_batch(entries) == expected

    def test_batch_of_nothing(self, make_formatter) -> None:
        assert make_formatter().format_batch([]) == ""

    def test_failed_render_does_not_leak(
        self, make_formatter, make_entry, recording_table
    ) -> None:
        f = make_formatter()
        clean = f.format(make_entry(message="second"))

        recording_table.fail_on_render = True
        with _pytest.raises(RuntimeError, match="table rendering failed"):
            f.format(make_entry(message="first", context={"leftover": 1}))

        recording_table.fail_on_render = False
        assert f.format(make_entry(message="second")) == clean

    def test_stdlib_record(self, make_formatter) -> None:
        record = _logging.getLogger("shop").makeRecord(
            "shop", _logging.INFO, __file__, 1, "sold %d", (3,), None, extra={"sku": "A1"}
        )
        output = make_formatter(format="%channel%: %message%").format(record)
        assert output.split("\n")[1] == "shop: sold 3"
        assert "Sku|A1" in output


class TestConstruction:
    """Default collaborators."""

    def test_unknown_style_fails_at_construction(self) -> None:
        with _pytest.raises(ValueError, match="Unknown table style"):
            formatter.StreamFormatter(config.FormatterConfig(table_style="fancy"))

    def test_defaults(self) -> None:
        f = formatter.StreamFormatter()
        assert f.config == config.FormatterConfig()

    def test_usable_as_logging_formatter(self, make_formatter) -> None:
        assert isinstance(make_formatter(), _logging.Formatter)
