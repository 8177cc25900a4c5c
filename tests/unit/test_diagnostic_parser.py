"""Tests for parsing Jenkins validator output into diagnostics."""

from __future__ import annotations

import pytest

from jenkinsfile_ls.models.diagnostics import DiagnosticSeverity
from jenkinsfile_ls.parser.diagnostics import SUCCESS_MESSAGE, parse_validation_response
from tests.conftest import SAMPLE_ERROR_RESPONSE


class TestSingleError:
    def test_unexpected_token(self) -> None:
        diagnostics = parse_validation_response(
            "WorkflowScript: 46: unexpected token: } @ line 46, column 1."
        )
        assert len(diagnostics) == 1
        diag = diagnostics[0]
        assert diag.line == 45
        assert diag.column == 0
        assert diag.severity == DiagnosticSeverity.ERROR
        assert diag.message == "unexpected token: }"
        assert diag.source == "jenkinsfile-ls"

    def test_message_with_quotes_and_commas(self) -> None:
        diagnostics = parse_validation_response(
            "WorkflowScript: 15: expecting '}', found 'stage' @ line 15, column 10."
        )
        assert len(diagnostics) == 1
        assert diagnostics[0].message == "expecting '}', found 'stage'"
        assert diagnostics[0].line == 14
        assert diagnostics[0].column == 9

    def test_message_containing_at_sign(self) -> None:
        diagnostics = parse_validation_response(
            "WorkflowScript: 3: bad email a@b.c @ line 3, column 7."
        )
        assert [d.message for d in diagnostics] == ["bad email a@b.c"]

    def test_message_is_trimmed(self) -> None:
        diagnostics = parse_validation_response(
            "WorkflowScript: 2:    Missing required section \"agent\"    @ line 2, column 1."
        )
        assert diagnostics[0].message == 'Missing required section "agent"'

    def test_line_number_prefix_may_differ_from_position(self) -> None:
        diagnostics = parse_validation_response(
            "WorkflowScript: 1: Not a valid section @ line 7, column 3."
        )
        assert (diagnostics[0].line, diagnostics[0].column) == (6, 2)


class TestMultipleErrors:
    def test_mixed_with_other_output(self) -> None:
        diagnostics = parse_validation_response(SAMPLE_ERROR_RESPONSE)
        assert [(d.line, d.column, d.message) for d in diagnostics] == [
            (9, 4, "Unexpected input"),
            (19, 2, "Missing closing brace"),
        ]

    def test_source_order_is_preserved(self) -> None:
        text = (
            "WorkflowScript: 30: later error @ line 30, column 1.\n"
            "WorkflowScript: 5: earlier error @ line 5, column 2.\n"
        )
        diagnostics = parse_validation_response(text)
        assert [d.line for d in diagnostics] == [29, 4]

    def test_several_fragments_on_one_line(self) -> None:
        text = (
            "WorkflowScript: 1: first @ line 1, column 1. "
            "WorkflowScript: 2: second @ line 2, column 4."
        )
        diagnostics = parse_validation_response(text)
        assert [d.message for d in diagnostics] == ["first", "second"]

    @pytest.mark.parametrize("count", [0, 1, 3, 8])
    def test_returns_one_diagnostic_per_fragment(self, count: int) -> None:
        text = "\n".join(
            f"WorkflowScript: {n}: problem {n} @ line {n}, column {n + 1}."
            for n in range(1, count + 1)
        )
        diagnostics = parse_validation_response(text)
        assert len(diagnostics) == count
        for n, diag in enumerate(diagnostics, start=1):
            assert diag.line == n - 1
            assert diag.column == n
            assert diag.message == f"problem {n}"


class TestRobustness:
    @pytest.mark.parametrize(
        "text",
        [
            "",
            "Some random output\nwithout any errors",
            SUCCESS_MESSAGE,
            "WorkflowScript: 4: no position information",
            "WorkflowScript: x: bad prefix @ line 1, column 1.",
            "WorkflowScript: 4: missing column @ line 4.",
            "WorkflowScript: 4: missing period @ line 4, column 2",
        ],
    )
    def test_unmatched_text_yields_no_diagnostics(self, text: str) -> None:
        assert parse_validation_response(text) == []

    def test_fragment_does_not_span_lines(self) -> None:
        text = (
            "WorkflowScript: 4: truncated message\n"
            "WorkflowScript: 9: real error @ line 9, column 2.\n"
        )
        diagnostics = parse_validation_response(text)
        assert [d.message for d in diagnostics] == ["real error"]

    def test_zero_positions_clamped(self) -> None:
        diagnostics = parse_validation_response(
            "WorkflowScript: 0: weird @ line 0, column 0."
        )
        assert (diagnostics[0].line, diagnostics[0].column) == (0, 0)

    def test_crlf_line_endings(self) -> None:
        text = (
            "Errors encountered validating Jenkinsfile:\r\n"
            "WorkflowScript: 2: first @ line 2, column 1.\r\n"
            "WorkflowScript: 3: second @ line 3, column 1.\r\n"
        )
        assert len(parse_validation_response(text)) == 2
