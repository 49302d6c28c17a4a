"""Tests for the run report."""

import logging

import pytest
from openpyxl import load_workbook

from qa_tickets.models import READ_ONLY_TICKET_ID, Author, AuthorKind, TicketResult
from qa_tickets.report import (
    COLUMN_CONFIG,
    ExcelReportGenerator,
    flatten_results,
    generate_report,
    log_results,
    result_to_row,
)


ALICE = Author(name="Alice", id=10)
BOB = Author(name="Bob", id=11)
CONTENT_BLOCK = Author(name="Content Block Edit", id=99, kind=AuthorKind.CONTENT_BLOCK)


@pytest.fixture
def results():
    return {
        BOB: [TicketResult(article_title="VPN", ticket_id=1002)],
        ALICE: [
            TicketResult(article_title="Reset MFA", ticket_id=1001),
            TicketResult(article_title="Broken", error="HTTP error! Status: 422"),
        ],
        CONTENT_BLOCK: [TicketResult(article_title="Snippet", ticket_id=READ_ONLY_TICKET_ID)],
    }


class TestFlattenResults:
    def test_sorted_by_author_then_title(self, results):
        rows = flatten_results(results)
        assert [(a.name, r.article_title) for a, r in rows] == [
            ("Alice", "Broken"),
            ("Alice", "Reset MFA"),
            ("Bob", "VPN"),
            ("Content Block Edit", "Snippet"),
        ]


class TestResultToRow:
    def test_created(self):
        row = result_to_row(ALICE, TicketResult(article_title="Reset MFA", ticket_id=1001))
        assert row == ["Alice", "resolved", 10, "Reset MFA", 1001, "created", ""]
        assert len(row) == len(COLUMN_CONFIG)

    def test_failed(self):
        row = result_to_row(ALICE, TicketResult(article_title="Broken", error="boom"))
        assert row[4:] == ["", "failed", "boom"]

    def test_read_only(self):
        row = result_to_row(
            CONTENT_BLOCK, TicketResult(article_title="Snippet", ticket_id=READ_ONLY_TICKET_ID)
        )
        assert row[1] == "content_block"
        assert row[4:6] == [READ_ONLY_TICKET_ID, "read only"]


class TestExcelReportGenerator:
    """Tests for ExcelReportGenerator."""

    def test_generate(self, tmp_path, results):
        path = tmp_path / "out" / "qa_report.xlsx"
        assert generate_report(results, "qa_oct_2026", path) == path

        ws = load_workbook(path).active
        assert ws.title == "qa_oct_2026"
        assert [c.value for c in ws[1]] == [c["header"] for c in COLUMN_CONFIG]
        assert ws.max_row == 5
        assert ws.cell(row=2, column=4).value == "Broken"
        assert ws.cell(row=1, column=1).font.bold

    def test_empty_results(self, tmp_path):
        path = ExcelReportGenerator(tmp_path / "empty.xlsx").generate({}, "qa_oct_2026")
        assert load_workbook(path).active.max_row == 1


class TestLogResults:
    def test_logs_failures(self, results, caplog):
        with caplog.at_level(logging.INFO, logger="qa_tickets.report"):
            log_results(results)
        assert "#1001: Reset MFA" in caplog.text
        assert "FAILED: Broken" in caplog.text
        assert "1 QA tickets could not be created" in caplog.text
