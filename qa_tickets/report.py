"""
End-of-run reporting for the QA Ticket Automation System.

Logs a summary of candidates and tickets, and optionally writes the ticket
results to a formatted Excel workbook with:
- Bold headers
- Fixed column widths
- Rows sorted by author then article title
"""

import logging
from pathlib import Path
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .models import Author, CandidateSet, TicketResult, TicketResults


logger = logging.getLogger(__name__)


class ReportError(Exception):
    """Error during report generation."""
    pass


# Define column configuration
COLUMN_CONFIG = [
    {"key": "author", "header": "Author", "width": 30},
    {"key": "author_kind", "header": "Author Kind", "width": 18},
    {"key": "author_id", "header": "Author ID", "width": 16},
    {"key": "article_title", "header": "Article Title", "width": 60},
    {"key": "ticket_id", "header": "Ticket ID", "width": 14},
    {"key": "status", "header": "Status", "width": 12},
    {"key": "error", "header": "Error", "width": 50},
]


def flatten_results(results: TicketResults) -> list[tuple[Author, TicketResult]]:
    """
    Flatten per-author results into rows sorted by author name and title.
    """
    rows = [
        (author, result)
        for author, author_results in results.items()
        for result in author_results
    ]
    return sorted(
        rows,
        key=lambda row: (row[0].name, row[0].kind.value, row[1].article_title),
    )


def result_to_row(author: Author, result: TicketResult) -> list[Any]:
    """
    Convert a ticket result to a row of values.

    Returns:
        List of cell values matching COLUMN_CONFIG order.
    """
    return [
        author.name,
        author.kind.value,
        author.id,
        result.article_title,
        result.ticket_id if result.ticket_id is not None else "",
        result.status,
        result.error or "",
    ]


def log_candidates(candidates: CandidateSet) -> None:
    """Log the candidate articles found for each author."""
    logger.info("Potential QA articles:")
    for author, articles in candidates.items():
        logger.info(f"  {author.label()} ({author.id}): {len(articles)} articles")
        for article in articles:
            logger.debug(f"    - {article.title} ({article.updated_at.isoformat()})")


def log_results(results: TicketResults) -> None:
    """Log the tickets created for each author."""
    logger.info("Tickets created:")
    failed = 0
    for author, author_results in results.items():
        logger.info(f"  {author.label()} ({author.id}):")
        for result in author_results:
            if result.succeeded:
                logger.info(f"    - #{result.ticket_id}: {result.article_title}")
            else:
                failed += 1
                logger.info(f"    - FAILED: {result.article_title} ({result.error})")
    if failed:
        logger.warning(f"{failed} QA tickets could not be created")


class ExcelReportGenerator:
    """
    Generator for the Excel run report.

    Produces a single sheet with styled headers, bordered cells and
    alternating row colors.
    """

    # Style configuration
    HEADER_FONT = Font(bold=True, color="FFFFFF", size=11)
    HEADER_FILL = PatternFill(start_color="2F5496", end_color="2F5496", fill_type="solid")
    HEADER_ALIGNMENT = Alignment(horizontal="center", vertical="center", wrap_text=True)

    CELL_ALIGNMENT = Alignment(vertical="top", wrap_text=True)
    CELL_BORDER = Border(
        left=Side(style="thin", color="D0D0D0"),
        right=Side(style="thin", color="D0D0D0"),
        top=Side(style="thin", color="D0D0D0"),
        bottom=Side(style="thin", color="D0D0D0"),
    )

    # Alternating row colors for readability
    ROW_FILL_ODD = PatternFill(start_color="F2F2F2", end_color="F2F2F2", fill_type="solid")
    ROW_FILL_EVEN = PatternFill(start_color="FFFFFF", end_color="FFFFFF", fill_type="solid")

    def __init__(self, output_path: Path):
        """
        Initialize the generator.

        Args:
            output_path: Where the workbook is written.
        """
        self._output_path = output_path

    def generate(self, results: TicketResults, period_tag: str) -> Path:
        """
        Write the ticket results to an Excel workbook.

        Args:
            results: Ticket results grouped by author.
            period_tag: QA period, used as the sheet title.

        Returns:
            Path to the generated Excel file.

        Raises:
            ReportError: If report generation fails.
        """
        try:
            rows = flatten_results(results)

            wb = Workbook()
            ws = wb.active
            ws.title = period_tag[:31]

            self._write_headers(ws)
            self._write_data(ws, rows)
            self._apply_column_widths(ws)
            ws.freeze_panes = "A2"

            self._output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(self._output_path)

            logger.info(f"Excel report saved to: {self._output_path}")
            return self._output_path

        except OSError as e:
            logger.error(f"Failed to generate Excel report: {e}")
            raise ReportError(f"Report generation failed: {e}") from e

    def _write_headers(self, ws: Worksheet) -> None:
        """Write and style header row."""
        for col_idx, col_config in enumerate(COLUMN_CONFIG, 1):
            cell = ws.cell(row=1, column=col_idx, value=col_config["header"])
            cell.font = self.HEADER_FONT
            cell.fill = self.HEADER_FILL
            cell.alignment = self.HEADER_ALIGNMENT
            cell.border = self.CELL_BORDER

        ws.row_dimensions[1].height = 30

    def _write_data(
        self,
        ws: Worksheet,
        rows: list[tuple[Author, TicketResult]],
    ) -> None:
        """Write data rows with styling."""
        for row_idx, (author, result) in enumerate(rows, 2):
            fill = self.ROW_FILL_ODD if row_idx % 2 == 0 else self.ROW_FILL_EVEN

            for col_idx, value in enumerate(result_to_row(author, result), 1):
                cell = ws.cell(row=row_idx, column=col_idx, value=value)
                cell.alignment = self.CELL_ALIGNMENT
                cell.border = self.CELL_BORDER
                cell.fill = fill

    def _apply_column_widths(self, ws: Worksheet) -> None:
        """Apply column widths from configuration."""
        for col_idx, col_config in enumerate(COLUMN_CONFIG, 1):
            column_letter = get_column_letter(col_idx)
            ws.column_dimensions[column_letter].width = col_config["width"]


def generate_report(results: TicketResults, period_tag: str, output_path: Path) -> Path:
    """
    Convenience function to generate an Excel report.

    Returns:
        Path to generated report.
    """
    return ExcelReportGenerator(output_path).generate(results, period_tag)
