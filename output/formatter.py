"""
Output formatter for scan reports.

Supports CSV (one line per symbol) and JSON output formats.
"""

import json
import sys
from enum import Enum
from typing import List, Optional, TextIO

from scanner.scanner import ReportRow, ScanReport
from utils.helpers import format_currency, format_percentage, format_timestamp

CSV_HEADER = "period start,symbol,price,change %,min,max,30d avg"


class OutputFormat(Enum):
    """Supported output formats."""

    CSV = "csv"
    JSON = "json"


class OutputFormatter:
    """Formats scan reports for various output destinations."""

    def format(
        self,
        report: ScanReport,
        format_type: OutputFormat = OutputFormat.CSV,
    ) -> str:
        """
        Format a scan report.

        Args:
            report: The scan report to format
            format_type: Output format type

        Returns:
            Formatted string
        """
        if format_type == OutputFormat.CSV:
            return self._format_csv(report)
        elif format_type == OutputFormat.JSON:
            return self._format_json(report)
        else:
            raise ValueError(f"Unknown format type: {format_type}")

    def format_header(self) -> str:
        """CSV header line."""
        return CSV_HEADER

    def format_row(self, row: ReportRow) -> str:
        """
        Format a single row as a CSV line.

        Fields are comma-joined without quoting.
        """
        return ",".join([
            format_timestamp(row.period_start),
            row.symbol,
            format_currency(row.price),
            format_percentage(row.change_pct),
            format_currency(row.period_min),
            format_currency(row.period_max),
            format_currency(row.sma),
        ])

    def _format_csv(self, report: ScanReport) -> str:
        """Format as CSV."""
        lines = [self.format_header()]
        lines.extend(self.format_row(row) for row in report.rows)
        return "\n".join(lines)

    def _format_json(self, report: ScanReport) -> str:
        """Format as JSON."""
        return json.dumps(report.to_dict(), indent=2)


class CsvWriter:
    """
    Writes CSV lines to a stream as rows become available.

    The header is written on construction, before any row is known.
    """

    def __init__(self, stream: Optional[TextIO] = None, formatter: Optional[OutputFormatter] = None):
        self.stream = stream or sys.stdout
        self.formatter = formatter or OutputFormatter()
        self.rows_written = 0
        self._write(self.formatter.format_header())

    def write_row(self, row: ReportRow) -> None:
        self._write(self.formatter.format_row(row))
        self.rows_written += 1

    def write_rows(self, rows: List[ReportRow]) -> None:
        for row in rows:
            self.write_row(row)

    def _write(self, line: str) -> None:
        self.stream.write(line + "\n")
        self.stream.flush()


def print_report(report: ScanReport, format_type: OutputFormat = OutputFormat.CSV) -> None:
    """Convenience function to print a complete report to stdout."""
    formatter = OutputFormatter()
    print(formatter.format(report, format_type))
