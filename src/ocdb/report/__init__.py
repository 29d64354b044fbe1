"""Report export for the venue catalog."""

from .pdf import render_report_pdf, report_filename, report_rows

__all__ = ["render_report_pdf", "report_filename", "report_rows"]
