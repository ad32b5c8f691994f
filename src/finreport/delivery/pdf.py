"""
finreport.delivery.pdf
PDF creation (reportlab).
"""

import logging
from html import escape
from io import BytesIO
from typing import Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, letter
from reportlab.lib.styles import StyleSheet1, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from finreport.delivery.templates import FOOTER, KIND_TITLES, NET_LABELS, format_money
from finreport.domain.entities import FinancialRecord, KindSummary, RecordKind, ReportData
from finreport.domain.errors import RenderError

logger = logging.getLogger(__name__)

PAGE_SIZES = {"A4": A4, "LETTER": letter}

# A table row must fit on one page.
MAX_CELL_CHARS = 300

HEADER_COLORS = {
    RecordKind.EXPENSE: colors.HexColor("#e74c3c"),
    RecordKind.INVOICE: colors.HexColor("#27ae60"),
    RecordKind.PAYMENT: colors.HexColor("#2980b9"),
}
SUMMARY_HEADER = colors.HexColor("#34495e")
PANEL = colors.HexColor("#ecf0f1")

GROUP_TITLES = {
    "category": "by Category",
    "vendor": "by Vendor",
    "client": "by Client",
    "month": "by Month",
}


def clip_cell_text(text: str, limit: int = MAX_CELL_CHARS) -> str:
    """Shorten text to at most limit characters, ending in an ellipsis."""
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + "\u2026"


def _detail_style(header_color) -> TableStyle:
    return TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), header_color),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.lightgrey),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("ALIGN", (-1, 1), (-1, -1), "RIGHT"),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.whitesmoke]),
    ])


def _summary_style() -> TableStyle:
    return TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), SUMMARY_HEADER),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.lightgrey),
        ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ])


def _with_total_row(style: TableStyle) -> TableStyle:
    style.add("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold")
    style.add("BACKGROUND", (0, -1), (-1, -1), PANEL)
    style.add("LINEABOVE", (0, -1), (-1, -1), 1, SUMMARY_HEADER)
    return style


class PdfRenderer:
    """Render ReportData into PDF bytes.

    The renderer holds its stylesheet between init() and close(); use it as a
    context manager, or call close() in a finally block.
    """

    def __init__(self, page_size: str = "A4"):
        if page_size.upper() not in PAGE_SIZES:
            raise ValueError(f"Unsupported page size: {page_size}")
        self.page_size = PAGE_SIZES[page_size.upper()]
        self._styles: Optional[StyleSheet1] = None

    @property
    def is_open(self) -> bool:
        return self._styles is not None

    def init(self) -> None:
        if self._styles is not None:
            return
        self._styles = getSampleStyleSheet()
        logger.debug("PDF renderer initialized")

    def close(self) -> None:
        if self._styles is None:
            return
        self._styles = None
        logger.debug("PDF renderer closed")

    def __enter__(self) -> "PdfRenderer":
        self.init()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def render(self, report: ReportData) -> bytes:
        """Build the report PDF.

        Raises:
            RenderError: If reportlab fails to lay out or write the document
        """
        self.init()
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=self.page_size,
            leftMargin=1 * cm,
            rightMargin=1 * cm,
            topMargin=1 * cm,
            bottomMargin=1.5 * cm,
            title=report.title,
        )

        try:
            doc.build(
                self._story(report),
                onFirstPage=self._draw_footer,
                onLaterPages=self._draw_footer,
            )
        except Exception as e:
            logger.error("Error generating PDF: %s", e)
            raise RenderError(f"Error generating PDF: {e}") from e

        return buffer.getvalue()

    def _draw_footer(self, canvas, doc) -> None:
        canvas.saveState()
        canvas.setFont("Helvetica", 8)
        canvas.setFillColor(colors.grey)
        canvas.drawCentredString(self.page_size[0] / 2, 0.75 * cm, f"Page {doc.page}")
        canvas.restoreState()

    def _p(self, text: str, style: str = "Normal") -> Paragraph:
        return Paragraph(escape(text, quote=False), self._styles[style])

    def _story(self, report: ReportData) -> list:
        story = [
            self._p(report.title, "Title"),
            self._p(f"Period: {report.period_label}"),
            self._p(f"Generated: {report.generated_at.strftime('%Y-%m-%d %H:%M')}"),
            Spacer(1, 0.5 * cm),
            self._summary_table(report),
            Spacer(1, 0.5 * cm),
        ]

        for summary in report.summaries():
            story.extend(self._kind_section(summary))

        if report.unpaid_invoices:
            story.append(self._p("Unpaid Invoices", "Heading2"))
            story.append(self._unpaid_table(report))
            story.append(Spacer(1, 0.5 * cm))

        if report.skipped_records or report.defaulted_amounts:
            story.append(
                self._p(
                    f"Data notes: {report.skipped_records} record(s) without a usable date "
                    f"were skipped; {report.defaulted_amounts} record(s) had a missing or "
                    "unreadable amount counted as $0.00.",
                    "Italic",
                )
            )

        story.append(Spacer(1, 0.5 * cm))
        story.append(self._p(FOOTER, "Italic"))
        return story

    def _summary_table(self, report: ReportData) -> Table:
        data = [["Summary", "Records", "Total"]]
        for summary in report.summaries():
            data.append([
                KIND_TITLES[summary.kind],
                str(summary.statistics.count),
                format_money(summary.total),
            ])
        if report.unpaid_invoices:
            data.append([
                "Outstanding Balance",
                str(len(report.unpaid_invoices)),
                format_money(report.outstanding_balance),
            ])
        data.append([NET_LABELS[report.net_basis], "", format_money(report.net_amount)])

        table = Table(data, colWidths=[9 * cm, 3 * cm, 4 * cm])
        table.setStyle(_with_total_row(_summary_style()))
        return table

    def _kind_section(self, summary: KindSummary) -> list:
        title = KIND_TITLES[summary.kind]
        flowables = [self._p(title, "Heading2")]

        if summary.kind == RecordKind.EXPENSE:
            header = ["Date", "Description", "Vendor", "Category", "Amount"]
            widths = [2.2 * cm, 6.3 * cm, 4 * cm, 3.5 * cm, 3 * cm]
        else:
            header = ["Date", "Number", "Client", "Description", "Amount"]
            widths = [2.2 * cm, 2.8 * cm, 4.5 * cm, 6.5 * cm, 3 * cm]

        data = [header]
        if not summary.records:
            data.append(["-", self._p(f"No {title.lower()} for this period", "BodyText"), "", "", ""])
        for record in summary.records:
            data.append(self._detail_row(record))
        data.append(["", "", "", f"TOTAL {title.upper()}", format_money(summary.total)])

        table = Table(data, colWidths=widths, repeatRows=1)
        table.setStyle(_with_total_row(_detail_style(HEADER_COLORS[summary.kind])))
        flowables.append(table)
        flowables.append(Spacer(1, 0.4 * cm))

        for name, buckets in summary.groups.items():
            if name == "month" or not buckets:
                continue
            flowables.append(self._p(f"{title} {GROUP_TITLES.get(name, name)}", "Heading3"))
            flowables.append(self._group_table(buckets))
            flowables.append(Spacer(1, 0.4 * cm))

        return flowables

    def _detail_row(self, record: FinancialRecord) -> list:
        date_str = record.date.isoformat() if record.date else "-"
        if record.kind == RecordKind.EXPENSE:
            cells = [record.note, record.counterparty_name, record.category_name]
        else:
            cells = [record.reference_number, record.counterparty_name, record.note]
        return [
            date_str,
            *[self._p(clip_cell_text(cell or "-"), "BodyText") for cell in cells],
            format_money(record.amount),
        ]

    def _group_table(self, buckets) -> Table:
        data = [["Group", "Count", "Subtotal"]]
        for bucket in buckets.values():
            data.append([bucket.label, str(bucket.count), format_money(bucket.subtotal)])
        table = Table(data, colWidths=[9 * cm, 3 * cm, 4 * cm])
        table.setStyle(_summary_style())
        return table

    def _unpaid_table(self, report: ReportData) -> Table:
        data = [["Date", "Number", "Client", "Amount", "Balance"]]
        for invoice in report.unpaid_invoices:
            data.append([
                invoice.date.isoformat() if invoice.date else "-",
                clip_cell_text(invoice.reference_number or "-", 40),
                self._p(clip_cell_text(invoice.counterparty_name or "-"), "BodyText"),
                format_money(invoice.amount),
                format_money(invoice.balance),
            ])
        data.append(["", "", "OUTSTANDING", "", format_money(report.outstanding_balance)])
        table = Table(data, colWidths=[2.2 * cm, 2.8 * cm, 7 * cm, 3.5 * cm, 3.5 * cm], repeatRows=1)
        style = _with_total_row(_detail_style(HEADER_COLORS[RecordKind.INVOICE]))
        style.add("ALIGN", (3, 1), (-1, -1), "RIGHT")
        table.setStyle(style)
        return table
