"""Plain-text and HTML email bodies for a report."""

from decimal import Decimal
from html import escape

from finreport.domain.entities import NetBasis, RecordKind, ReportData

FOOTER = "This report was automatically generated by the HOA Financial Reporting System."

KIND_TITLES = {
    RecordKind.EXPENSE: "Expenses",
    RecordKind.INVOICE: "Invoiced Income",
    RecordKind.PAYMENT: "Payments Received",
}

NET_LABELS = {
    NetBasis.CASH: "Net (payments received - expenses)",
    NetBasis.ACCRUAL: "Net (invoiced - expenses)",
    NetBasis.EXPENSES_ONLY: "Net (expenses only)",
}


def format_money(amount: Decimal) -> str:
    """Format an amount as "$1,234.56" (negatives as "-$1,234.56")."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def render_email_text(report: ReportData) -> str:
    """Render the plain-text email body."""
    lines = [f"{report.title} - {report.period_label}", "", "Summary:"]

    for summary in report.summaries():
        stats = summary.statistics
        title = KIND_TITLES[summary.kind]
        lines.append(f"- {title}: {stats.count} totalling {format_money(stats.total)}")
        if summary.kind == RecordKind.EXPENSE:
            lines.append(f"  Average Expense: {format_money(stats.average)}")
            lines.append(f"  Min Expense: {format_money(stats.min)}")
            lines.append(f"  Max Expense: {format_money(stats.max)}")

    lines.append(f"- {NET_LABELS[report.net_basis]}: {format_money(report.net_amount)}")

    if report.unpaid_invoices:
        lines.append(
            f"- Outstanding Balance: {format_money(report.outstanding_balance)} "
            f"across {len(report.unpaid_invoices)} unpaid invoice(s)"
        )

    lines.extend(
        [
            "",
            "Please find the detailed financial report attached as a PDF.",
            "",
            FOOTER,
        ]
    )
    return "\n".join(lines)


def _category_rows(report: ReportData) -> str:
    rows = []
    for bucket in report.expenses.groups.get("category", {}).values():
        rows.append(
            "<tr>"
            f'<td style="padding: 8px; border-bottom: 1px solid #ddd;">{escape(bucket.label)}</td>'
            f'<td style="padding: 8px; border-bottom: 1px solid #ddd; text-align: right;">{bucket.count}</td>'
            f'<td style="padding: 8px; border-bottom: 1px solid #ddd; text-align: right;">{format_money(bucket.subtotal)}</td>'
            "</tr>"
        )
    return "\n".join(rows)


def render_email_html(report: ReportData) -> str:
    """Render the HTML email body."""
    summary_items = []
    for summary in report.summaries():
        stats = summary.statistics
        summary_items.append(
            f'<div class="summary-item"><strong>{KIND_TITLES[summary.kind]}:</strong> '
            f"{stats.count} totalling {format_money(stats.total)}</div>"
        )
    summary_items.append(
        f'<div class="summary-item"><strong>Average Expense:</strong> '
        f"{format_money(report.expenses.statistics.average)}</div>"
    )
    net_color = "#27ae60" if report.net_amount >= 0 else "#e74c3c"
    summary_items.append(
        f'<div class="summary-item"><strong>{NET_LABELS[report.net_basis]}:</strong> '
        f'<span style="color: {net_color};">{format_money(report.net_amount)}</span></div>'
    )
    if report.unpaid_invoices:
        summary_items.append(
            f'<div class="summary-item"><strong>Outstanding Balance:</strong> '
            f"{format_money(report.outstanding_balance)} "
            f"({len(report.unpaid_invoices)} unpaid invoice(s))</div>"
        )

    summary_html = "\n      ".join(summary_items)
    title = escape(report.title)
    period = escape(report.period_label)

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <style>
    body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
    .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
    h1 {{ color: #2c3e50; }}
    .summary {{ background-color: #f8f9fa; padding: 15px; border-radius: 5px; margin: 20px 0; }}
    .summary-item {{ margin: 8px 0; }}
    table {{ width: 100%; border-collapse: collapse; margin: 20px 0; }}
    th {{ background-color: #34495e; color: white; padding: 10px; text-align: left; }}
    .footer {{ margin-top: 30px; padding-top: 20px; border-top: 1px solid #ddd; color: #7f8c8d; font-size: 12px; }}
  </style>
</head>
<body>
  <div class="container">
    <h1>{title}</h1>
    <p><strong>Period:</strong> {period}</p>

    <div class="summary">
      <h2>Summary</h2>
      {summary_html}
    </div>

    <h2>Expenses by Category</h2>
    <table>
      <thead>
        <tr>
          <th>Category</th>
          <th style="text-align: right;">Count</th>
          <th style="text-align: right;">Total</th>
        </tr>
      </thead>
      <tbody>
        {_category_rows(report)}
      </tbody>
    </table>

    <p>Please find the detailed financial report attached as a PDF.</p>

    <div class="footer">
      <p>{FOOTER}</p>
    </div>
  </div>
</body>
</html>"""
