"""Factory functions for creating accounting source instances."""

import os
from typing import Optional

from finreport.sources.invoice_ninja import DEFAULT_PER_PAGE, InvoiceNinjaClient


def create_invoice_ninja_client(
    base_url: Optional[str] = None,
    token: Optional[str] = None,
    per_page: Optional[int] = None,
) -> InvoiceNinjaClient:
    """Create an Invoice Ninja client.

    Args:
        base_url: Instance URL. If None, reads INVOICE_NINJA_URL
        token: API token. If None, reads INVOICE_NINJA_TOKEN
        per_page: Page size. If None, reads INVOICE_NINJA_PER_PAGE, then
            defaults to 250

    Returns:
        InvoiceNinjaClient instance

    Raises:
        ConfigurationError: If the URL or token is missing
    """
    if base_url is None:
        base_url = os.environ.get("INVOICE_NINJA_URL", "")

    if token is None:
        token = os.environ.get("INVOICE_NINJA_TOKEN", "")

    if per_page is None:
        raw = os.environ.get("INVOICE_NINJA_PER_PAGE", "").strip()
        per_page = int(raw) if raw.isdigit() and int(raw) > 0 else DEFAULT_PER_PAGE

    return InvoiceNinjaClient(base_url, token, per_page=per_page)
