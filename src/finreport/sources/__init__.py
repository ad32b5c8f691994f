"""Accounting source layer for finreport application."""

from finreport.sources.base import AccountingSource
from finreport.sources.factories import create_invoice_ninja_client

__all__ = ["AccountingSource", "create_invoice_ninja_client"]
