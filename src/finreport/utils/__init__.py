"""Utility functions for finreport."""

from finreport.utils.date_parser import parse_date, parse_record_date
from finreport.utils.amount_parser import parse_amount, parse_amount_lenient

__all__ = ["parse_date", "parse_record_date", "parse_amount", "parse_amount_lenient"]
