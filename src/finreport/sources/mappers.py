"""Mapper functions to convert raw API payloads into domain records.

Invoice Ninja payloads name the same concept differently depending on the
record kind and API version (date vs expense_date, vendor_name vs
vendor.name). All of that fallback-chasing lives here so the aggregation
code only ever sees FinancialRecord.
"""

from typing import Any, Mapping, Optional

from finreport.domain.entities import FinancialRecord, RecordKind
from finreport.utils.amount_parser import parse_amount_lenient
from finreport.utils.date_parser import parse_record_date

DATE_FIELDS = {
    RecordKind.EXPENSE: ("date", "expense_date"),
    RecordKind.INVOICE: ("date", "invoice_date"),
    RecordKind.PAYMENT: ("date", "payment_date"),
}


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def first_present(raw: Mapping[str, Any], *names: str) -> Optional[str]:
    """Return the first non-empty field among names.

    A name may be dotted ("vendor.name") to reach into a nested object.
    """
    for name in names:
        value: Any = raw
        for part in name.split("."):
            if not isinstance(value, Mapping):
                value = None
                break
            value = value.get(part)
        text = _text(value)
        if text is not None:
            return text
    return None


def _record(kind: RecordKind, raw: Mapping[str, Any], **fields: Any) -> FinancialRecord:
    amount, defaulted = parse_amount_lenient(raw.get("amount"))
    return FinancialRecord(
        kind=kind,
        amount=amount,
        date=parse_record_date(first_present(raw, *DATE_FIELDS[kind])),
        id=_text(raw.get("id")),
        amount_defaulted=defaulted,
        **fields,
    )


def expense_to_domain(raw: Mapping[str, Any]) -> FinancialRecord:
    """Convert an expense payload to a FinancialRecord."""
    return _record(
        RecordKind.EXPENSE,
        raw,
        counterparty_name=first_present(raw, "vendor_name", "vendor.name"),
        category_name=first_present(raw, "category_name", "category.name"),
        note=first_present(raw, "public_notes", "description", "private_notes"),
        reference_number=first_present(raw, "number", "transaction_reference"),
    )


def invoice_to_domain(raw: Mapping[str, Any]) -> FinancialRecord:
    """Convert an invoice payload to a FinancialRecord."""
    balance = None
    if raw.get("balance") is not None:
        balance, _ = parse_amount_lenient(raw.get("balance"))
    return _record(
        RecordKind.INVOICE,
        raw,
        counterparty_name=first_present(raw, "client_name", "client.name", "client.display_name"),
        note=first_present(raw, "public_notes", "private_notes"),
        reference_number=first_present(raw, "number"),
        balance=balance,
    )


def payment_to_domain(raw: Mapping[str, Any]) -> FinancialRecord:
    """Convert a payment payload to a FinancialRecord."""
    return _record(
        RecordKind.PAYMENT,
        raw,
        counterparty_name=first_present(raw, "client_name", "client.name", "client.display_name"),
        note=first_present(raw, "public_notes", "private_notes"),
        reference_number=first_present(raw, "number", "transaction_reference"),
    )


_MAPPERS = {
    RecordKind.EXPENSE: expense_to_domain,
    RecordKind.INVOICE: invoice_to_domain,
    RecordKind.PAYMENT: payment_to_domain,
}


def record_to_domain(kind: RecordKind, raw: Mapping[str, Any]) -> FinancialRecord:
    """Convert a payload of the given kind to a FinancialRecord."""
    return _MAPPERS[RecordKind(kind)](raw)
