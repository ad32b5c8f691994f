"""Invoice Ninja API client.

Reads expenses, invoices and payments from a self-hosted Invoice Ninja
instance through its v1 REST API. Every list endpoint is paginated; pages are
pulled lazily and the loop is bounded so a misbehaving server cannot keep it
running forever.
"""

import logging
from datetime import date
from typing import Any, Iterator, Optional

import requests

from finreport.domain.entities import FinancialRecord, RecordKind
from finreport.domain.errors import (
    ConfigurationError,
    UpstreamFetchError,
    missing_settings,
    too_many_pages,
)
from finreport.sources.base import AccountingSource
from finreport.sources.mappers import record_to_domain

logger = logging.getLogger(__name__)

DEFAULT_PER_PAGE = 250
DEFAULT_TIMEOUT = 30
DEFAULT_MAX_PAGES = 1000

ENDPOINTS = {
    RecordKind.EXPENSE: "/expenses",
    RecordKind.INVOICE: "/invoices",
    RecordKind.PAYMENT: "/payments",
}


class InvoiceNinjaClient(AccountingSource):
    """Read-only client for the Invoice Ninja v1 API."""

    def __init__(
        self,
        base_url: str,
        token: str,
        per_page: int = DEFAULT_PER_PAGE,
        timeout: float = DEFAULT_TIMEOUT,
        max_pages: int = DEFAULT_MAX_PAGES,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Instance URL, e.g. "https://invoicing.example.com"
            token: API token sent as X-Api-Token on every request
            per_page: Page size requested from list endpoints
            timeout: Per-request timeout in seconds
            max_pages: Upper bound on pages fetched per listing
            session: Optional requests session (a new one is created if omitted)

        Raises:
            ConfigurationError: If base_url or token is empty
        """
        if not base_url or not token:
            raise ConfigurationError(
                missing_settings("Invoice Ninja", ["INVOICE_NINJA_URL", "INVOICE_NINJA_TOKEN"])
            )

        self.base_url = base_url.rstrip("/")
        self.api_url = f"{self.base_url}/api/v1"
        self.per_page = per_page
        self.timeout = timeout
        self.max_pages = max_pages
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "X-Api-Token": token,
                "X-Requested-With": "XMLHttpRequest",
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
        )

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()

    def _get(self, endpoint: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        url = f"{self.api_url}{endpoint}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            logger.error("Error fetching %s: %s", endpoint, e)
            raise UpstreamFetchError(f"Error fetching {endpoint}: {e}") from e
        except ValueError as e:
            logger.error("Invalid JSON from %s: %s", endpoint, e)
            raise UpstreamFetchError(f"Invalid response from {endpoint}: {e}") from e

        if not isinstance(payload, dict):
            logger.error("Unexpected %s body from %s", type(payload).__name__, endpoint)
            raise UpstreamFetchError(
                f"Invalid response from {endpoint}: expected a JSON object, "
                f"got {type(payload).__name__}"
            )
        return payload

    def _page_items(self, endpoint: str, payload: dict[str, Any]) -> list[dict[str, Any]]:
        items = payload.get("data") or []
        if not isinstance(items, list):
            raise UpstreamFetchError(
                f"Invalid response from {endpoint}: 'data' is {type(items).__name__}, not a list"
            )
        return items

    def _is_last_page(
        self, endpoint: str, payload: dict[str, Any], page: int, count: int, per_page: int
    ) -> bool:
        meta = payload.get("meta")
        pagination = meta.get("pagination") if isinstance(meta, dict) else None
        if not pagination:
            return count < per_page
        if not isinstance(pagination, dict):
            raise UpstreamFetchError(f"Invalid pagination metadata from {endpoint}: {pagination!r}")
        try:
            current = int(pagination.get("current_page", page))
            total = int(pagination.get("total_pages", 0))
        except (TypeError, ValueError) as e:
            logger.error("Invalid pagination metadata from %s: %s", endpoint, pagination)
            raise UpstreamFetchError(f"Invalid pagination metadata from {endpoint}: {e}") from e
        return current >= total

    def iter_pages(
        self, endpoint: str, params: Optional[dict[str, Any]] = None
    ) -> Iterator[list[dict[str, Any]]]:
        """Yield one list of items per page until the server signals the end.

        The next page is requested while meta.pagination reports
        current_page < total_pages. Without pagination metadata, a short or
        empty page ends the listing.

        Raises:
            UpstreamFetchError: On request failure, a malformed page, or when
                max_pages is exceeded
        """
        params = dict(params or {})
        per_page = int(params.pop("per_page", self.per_page))
        page = 1

        while True:
            if page > self.max_pages:
                raise UpstreamFetchError(too_many_pages(endpoint, self.max_pages))

            payload = self._get(endpoint, {**params, "per_page": per_page, "page": page})
            items = self._page_items(endpoint, payload)
            yield items

            if self._is_last_page(endpoint, payload, page, len(items), per_page):
                return
            page += 1

    def list_all(self, endpoint: str, params: Optional[dict[str, Any]] = None) -> list[dict[str, Any]]:
        """Collect every item of a paginated listing."""
        items: list[dict[str, Any]] = []
        for page in self.iter_pages(endpoint, params):
            items.extend(page)
        return items

    def _date_params(
        self, start_date: Optional[date], end_date: Optional[date]
    ) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if start_date is not None:
            params["start_date"] = start_date.isoformat()
        if end_date is not None:
            params["end_date"] = end_date.isoformat()
        return params

    def _list_records(
        self, kind: RecordKind, start_date: Optional[date], end_date: Optional[date]
    ) -> list[FinancialRecord]:
        raw = self.list_all(ENDPOINTS[kind], self._date_params(start_date, end_date))
        records = [record_to_domain(kind, item) for item in raw if isinstance(item, dict)]
        if len(records) < len(raw):
            logger.warning(
                "Skipping %d %s item(s) that are not JSON objects",
                len(raw) - len(records),
                kind.value,
            )
        return records

    def get_expenses(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[FinancialRecord]:
        return self._list_records(RecordKind.EXPENSE, start_date, end_date)

    def get_invoices(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[FinancialRecord]:
        return self._list_records(RecordKind.INVOICE, start_date, end_date)

    def get_payments(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[FinancialRecord]:
        return self._list_records(RecordKind.PAYMENT, start_date, end_date)

    def ping(self) -> None:
        self._get(ENDPOINTS[RecordKind.EXPENSE], {"per_page": 1, "page": 1})

    def _get_record(self, kind: RecordKind, record_id: str) -> FinancialRecord:
        endpoint = f"{ENDPOINTS[kind]}/{record_id}"
        data = self._get(endpoint).get("data")
        if not isinstance(data, dict):
            raise UpstreamFetchError(f"Invalid response from {endpoint}: no record data")
        return record_to_domain(kind, data)

    def get_expense(self, expense_id: str) -> FinancialRecord:
        """Get a single expense by ID."""
        return self._get_record(RecordKind.EXPENSE, expense_id)

    def get_invoice(self, invoice_id: str) -> FinancialRecord:
        """Get a single invoice by ID."""
        return self._get_record(RecordKind.INVOICE, invoice_id)

    def get_clients(self) -> list[dict[str, Any]]:
        return self.list_all("/clients")

    def get_vendors(self) -> list[dict[str, Any]]:
        return self.list_all("/vendors")

    def get_expense_categories(self) -> list[dict[str, Any]]:
        return self.list_all("/expense_categories")
