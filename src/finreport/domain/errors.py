"""Shared domain error messages and error types."""


class FinReportError(Exception):
    """Base class for every error raised by finreport."""


class DomainError(FinReportError, ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ConfigurationError(DomainError):
    """Required connection settings are missing."""


class UnknownPeriodError(DomainError):
    """Period token is not one of the supported values."""


class InvalidConfigurationError(DomainError):
    """Period configuration is incomplete, such as a custom range without bounds."""


class CollaboratorError(FinReportError):
    """Base class for failures reported by an external collaborator."""


class UpstreamFetchError(CollaboratorError):
    """The accounting API could not be read."""


class RenderError(CollaboratorError):
    """The PDF report could not be rendered."""


class DeliveryError(CollaboratorError):
    """The report email could not be delivered."""


def unknown_period(token: object, supported: list[str]) -> str:
    """Return message for an unsupported period token."""
    return f"Unknown period: '{token}'. Supported periods: {', '.join(supported)}"


def custom_range_incomplete() -> str:
    """Return message for a custom period without both bounds."""
    return "Custom range requires start and end dates"


def invalid_custom_bound(which: str, value: object, reason: object) -> str:
    """Return message for a custom range bound that cannot be parsed."""
    return f"Invalid {which} date '{value}': {reason}"


def missing_settings(component: str, names: list[str]) -> str:
    """Return message for missing connection settings."""
    return (
        f"{component} configuration missing. "
        f"Please set {', '.join(names)} in the environment or .env file"
    )


def too_many_pages(endpoint: str, max_pages: int) -> str:
    """Return message when pagination does not terminate."""
    return (
        f"Pagination for '{endpoint}' did not finish after {max_pages} pages; "
        "aborting to avoid an unbounded fetch"
    )
