"""Custom exceptions for the Jira client."""

from prlineage.exceptions import AuthError, LineageError, NotFoundError, TransientAPIError


class JiraError(LineageError):
    """Base exception for Jira client errors."""


class JiraAuthError(JiraError, AuthError):
    """Missing settings or credentials rejected by Jira."""


class TicketNotFoundError(JiraError, NotFoundError):
    """Ticket with given key does not exist."""


class JiraAPIError(JiraError, TransientAPIError):
    """Request failed: network error, timeout or unexpected response."""
