"""Jira client - ticket lookups and JQL searches."""

from prlineage.jira.client import JiraClient
from prlineage.jira.exceptions import (
    JiraAPIError,
    JiraAuthError,
    JiraError,
    TicketNotFoundError,
)
from prlineage.jira.models import EPIC, FEATURE, STORY, Ticket

__all__ = [
    "EPIC",
    "FEATURE",
    "STORY",
    "JiraAPIError",
    "JiraAuthError",
    "JiraClient",
    "JiraError",
    "Ticket",
    "TicketNotFoundError",
]
