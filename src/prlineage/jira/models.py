"""Data models for the Jira client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

EPIC = "Epic"
FEATURE = "Feature"
STORY = "Story"


@dataclass(frozen=True)
class Ticket:
    """Read-only snapshot of a Jira issue."""

    key: str
    type: str
    status: str
    summary: str
    description: str = ""
    comments: list[str] = field(default_factory=list)
    subtasks: list[str] = field(default_factory=list)
    fix_versions: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Ticket:
        """Build a ticket from a Jira REST v2 issue payload."""
        fields = data.get("fields") or {}
        comment_data = fields.get("comment") or {}
        return cls(
            key=data["key"],
            type=(fields.get("issuetype") or {}).get("name") or "",
            status=(fields.get("status") or {}).get("name") or "",
            summary=fields.get("summary") or "",
            description=fields.get("description") or "",
            comments=[c.get("body") or "" for c in comment_data.get("comments") or []],
            subtasks=[task["key"] for task in fields.get("subtasks") or []],
            fix_versions=[v["name"] for v in fields.get("fixVersions") or []],
        )
