"""ResultRenderer - plain text rendering of resolved issue trees."""

from __future__ import annotations

import json
from collections.abc import Iterable

from prlineage.exceptions import ResolutionError
from prlineage.resolver.models import IssueNode, LinkNode, PullRequestStatus

INDENT = "  "


class ResultRenderer:
    """Renders IssueNode trees as indented text.

    Output is a pure function of the tree: no lookups happen here and the
    same tree always renders identically.
    """

    def __init__(self, downstream_org: str, jira_url: str, show_errors: bool = False) -> None:
        """Initialize the renderer.

        Args:
            downstream_org: Organization whose pull requests count as downstream.
            jira_url: Jira server URL used for ticket browse links.
            show_errors: Render failed branches as explicit error lines.
        """
        self.downstream_org = downstream_org
        self.jira_url = jira_url.rstrip("/")
        self.show_errors = show_errors

    def render(
        self, issues: Iterable[IssueNode], failures: Iterable[ResolutionError] = ()
    ) -> str:
        """Render root issues (and optionally failed roots) as one string."""
        lines: list[str] = []
        for issue in issues:
            self._issue(issue, "", lines)
        self._errors(failures, "", lines)
        return "\n".join(lines)

    def title_line(self, issue: IssueNode) -> str:
        """Ticket heading with the summary quoted and escaped."""
        ticket = issue.ticket
        summary = json.dumps(ticket.summary, ensure_ascii=False)
        return f"{ticket.type} ({ticket.status}) {self.jira_url}/browse/{ticket.key} {summary}"

    def _issue(self, issue: IssueNode, indent: str, lines: list[str]) -> None:
        lines.append("")
        lines.append(f"{indent}{self.title_line(issue)}")
        if not issue.links and not (self.show_errors and issue.link_failures):
            lines.append(f"{indent}{INDENT}no github links found")
        self._links(issue.links, indent + INDENT, lines)
        self._errors(issue.link_failures, indent + INDENT, lines)
        for child in issue.children:
            self._issue(child, indent + INDENT, lines)
        self._errors(issue.child_failures, indent + INDENT, lines)

    def _links(self, links: Iterable[LinkNode], indent: str, lines: list[str]) -> None:
        for link in links:
            if link.ref.org == self.downstream_org:
                lines.append(f"{indent}downstream {link.describe()}")
                continue

            lines.append(f"{indent}upstream {link.describe()}")

            if link.status is PullRequestStatus.CLOSED:
                continue

            if not link.children and not (self.show_errors and link.failures):
                lines.append(
                    f"{indent}{INDENT}downstream: no matching pull requests found in "
                    f"{self.downstream_org}/{link.ref.repo}"
                )
                continue
            self._links(link.children, indent + INDENT, lines)
            self._errors(link.failures, indent + INDENT, lines)

    def _errors(
        self, failures: Iterable[ResolutionError], indent: str, lines: list[str]
    ) -> None:
        if not self.show_errors:
            return
        for failure in failures:
            lines.append(f"{indent}error: could not resolve {failure.target}: {failure.cause}")
