"""pr-lineage - trace Jira tickets to their pull requests and downstream mirrors."""

__version__ = "0.1.0"
