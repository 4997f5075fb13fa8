"""Error kinds shared by the tracker clients and the resolvers."""


class LineageError(Exception):
    """Base exception for pr-lineage errors."""


class ParseError(LineageError):
    """A pull request URL does not match the expected pattern."""


class NotFoundError(LineageError):
    """A repository, ticket or pull request does not exist."""


class TransientAPIError(LineageError):
    """Network failure, timeout, rate limit or unexpected API response."""


class AuthError(LineageError):
    """A client could not be constructed or its credentials were rejected."""


class ResolutionError(LineageError):
    """A single link or ticket could not be resolved.

    Attributes:
        target: The pull request URL or ticket key that failed.
        cause: The underlying error.
    """

    def __init__(self, target: str, cause: Exception) -> None:
        super().__init__(f"could not resolve {target}: {cause}")
        self.target = target
        self.cause = cause
