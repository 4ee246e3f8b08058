"""Custom exception hierarchy for codenav.

All custom exceptions inherit from CodenavError to enable:
- Unified exception handling at the CLI boundary
- Clear distinction between "degrade to fewer results" failures and the
  single failure that must reach the user (RootResolutionError)
"""

__all__ = [
    "CodenavError",
    "ConfigError",
    "ContentReadError",
    "ProviderError",
    "RootResolutionError",
]


class CodenavError(Exception):
    """Base exception for all codenav errors.

    All custom exceptions in codenav should inherit from this class
    to enable unified exception handling and clear error boundaries.
    """

    pass


class ConfigError(CodenavError):
    """Configuration loading or validation error.

    Raised when:
    - Configuration file does not exist or cannot be read
    - Configuration file exceeds the size limit
    - Configuration is not a YAML mapping
    - Pydantic validation of the configuration fails
    """

    pass


class ContentReadError(CodenavError):
    """A content source could not produce the text of a file.

    Batch operations (symbol index build, cross-file incoming search)
    catch this and skip the file.

    Attributes:
        path: Path of the file that failed to read.

    """

    def __init__(self, message: str, path: str = "") -> None:
        """Initialize ContentReadError with the failing path.

        Args:
            message: Human-readable error message.
            path: Path of the unreadable file.

        """
        super().__init__(message)
        self.path = path


class ProviderError(CodenavError):
    """An authoritative (language-server) provider call failed.

    Never surfaced to the user: the engine logs it at debug level and
    switches to the heuristic path.
    """

    pass


class RootResolutionError(CodenavError):
    """No definition could be resolved at the requested cursor position.

    This is the only engine failure that reaches the user. Callers should
    show the message together with a retry action.

    Attributes:
        path: File the cursor was in.
        line: 0-indexed cursor line.

    Example:
        >>> try:
        ...     await builder.prepare("/src/app.ts", 10)
        ... except RootResolutionError as e:
        ...     print(f"{e} ({e.path}:{e.line + 1})")

    """

    def __init__(self, message: str, path: str = "", line: int = 0) -> None:
        """Initialize RootResolutionError with cursor context.

        Args:
            message: Human-readable error message.
            path: File the cursor was in.
            line: 0-indexed cursor line.

        """
        super().__init__(message)
        self.path = path
        self.line = line
