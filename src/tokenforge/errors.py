"""
Error types for token ingestion, reshaping, and mode resolution.
"""

from collections.abc import Sequence


class TokenForgeError(Exception):
    """Base exception for all tokenforge errors."""

    def __init__(self, message: str, path: Sequence[str] | None = None):
        self.message = message
        self.path = tuple(path) if path is not None else None
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with the offending token path if available."""
        if self.path:
            return f"{'.'.join(self.path)}: {self.message}"
        return self.message


class ConfigError(TokenForgeError):
    """
    Raised when configuration is malformed.

    Examples:
    - Mapping recipe referencing a source path that does not exist
    - Mode dimensions declaring overlapping mode names
    - Rewrite rule that can never fire because an earlier rule subsumes it
    - Unknown theme variant
    """

    pass


class TokenShapeError(TokenForgeError):
    """
    Raised when a node is neither a clean Group nor a clean Token.

    Examples:
    - Scalar where a group or token object was expected
    - Non-string $type
    - $extensions or mode map that is not an object
    """

    pass
