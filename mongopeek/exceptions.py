"""Custom exception hierarchy for mongopeek.

Exception Hierarchy:
    MongopeekError (base)
    ├── CompileError - query text that cannot become a document
    ├── FormatError - a value with no extended-JSON rendering
    ├── EditorRoundTripError - external editor failed or returned bad text
    ├── ClipboardError - no clipboard tool could be used
    ├── QueryError - invalid query options (skip/limit, kinds)
    ├── StoreError - document store operations
    │   └── DocumentNotFoundError
    └── ConfigurationError - settings/configuration issues

Usage:
    from mongopeek.exceptions import CompileError

    try:
        doc = compile_query(text)
    except CompileError as e:
        console.print(f"[red]{e}[/red]")
"""

from typing import Any, Optional


class MongopeekError(Exception):
    """Base exception for all mongopeek errors.

    Attributes:
        message: Human-readable error description
        context: Additional context about the error (e.g., fragments, paths)
        retryable: Whether this error might succeed on retry
    """

    def __init__(
        self,
        message: str,
        *,
        retryable: bool = False,
        **context: Any,
    ) -> None:
        self.message = message
        self.context = context
        self.retryable = retryable
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


# =============================================================================
# Document Errors
# =============================================================================


class CompileError(MongopeekError):
    """Query text could not be compiled into a document.

    ``fragment`` holds the offending piece of input so it can be shown to
    the user next to the message.
    """

    def __init__(
        self,
        message: str = "Invalid query",
        *,
        fragment: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.fragment = fragment
        if fragment is not None:
            context["fragment"] = fragment[:100] + "..." if len(fragment) > 100 else fragment
        super().__init__(message, **context)


class FormatError(MongopeekError):
    """A value has no extended-JSON rendering."""

    def __init__(
        self,
        message: str = "Cannot format value",
        *,
        value_type: Optional[str] = None,
        **context: Any,
    ) -> None:
        if value_type:
            context["value_type"] = value_type
        super().__init__(message, **context)


class EditorRoundTripError(MongopeekError):
    """Editing a document through the external editor failed."""

    def __init__(
        self,
        message: str = "Editing document failed",
        *,
        command: Optional[str] = None,
        exit_code: Optional[int] = None,
        **context: Any,
    ) -> None:
        if command:
            context["command"] = command
        if exit_code is not None:
            context["exit_code"] = exit_code
        super().__init__(message, **context)


class ClipboardError(MongopeekError):
    """The system clipboard could not be read or written."""

    def __init__(self, message: str = "Clipboard unavailable", **context: Any) -> None:
        super().__init__(message, **context)


class QueryError(MongopeekError):
    """Query options are invalid."""

    def __init__(
        self,
        message: str = "Invalid query options",
        *,
        option: Optional[str] = None,
        **context: Any,
    ) -> None:
        if option:
            context["option"] = option
        super().__init__(message, **context)


# =============================================================================
# Store Errors
# =============================================================================


class StoreError(MongopeekError):
    """Base exception for document store operations."""

    pass


class DocumentNotFoundError(StoreError):
    """No document exists with the requested id."""

    def __init__(
        self,
        message: str = "Document not found",
        *,
        document_id: Optional[str] = None,
        **context: Any,
    ) -> None:
        if document_id is not None:
            context["document_id"] = document_id
        super().__init__(message, **context)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(MongopeekError):
    """Configuration or settings error."""

    def __init__(
        self,
        message: str = "Configuration error",
        *,
        setting: Optional[str] = None,
        **context: Any,
    ) -> None:
        if setting:
            context["setting"] = setting
        super().__init__(message, **context)
