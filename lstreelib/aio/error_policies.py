"""
Error handling policies for lstreelib.

Entry-local failures during a walk (an entry that cannot be stat'd, a
directory that cannot be read, a subtree that fails part way) never abort
the listing. They are handed to an ErrorPolicy, which is the diagnostic
channel: it decides whether to print, record or re-raise them.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, TextIO
import sys


class InvalidEntryNameError(OSError):
    """A directory entry whose name cannot be represented as text.

    Unlike access errors this points at a data-integrity problem, so it
    aborts the walk of the directory that holds the entry.
    """

    def __init__(self, path):
        super().__init__(f"invalid file name: {path!r}")
        self.path = path
        self.strerror = "invalid file name"


def format_error_text(error: BaseException) -> str:
    """System error text for an exception, without errno or path noise."""
    strerror = getattr(error, 'strerror', None)
    if strerror:
        return strerror
    return str(error) or type(error).__name__


def format_diagnostic(path: Any, error: BaseException) -> str:
    """Render the diagnostic line for a skipped entry.

    Args:
        path: Path that could not be accessed
        error: Exception raised while accessing it

    Returns:
        ``cannot access '<path>': <system error text>``
    """
    return f"cannot access '{path}': {format_error_text(error)}"


class ErrorPolicy(ABC):
    """
    Base class for error handling policies.

    Subclasses implement different strategies for entry-local errors
    raised while building or sizing a tree.
    """

    @abstractmethod
    async def handle(self, error: Exception, method_name: str, path: Any) -> None:
        """
        Handle an error that occurred during a filesystem operation.

        Args:
            error: The exception that was raised
            method_name: Name of the operation that failed (e.g. 'recurse_into')
            path: The path being processed when the error occurred

        Returns:
            None to let the caller skip the entry, or re-raises the
            exception to stop the walk.
        """
        pass

    def handle_sync(self, error: Exception, method_name: str, path: Any) -> None:
        """
        Handle an error from a synchronous context.

        The size-only fallback walk runs in a worker thread where there is
        no event loop to await on, so it reports through this method.
        Subclasses share one implementation for both entry points.
        """
        raise NotImplementedError


class FailFastPolicy(ErrorPolicy):
    """
    Policy that immediately re-raises any error, stopping the walk.

    Useful when partial listings are not acceptable.
    """

    async def handle(self, error: Exception, method_name: str, path: Any) -> None:
        """Re-raise the error immediately."""
        raise error

    def handle_sync(self, error: Exception, method_name: str, path: Any) -> None:
        """Re-raise the error immediately (sync version)."""
        raise error


class CollectErrorsPolicy(ErrorPolicy):
    """
    Policy that records errors without printing them.

    Useful for collecting all diagnostics and presenting them at the end,
    and for tests.
    """

    def __init__(self):
        """Initialize the policy."""
        self.errors: List[Dict[str, Any]] = []
        self.skipped_paths: List[Any] = []

    async def handle(self, error: Exception, method_name: str, path: Any) -> None:
        """Record the error and let the walk continue."""
        self._handle_common(error, method_name, path)

    def handle_sync(self, error: Exception, method_name: str, path: Any) -> None:
        """Synchronous version - record the error and continue."""
        self._handle_common(error, method_name, path)

    def _handle_common(self, error: Exception, method_name: str, path: Any) -> Dict[str, Any]:
        """Common error handling logic for both sync and async."""
        record = {
            'path': path,
            'method': method_name,
            'error': error,
            'error_type': type(error).__name__,
            'error_message': format_error_text(error),
            'message': format_diagnostic(path, error),
        }
        self.errors.append(record)

        if path is not None:
            self.skipped_paths.append(path)

        return record

    @property
    def messages(self) -> List[str]:
        """Diagnostic lines in the order they were reported."""
        return [record['message'] for record in self.errors]

    def get_statistics(self) -> dict:
        """
        Get statistics about errors encountered.

        Returns:
            Dictionary with error counts and details
        """
        return {
            'total_errors': len(self.errors),
            'permission_errors': sum(1 for e in self.errors if e['error_type'] == 'PermissionError'),
            'not_found_errors': sum(1 for e in self.errors if e['error_type'] == 'FileNotFoundError'),
            'invalid_names': sum(1 for e in self.errors if e['error_type'] == 'InvalidEntryNameError'),
            'skipped_paths': len(self.skipped_paths),
            'errors': self.errors,  # Full error details
        }


class ReportErrorsPolicy(CollectErrorsPolicy):
    """
    Policy that prints each diagnostic and continues.

    This is the default for listings: every skipped entry produces one
    ``cannot access '<path>': <reason>`` line on the error stream, away
    from the listing itself.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        """
        Initialize the policy.

        Args:
            stream: Where diagnostics are written (defaults to sys.stderr
                at report time)
        """
        super().__init__()
        self.stream = stream

    def _handle_common(self, error: Exception, method_name: str, path: Any) -> Dict[str, Any]:
        record = super()._handle_common(error, method_name, path)
        print(record['message'], file=self.stream or sys.stderr)
        return record


def create_policy(strict: bool = False, quiet: bool = False) -> ErrorPolicy:
    """
    Convenience function to pick an error policy.

    Args:
        strict: If True, use FailFastPolicy
        quiet: If True (and not strict), collect diagnostics without printing

    Returns:
        A configured ErrorPolicy
    """
    if strict:
        return FailFastPolicy()
    if quiet:
        return CollectErrorsPolicy()
    return ReportErrorsPolicy()
