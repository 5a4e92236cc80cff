"""
Error Handling - Centralized error policies and custom exceptions.

Per-file problems during a scan are recoverable: they are logged according
to the policy table below and the file is left out of the index. Failures
to persist the index, or to run a system action, are raised to the caller.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from pathlib import Path


logger = logging.getLogger(__name__)


@dataclass
class ErrorPolicy:
    """How a skipped file's error is reported."""
    log_level: int
    message_template: str = "{file}: {error}"


class IndexingError(Exception):
    """Base exception for indexing errors."""
    pass


class DefinitionParseError(IndexingError):
    """An arcade definition does not contain well-formed XML."""
    def __init__(self, path: Optional[Path], reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Malformed arcade definition {path or '<bytes>'}: {reason}")


class PersistenceError(IndexingError):
    """The serialized index could not be written."""
    pass


class ActionError(IndexingError):
    """A system action (launch, update) failed."""
    pass


# Error type to policy mapping (checked in order, first match wins)
ERROR_POLICIES: dict[type, ErrorPolicy] = {
    DefinitionParseError: ErrorPolicy(
        log_level=logging.WARNING,
        message_template="Skipping malformed definition: {file} - {error}"
    ),
    PermissionError: ErrorPolicy(
        log_level=logging.WARNING,
        message_template="Permission denied: {file}"
    ),
    FileNotFoundError: ErrorPolicy(
        log_level=logging.DEBUG,
        message_template="File not found (possibly removed): {file}"
    ),
    NotADirectoryError: ErrorPolicy(
        log_level=logging.DEBUG,
        message_template="Expected directory, got file: {file}"
    ),
    IsADirectoryError: ErrorPolicy(
        log_level=logging.DEBUG,
        message_template="Expected file, got directory: {file}"
    ),
    OSError: ErrorPolicy(
        log_level=logging.WARNING,
        message_template="OS error reading file: {file} - {error}"
    ),
}


def handle_error(
    error: Exception,
    file_path: Optional[Path] = None,
    context: str = ""
) -> None:
    """
    Log a recoverable scan error according to the defined policies.

    Callers skip the offending file or directory afterwards; nothing here
    stops a scan.

    Args:
        error: The exception that occurred
        file_path: Path to the file being processed (if applicable)
        context: Additional context for logging
    """
    policy = None
    for error_type, p in ERROR_POLICIES.items():
        if isinstance(error, error_type):
            policy = p
            break

    # Default policy for unknown errors
    if policy is None:
        policy = ErrorPolicy(
            log_level=logging.ERROR,
            message_template="Unexpected error: {file} - {error}"
        )

    file_str = str(file_path) if file_path else "<unknown>"
    message = policy.message_template.format(file=file_str, error=str(error))
    if context:
        message = f"[{context}] {message}"

    logger.log(policy.log_level, message)
