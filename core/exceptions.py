"""
Custom Exceptions for the RAG storage and retrieval engine.

Every public operation of the chunker, vector store, chat archive and the
ingestion/query pipelines reports failures through this hierarchy, so that
callers can tell a bad request apart from a missing record, a storage
fault or a failing embedding model.

Exception Hierarchy:
    RAGError (base)
    ├── InvalidInputError
    ├── NotFoundError
    ├── StorageFaultError
    │   ├── StoreClosedError
    │   └── VectorFileError
    ├── ProviderFaultError
    └── PartialIngestError

Usage:
    from core.exceptions import NotFoundError, PartialIngestError

    try:
        ids = pipeline.ingest_text(text, metadata)
    except PartialIngestError as e:
        print(f"Stopped at fragment {e.failed_index}, kept {e.committed_ids}")
    except NotFoundError as e:
        print(f"Missing {e.kind}: {e.identifier}")
"""

from __future__ import annotations

from typing import Optional


# =============================================================================
# BASE EXCEPTION
# =============================================================================


class RAGError(Exception):
    """
    Base exception for all storage and retrieval errors.

    Attributes:
        message: Human-readable error description
        details: Additional technical details (optional)
    """

    def __init__(
        self,
        message: str = "A retrieval engine error occurred",
        details: Optional[str] = None,
    ):
        self.message = message
        self.details = details

        full_message = message
        if details:
            full_message = f"{message} | Details: {details}"

        super().__init__(full_message)


# =============================================================================
# CALLER ERRORS
# =============================================================================


class InvalidInputError(RAGError):
    """
    Raised for malformed requests: empty queries, empty documents,
    vectors of the wrong dimension, unsafe names.

    Never retried internally.
    """

    def __init__(
        self,
        message: str = "Invalid input",
        details: Optional[str] = None,
    ):
        super().__init__(message, details)


class NotFoundError(RAGError):
    """
    Raised when a document, vector or transcript does not exist.

    Attributes:
        kind: What was looked up ("document", "vector", "transcript")
        identifier: The id that was not found
    """

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind.capitalize()} not found: {identifier}")


# =============================================================================
# STORAGE ERRORS
# =============================================================================


class StorageFaultError(RAGError):
    """
    Raised when the underlying files or the embedded database fail.

    Attributes:
        original_error: The underlying I/O or database exception
    """

    def __init__(
        self,
        message: str = "Storage fault",
        original_error: Optional[Exception] = None,
    ):
        self.original_error = original_error
        details = str(original_error) if original_error else None
        super().__init__(message, details)


class StoreClosedError(StorageFaultError):
    """Raised when an operation is attempted on a closed store handle."""

    def __init__(self, name: str = "store"):
        super().__init__(f"The {name} is closed")


class VectorFileError(StorageFaultError):
    """
    Raised when a vector file is missing, truncated or of the wrong size.

    Search treats this as a per-item fault and skips the document.

    Attributes:
        path: Path of the offending vector file
    """

    def __init__(
        self,
        path: str,
        message: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.path = path
        msg = message or "Unreadable vector file"
        super().__init__(f"{msg} [{path}]", original_error)


# =============================================================================
# PROVIDER ERRORS
# =============================================================================


class ProviderFaultError(RAGError):
    """
    Raised when the embedding provider fails or returns a vector of the
    wrong shape. Always aborts the enclosing ingestion or query.

    Attributes:
        original_error: The exception raised by the provider, if any
    """

    def __init__(
        self,
        message: str = "Embedding provider failed",
        original_error: Optional[Exception] = None,
    ):
        self.original_error = original_error
        details = str(original_error) if original_error else None
        super().__init__(message, details)


# =============================================================================
# INGESTION ERRORS
# =============================================================================


class PartialIngestError(RAGError):
    """
    Raised when a multi-fragment ingestion stops before the last fragment.

    Fragments committed before the failure stay in the store; the caller
    decides whether to retry the remainder or delete the partial ingest.

    Attributes:
        committed_ids: Document ids stored before the failure, in order
        failed_index: Index of the fragment that failed
        total_fragments: Number of fragments the source was split into
        original_error: The exception that stopped the ingestion
    """

    def __init__(
        self,
        committed_ids: list[str],
        failed_index: int,
        total_fragments: int,
        original_error: Optional[Exception] = None,
    ):
        self.committed_ids = list(committed_ids)
        self.failed_index = failed_index
        self.total_fragments = total_fragments
        self.original_error = original_error
        details = str(original_error) if original_error else None
        super().__init__(
            f"Ingestion stopped at fragment {failed_index + 1}/{total_fragments} "
            f"({len(self.committed_ids)} committed)",
            details,
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def format_error_chain(error: Exception) -> str:
    """
    Format an exception and its chain for logging.

    Returns a multi-line string showing the error hierarchy.
    """
    lines = []
    current = error
    depth = 0

    while current is not None:
        prefix = "  " * depth + ("└─ " if depth > 0 else "")
        lines.append(f"{prefix}{type(current).__name__}: {current}")

        if getattr(current, "original_error", None):
            current = current.original_error
            depth += 1
        elif current.__cause__:
            current = current.__cause__
            depth += 1
        else:
            break

    return "\n".join(lines)
