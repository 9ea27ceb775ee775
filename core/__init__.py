"""
Core utilities shared by every package of the retrieval engine:
the exception hierarchy, logging setup and the reader/writer lock.
"""

__version__ = "1.0.0"

from .exceptions import (
    InvalidInputError,
    NotFoundError,
    PartialIngestError,
    ProviderFaultError,
    RAGError,
    StorageFaultError,
    StoreClosedError,
    VectorFileError,
    format_error_chain,
)
from .locks import ReadWriteLock
from .logging_config import get_logger, setup_logging

__all__ = [
    "__version__",
    "RAGError",
    "InvalidInputError",
    "NotFoundError",
    "StorageFaultError",
    "StoreClosedError",
    "VectorFileError",
    "ProviderFaultError",
    "PartialIngestError",
    "format_error_chain",
    "ReadWriteLock",
    "setup_logging",
    "get_logger",
]
