"""
Services Module - Application services for the filing core.

Application Services (orchestration):
- FilingService: Filing creation, editing, attachments and lifecycle

Infrastructure Services:
- Logging and observability
"""

from .logging_config import configure_logging, filing_context, get_logger
from .filing_service import EditingSession, FilingService

__all__ = [
    "EditingSession",
    "FilingService",
    "configure_logging",
    "filing_context",
    "get_logger",
]
