"""Utility modules for service search."""

from .text_processing import TextProcessor, normalize
from .validators import validate_cap, validate_context, validate_query_text, validate_records_batch
from .logging_config import setup_logging

__all__ = [
    "TextProcessor",
    "normalize",
    "validate_cap",
    "validate_context",
    "validate_query_text",
    "validate_records_batch",
    "setup_logging",
]
