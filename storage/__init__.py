"""
Storage services for ledger and report destinations.
"""
from .service import WorkbookStore

__all__ = ["WorkbookStore"]
