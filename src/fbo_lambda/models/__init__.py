"""
Models Package

Pydantic models for custom invocation payloads, bills and stored files.
"""

from .bill import Bill, CreateBillRequest
from .events import CustomAction, CustomEvent, ProcessSpecificFileData
from .files import FileMetadata

__all__ = [
    # Events
    "CustomAction",
    "CustomEvent",
    "ProcessSpecificFileData",

    # Billing
    "Bill",
    "CreateBillRequest",

    # Storage
    "FileMetadata",
]
