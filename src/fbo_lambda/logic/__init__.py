"""
Business logic layer.

Business rules for the finance integration, kept apart from event handling
and from the clients that talk to external systems.
"""

from fbo_lambda.logic.finance_service import DispersionData, FileValidationResult, FinanceApiResponse, FinanceService

__all__ = [
    "DispersionData",
    "FileValidationResult",
    "FinanceApiResponse",
    "FinanceService",
]
