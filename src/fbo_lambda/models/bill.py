"""
Bill models for the billing endpoints.

Bills are stored and produced by the finance systems; the gateway only checks
the fields it routes on and passes everything else through untouched.
"""

from typing import Annotated, Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Bill(BaseModel):
    """A bill document as exchanged with the finance systems."""

    model_config = ConfigDict(extra='allow')

    batch_id: Annotated[Optional[str], Field(
        description='Batch the bill was generated in',
        examples=['batch-2024-09-01'],
    )] = None

    name: Annotated[Optional[str], Field(
        description='Billed party name',
    )] = None

    rif: Annotated[Optional[str], Field(
        description='Fiscal identifier of the billed party',
        examples=['J-12345678-9'],
    )] = None

    billed: bool = False

    total: Annotated[Optional[float], Field(
        ge=0,
        description='Bill total',
    )] = None

    number: Optional[int] = None


class CreateBillRequest(BaseModel):
    """Request body for creating a bill."""

    model_config = ConfigDict(extra='allow')

    batch_id: Annotated[str, Field(
        min_length=1,
        description='Batch the bill belongs to',
    )]

    name: Annotated[str, Field(
        min_length=1,
        max_length=200,
        description='Billed party name',
    )]

    rif: Annotated[str, Field(
        min_length=1,
        description='Fiscal identifier of the billed party',
    )]

    total: Annotated[float, Field(
        ge=0,
        description='Bill total',
    )]

    document: Optional[Dict[str, Any]] = None

    @field_validator('rif')
    @classmethod
    def normalize_rif(cls, v: str) -> str:
        """Fiscal identifiers are compared upper case without surrounding blanks."""
        return v.strip().upper()
