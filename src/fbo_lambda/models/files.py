from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, Field


class FileMetadata(BaseModel):
    """Metadata of a stored object as reported by S3."""

    bucket: Annotated[str, Field(min_length=1)]
    key: Annotated[str, Field(min_length=1)]
    size: Annotated[int, Field(ge=0, description='Object size in bytes')] = 0
    last_modified: Optional[datetime] = None
    etag: str = ''
    content_type: Optional[str] = None
