"""
Custom invocation payloads.

Direct invocations (scheduled rules, other Lambdas, the console) send
``{"action": ..., "data"?: ..., "payload"?: ..., "metadata"?: ...}``.
"""

from enum import Enum
from typing import Annotated, Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class CustomAction(str, Enum):
    HEALTH_CHECK = 'health_check'
    PROCESS_DATA = 'process_data'
    DOWNLOAD_BANK_FILES = 'download_bank_files'
    PROCESS_SPECIFIC_FILE = 'process_specific_file'


class CustomEvent(BaseModel):
    """Custom invocation payload; ``action`` selects the handler."""

    model_config = ConfigDict(extra='allow')

    action: Annotated[str, Field(
        description='Action to perform',
        examples=[action.value for action in CustomAction],
    )]

    data: Optional[Any] = None
    payload: Optional[Any] = None
    metadata: Optional[Dict[str, Any]] = None


class ProcessSpecificFileData(BaseModel):
    """``data`` of a ``process_specific_file`` action."""

    model_config = ConfigDict(populate_by_name=True)

    file_name: Annotated[str, Field(
        min_length=1,
        alias='fileName',
        description='Object key of the file to process',
    )]

    bucket: Optional[str] = None
