"""
Base class shared by every external service client.
"""

from abc import ABC, abstractmethod
from typing import Optional

from fbo_lambda.utils.logger import StructuredLogger, create_logger


class BaseClient(ABC):
    """Abstract base class for clients that hold a connection or SDK handle."""

    service_name = 'Client'

    def __init__(self, logger: Optional[StructuredLogger] = None) -> None:
        """
        Initialize the client.

        Args:
            logger: Parent logger; the client logs under ``<parent>:<service_name>``
        """
        self.logger = logger.child(self.service_name) if logger else create_logger(self.service_name)

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether the underlying resource is open."""
        pass

    @abstractmethod
    def connect(self) -> None:
        """Open the underlying resource. Calling it again while connected is a no-op."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Release the underlying resource so a later ``connect`` starts fresh."""
        pass
