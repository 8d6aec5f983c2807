import time
from dataclasses import dataclass, field

from fbo_lambda.clients.container import ServiceContainer
from fbo_lambda.config.app_config import AppConfig
from fbo_lambda.utils.logger import StructuredLogger


@dataclass
class HandlerContext:
    """Per-invocation state handed to every event handler."""

    request_id: str
    function_name: str
    logger: StructuredLogger
    container: ServiceContainer
    start_time: float = field(default_factory=time.monotonic)

    @property
    def config(self) -> AppConfig:
        return self.container.config

    @property
    def environment(self) -> str:
        return self.container.config.environment

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.start_time) * 1000)
