from enum import Enum
from typing import Any, Dict, Optional

from .base import CreatedAtMixin


class MetricType(str, Enum):
    COMMAND_EXECUTION = "command_execution"
    DATABASE_QUERY = "database_query"
    API_CALL = "api_call"
    EVENT_HANDLER = "event_handler"
    OTHER = "other"


class PerformanceMetric(CreatedAtMixin):
    metric_type: MetricType
    name: str
    duration: float
    success: bool = True
    metadata: Optional[Dict[str, Any]] = None
