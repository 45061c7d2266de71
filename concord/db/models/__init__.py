from .base import CreatedAtMixin, utcnow
from .guild import Guild, GuildEvent, GuildEventType
from .performance import MetricType, PerformanceMetric
from .usage import CommandUsage, TriggerType
