from .analytics import AnalyticsAggregator, CommandStats, PerformanceSummary
from .performance import Instrumentation, Measurement
from .system import SystemMonitor, SystemStats
