import asyncio
import logging
import math
import os
import platform
import time
from collections import deque

import psutil
from pydantic import BaseModel

MAX_HISTORY = 60


def format_bytes(size: int) -> str:
    units = ["B", "KB", "MB", "GB", "TB"]
    if size <= 0:
        return "0 B"
    i = min(int(math.log(size, 1024)), len(units) - 1)
    return f"{round(size / 1024 ** i, 2)} {units[i]}"


def format_uptime(seconds: int) -> str:
    days, seconds = divmod(int(seconds), 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)
    if days:
        return f"{days}d {hours}h {minutes}m {seconds}s"
    if hours:
        return f"{hours}h {minutes}m {seconds}s"
    if minutes:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


class CpuStats(BaseModel):
    usage: float
    cores: int
    model: str


class MemoryStats(BaseModel):
    total: int
    free: int
    used: int
    usage: float


class UptimeStats(BaseModel):
    system: int
    process: int


class PlatformStats(BaseModel):
    type: str
    arch: str
    hostname: str


class RuntimeStats(BaseModel):
    version: str
    pid: int


class SystemStats(BaseModel):
    cpu: CpuStats
    memory: MemoryStats
    uptime: UptimeStats
    platform: PlatformStats
    python: RuntimeStats


class SystemMonitor:
    def __init__(self, logger=None):
        self.logger = logger or logging.getLogger(__name__)
        self.started_at = time.time()
        self.cpu_history = deque(maxlen=MAX_HISTORY)

    def record_cpu_usage(self):
        self.cpu_history.append(psutil.cpu_percent(interval=None))

    def average_cpu_usage(self) -> float:
        if not self.cpu_history:
            return psutil.cpu_percent(interval=None)
        return sum(self.cpu_history) / len(self.cpu_history)

    def stats(self) -> SystemStats:
        memory = psutil.virtual_memory()
        now = time.time()
        return SystemStats(
            cpu=CpuStats(
                usage=self.average_cpu_usage(),
                cores=psutil.cpu_count() or 0,
                model=platform.processor() or "Unknown",
            ),
            memory=MemoryStats(
                total=memory.total,
                free=memory.available,
                used=memory.total - memory.available,
                usage=memory.percent,
            ),
            uptime=UptimeStats(
                system=int(now - psutil.boot_time()),
                process=int(now - self.started_at),
            ),
            platform=PlatformStats(
                type=platform.system(),
                arch=platform.machine(),
                hostname=platform.node(),
            ),
            python=RuntimeStats(version=platform.python_version(), pid=os.getpid()),
        )

    def formatted(self) -> str:
        stats = self.stats()
        return "\n".join(
            [
                f"**CPU:** {stats.cpu.usage:.1f}% usage ({stats.cpu.cores} cores)",
                f"**Memory:** {stats.memory.usage:.1f}% used "
                f"({format_bytes(stats.memory.used)} / {format_bytes(stats.memory.total)})",
                f"**Uptime:** System: {format_uptime(stats.uptime.system)}, "
                f"Process: {format_uptime(stats.uptime.process)}",
                f"**Platform:** {stats.platform.type} {stats.platform.arch} "
                f"({stats.platform.hostname})",
                f"**Python:** {stats.python.version} (PID: {stats.python.pid})",
            ]
        )

    async def track(self, interval: float = 5.0):
        self.logger.info(f"Starting system monitoring (interval: {interval}s)")
        try:
            while True:
                self.record_cpu_usage()
                await asyncio.sleep(interval)
        finally:
            self.logger.info("Stopped system monitoring")
