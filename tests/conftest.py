import pytest

from concord.bot.core import CommandRegistry, CooldownStore, Dispatcher
from concord.db import MemoryTelemetryStore
from concord.monitoring import AnalyticsAggregator, Instrumentation
from tests.fakes import FakeClock


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def store() -> MemoryTelemetryStore:
    return MemoryTelemetryStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry() -> CommandRegistry:
    return CommandRegistry()


@pytest.fixture
def make_dispatcher(registry, store, clock):
    def _factory(**kwargs) -> Dispatcher:
        kwargs.setdefault("owner_id", 1)
        return Dispatcher(
            registry,
            CooldownStore(clock=clock),
            Instrumentation(store, clock=clock),
            kwargs.pop("analytics", AnalyticsAggregator(store)),
            **kwargs,
        )

    return _factory
