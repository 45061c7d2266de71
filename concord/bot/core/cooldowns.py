import time
from typing import Callable, Dict, Optional, Tuple

from discord.ext import commands


class CooldownStore:
    """Per (user, command) rate-limit windows backed by discord.py's
    :class:`~discord.ext.commands.Cooldown` buckets.

    Expired buckets are left in place until the same key is checked again;
    expiry is always decided by comparing against the clock.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._buckets: Dict[Tuple[int, str], commands.Cooldown] = {}

    def __len__(self):
        return len(self._buckets)

    def check_and_arm(
        self, user_id: int, command_name: str, duration: float
    ) -> Optional[float]:
        """Returns ``None`` and arms a new window when ready, otherwise the
        remaining seconds of the running window, which is left untouched."""
        key = (user_id, command_name)
        bucket = self._buckets.get(key)
        if bucket is None or bucket.per != duration:
            bucket = self._buckets[key] = commands.Cooldown(1, duration)
        return bucket.update_rate_limit(self.clock())
