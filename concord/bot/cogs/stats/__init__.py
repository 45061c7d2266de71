from typing import TYPE_CHECKING

from .stats import Stats

if TYPE_CHECKING:
    from ... import Concord


def setup(bot: "Concord"):
    bot.add_cog(Stats(bot))
