from typing import TYPE_CHECKING

from .general import General

if TYPE_CHECKING:
    from ... import Concord


def setup(bot: "Concord"):
    bot.add_cog(General(bot))
