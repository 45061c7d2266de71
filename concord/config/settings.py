from typing import FrozenSet, Optional


class BotConfig:
    discord_token: str = None
    application_id: int = None
    owner_id: Optional[int] = None
    dev_guild_id: Optional[int] = None
    sync_commands: bool = True
    description: str = (
        "Concord is a modular Discord bot that answers prefix and slash commands "
        "and keeps track of how they are used."
    )
    default_prefix: str = "!"
    admin_roles: FrozenSet[int] = frozenset()
    core_cogs: FrozenSet[str] = frozenset({"General"})
    other_cogs: FrozenSet[str] = frozenset({"Stats"})

    @property
    def cogs(self):
        return self.core_cogs | self.other_cogs


class FeaturesConfig:
    analytics: bool = True
    cooldowns: bool = True
    slash_cooldowns: bool = True
    system_tracking_interval: float = 5.0


class MongoConfig:
    enabled: bool = True
    host: str = "localhost"
    port: str = "27017"
    username: str = None
    password: str = None
    database: str = "concord"

    @property
    def url(self):
        url = "mongodb://"
        if self.username and self.password:
            url += f"{self.username}:{self.password}@"
        return url + f"{self.host}:{self.port}/"

    @property
    def db_url(self):
        return self.url + self.database


class WebConfig:
    host: str = "localhost"
    port: int = 5000
