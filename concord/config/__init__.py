import json
import pathlib

from .settings import BotConfig, FeaturesConfig, MongoConfig, WebConfig

CONFIG_PATH = pathlib.Path(__file__).parent.absolute().joinpath("config.json")


def apply_section(target, data: dict):
    for key, value in data.items():
        if key.startswith("_") or not hasattr(type(target), key):
            continue
        if isinstance(getattr(type(target), key), property):
            continue
        setattr(target, key, value)
    return target


def load_config(data: dict, debug: bool = False) -> dict:
    bot_data = dict(data.get("Bot", {}))
    bot_config = BotConfig()
    bot_config.discord_token = bot_data.pop(
        "test_token" if debug else "main_token", None
    )
    bot_data.pop("main_token", None)
    bot_data.pop("test_token", None)
    if "admin_roles" in bot_data:
        bot_data["admin_roles"] = frozenset(map(int, bot_data["admin_roles"]))
    for key in ("core_cogs", "other_cogs"):
        if key in bot_data:
            bot_data[key] = frozenset(bot_data[key])
    apply_section(bot_config, bot_data)
    return {
        "bot": bot_config,
        "features": apply_section(FeaturesConfig(), data.get("Features", {})),
        "mongo": apply_section(MongoConfig(), data.get("Mongo", {})),
        "web": apply_section(WebConfig(), data.get("Web", {})),
    }


def read_config(path=CONFIG_PATH) -> dict:
    with open(path) as json_file:
        return dict(json.load(json_file))


async def init_config(app):
    if app["debug"]:
        app["logger"].info("DEBUG MODE")
    data = read_config(app.get("config_path", CONFIG_PATH))
    app["config"] = load_config(data, debug=app["debug"])
    app["logger"].info("Config initialized")
