import importlib


def load_extension(bot, cog_name: str):
    module = importlib.import_module(f"{__name__}.{cog_name}")
    module.setup(bot)
