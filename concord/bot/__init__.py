import asyncio
import logging
import os
from logging import handlers

from concord.bot.cogs import load_extension
from concord.bot.core import Concord


def setup_logger():
    os.makedirs(os.path.join(os.getcwd(), "logs", "discord"), exist_ok=True)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] - %(filename)s - %(message)s")
    )
    stream_handler.setLevel(logging.INFO)
    file_handler = handlers.TimedRotatingFileHandler(
        filename=os.getcwd() + "/logs/discord/discord.log",
        when="midnight",
        backupCount=1,
        encoding="utf-8",
    )
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] - %(filename)s - %(message)s")
    )
    file_handler.setLevel(logging.INFO)
    logger = logging.getLogger("discord")
    logger.addHandler(stream_handler)
    logger.addHandler(file_handler)
    logger.setLevel(logging.INFO)
    return logger


async def close_bot(app):
    await app["bot"].close()


async def init_bot(app):
    logger = setup_logger()
    bot_config = app["config"]["bot"]
    app["bot"] = bot = Concord(app=app, logger=logger)
    for cog in sorted(bot_config.cogs):
        load_extension(bot, cog.lower())
    app["bot_task"] = asyncio.create_task(bot.start())
    app.on_cleanup.append(close_bot)
