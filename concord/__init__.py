import asyncio
import logging
import os
from logging import handlers

import aiohttp_cors
from aiohttp import web

from concord.bot import init_bot
from concord.config import CONFIG_PATH, init_config, load_config, read_config
from concord.db import init_db
from concord.views import init_views

try:
    import uvloop
except ImportError:
    uvloop = None  # Windows
else:
    asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())


def setup_logger():
    os.makedirs(os.path.join(os.getcwd(), "logs", "app"), exist_ok=True)
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] - %(filename)s - %(message)s"
    )
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    stream_handler.setLevel(logging.INFO)
    file_handler = handlers.TimedRotatingFileHandler(
        filename=os.getcwd() + "/logs/app/app.log",
        when="midnight",
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.DEBUG)
    for name in ("aiohttp.access", "concord"):
        logger = logging.getLogger(name)
        logger.addHandler(stream_handler)
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)
    return logging.getLogger("concord")


def build_app(
    debug: bool = False, logger: logging.Logger = None, config_path=CONFIG_PATH
) -> web.Application:
    app = web.Application()
    app["logger"] = logger or logging.getLogger("concord")
    app["debug"] = debug
    app["config_path"] = config_path
    app["cors"] = aiohttp_cors.setup(
        app,
        defaults={
            "*": aiohttp_cors.ResourceOptions(
                allow_credentials=True,
                expose_headers="*",
                allow_headers="*",
            )
        },
    )
    app["logger"].info("Append modules")
    app.on_startup.append(init_config)
    app.on_startup.append(init_db)
    app.on_startup.append(init_bot)
    app.on_startup.append(init_views)
    return app


def create_app(debug: bool = False, config_path=CONFIG_PATH):
    logger = setup_logger()
    app = build_app(debug, logger, config_path)
    web_config = load_config(read_config(config_path), debug)["web"]
    logger.info("Run server")
    web.run_app(app, host=web_config.host, port=web_config.port)


if __name__ == "__main__":
    create_app()
