from aiohttp import web

from .view import View


class System(View):
    async def get(self):
        return web.json_response(self.bot.system.stats().model_dump())
