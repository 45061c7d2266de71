from aiohttp import web

from .view import View


class Ping(View):
    async def get(self):
        return web.Response(
            text=f"Pong! I am connected to {len(self.bot.guilds)} guilds."
        )
