from aiohttp import web

from .view import View


class CommandList(View):
    async def get(self):
        commands = sorted(
            self.bot.registry.definitions(), key=lambda c: (c.category or "", c.name)
        )
        return web.json_response({"commands": [c.to_dict() for c in commands]})


class Command(View):
    async def get(self):
        command = self.bot.registry.resolve(self.request.match_info["name"])
        if command is None:
            raise web.HTTPNotFound
        return web.json_response(command.to_dict())
