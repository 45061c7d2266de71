from typing import Optional

from aiohttp import web
from aiohttp.web_request import Request
from aiohttp_cors import CorsViewMixin


class View(web.View, CorsViewMixin):
    def __init__(self, request: Request):
        super().__init__(request)
        self.bot = self.request.app["bot"]

    def int_query(self, name: str, default: Optional[int] = None) -> Optional[int]:
        value = self.request.query.get(name)
        if value is None or value == "":
            return default
        try:
            return int(value)
        except ValueError:
            raise web.HTTPBadRequest(reason=f"{name} must be an integer")
