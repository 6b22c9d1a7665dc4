"""
Shared test doubles for MapCompare provider tests.
"""

from unittest.mock import MagicMock

from shared.errors import ProviderHTTPError


class FakeHttp:
    """
    Stand-in for providers.http.HttpClient.

    handlers maps either (method, url) or url to a payload or to a callable
    receiving the request params (GET) / body (POST). A callable may raise to
    simulate a transport or HTTP failure.
    """

    def __init__(self, handlers=None):
        self.handlers = dict(handlers or {})
        self.calls = []

    async def get_json(self, url, params=None, headers=None):
        self.calls.append(("GET", url, params))
        return self._dispatch("GET", url, params)

    async def post_json(self, url, body=None, params=None, headers=None):
        self.calls.append(("POST", url, body))
        return self._dispatch("POST", url, body)

    def _dispatch(self, method, url, data):
        handler = self.handlers.get((method, url), self.handlers.get(url))
        if handler is None:
            raise ProviderHTTPError(404, {"message": "not found"})
        if callable(handler):
            return handler(data)
        return handler

    def urls(self):
        return [url for _, url, _ in self.calls]


def gemini_response(text):
    response = MagicMock()
    response.text = text
    return response
