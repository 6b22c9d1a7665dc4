"""
JSON-over-HTTP helper shared by the Kakao and Tmap clients.

One aiohttp.ClientSession is opened per comparison request; its ClientTimeout
bounds every call uniformly. Non-2xx responses raise ProviderHTTPError so that
callers can inspect the provider's error message (Kakao priority rejection).
"""

import json
import logging
from typing import Any, Dict, Optional

import aiohttp

from shared.errors import ProviderHTTPError

logger = logging.getLogger("ProviderHTTP")


def _clean_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    # aiohttp(yarl)은 None 값을 쿼리 파라미터로 받지 않는다
    if params is None:
        return None
    return {k: v for k, v in params.items() if v is not None}


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def dig(data: Any, *keys: Any) -> Any:
    """Nested lookup that yields None instead of raising on a missing level."""
    for key in keys:
        if isinstance(data, dict):
            data = data.get(key)
        elif isinstance(data, list) and isinstance(key, int):
            data = data[key] if -len(data) <= key < len(data) else None
        else:
            return None
    return data


class HttpClient:
    def __init__(self, session: aiohttp.ClientSession):
        self._session = session

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None,
                       headers: Optional[Dict[str, str]] = None) -> Any:
        return await self._request("GET", url, params=_clean_params(params), headers=headers)

    async def post_json(self, url: str, body: Any = None,
                        params: Optional[Dict[str, Any]] = None,
                        headers: Optional[Dict[str, str]] = None) -> Any:
        return await self._request("POST", url, json=body, params=_clean_params(params), headers=headers)

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        async with self._session.request(method, url, **kwargs) as resp:
            text = await resp.text()
            try:
                payload = json.loads(text) if text.strip() else None
            except ValueError:
                payload = text

            if resp.status >= 400:
                logger.warning(f"{method} {url} failed with status: {resp.status}")
                raise ProviderHTTPError(resp.status, payload)
            # T맵은 검색 결과가 없으면 204 + 빈 본문을 돌려준다
            if not isinstance(payload, (dict, list)):
                return None
            return payload
