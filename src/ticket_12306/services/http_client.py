"""HTTP客户端服务"""

import logging
from typing import Optional, Dict, Any
import httpx

from ..exceptions import FetchError
from ..utils.config import Settings, get_settings

logger = logging.getLogger(__name__)


class HttpClient:
    """12306 HTTP客户端

    同一会话内共享Cookie，先访问初始化页面即可带上查询接口所需的Cookie。
    传输错误、超时与非2xx响应统一转为 FetchError。
    """

    def __init__(self, settings: Optional[Settings] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or get_settings()
        self.transport = transport
        self.session: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        await self.create_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close_session()

    async def create_session(self):
        """创建HTTP会话"""
        headers = {
            'User-Agent': self.settings.user_agent,
            'Accept': 'application/json, text/javascript, */*; q=0.01',
            'Accept-Language': 'zh-CN,zh;q=0.9,en;q=0.8',
            'Connection': 'keep-alive',
            'X-Requested-With': 'XMLHttpRequest',
            'Referer': self.settings.ticket_init_url,
            'Cache-Control': 'no-cache',
            'Pragma': 'no-cache'
        }

        self.session = httpx.AsyncClient(
            headers=headers,
            timeout=self.settings.request_timeout,
            follow_redirects=True,
            transport=self.transport,
        )

    async def close_session(self):
        """关闭HTTP会话"""
        if self.session:
            await self.session.aclose()
            self.session = None

    async def get(self, url: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """GET请求"""
        if not self.session:
            await self.create_session()
        try:
            logger.debug(f"发送GET请求: {url}")
            response = await self.session.get(url, params=params)
            logger.debug(f"响应状态: {response.status_code}")
            response.raise_for_status()
            return response
        except httpx.TimeoutException as e:
            logger.error(f"请求超时: {url}")
            raise FetchError(message="请求超时", cause=e, url=url) from e
        except httpx.RequestError as e:
            logger.error(f"请求错误: {e}")
            raise FetchError(message="请求失败", cause=e, url=url) from e
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP状态错误: {e}")
            raise FetchError(message=f"HTTP状态错误 {e.response.status_code}", cause=e, url=url) from e

    async def get_text(self, url: str, params: Optional[Dict[str, Any]] = None) -> str:
        response = await self.get(url, params=params)
        return response.text

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET请求并解析JSON，非JSON响应视为 FetchError"""
        response = await self.get(url, params=params)
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"响应不是合法JSON: {response.text[:200]}")
            raise FetchError(message="响应不是合法JSON", cause=e, url=url) from e
