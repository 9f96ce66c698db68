"""车站目录缓存

车站数据约一周更新一次，拉取后连同时间戳写入本地缓存文件，
有效期内直接读取缓存，过期或强制刷新时重新拉取。
"""

import os
import re
import time
import logging
import tempfile
from pathlib import Path
from typing import Callable, Optional, Protocol, Union

import aiofiles
import aiofiles.os
from pydantic import ValidationError

from ..exceptions import CacheIOError
from ..models.station import CacheEnvelope, StationDirectory
from ..utils.config import Settings, get_settings
from .http_client import HttpClient
from .station_service import parse_station_payload

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"station_name\.js\?station_version=([\d.]+)")

Clock = Callable[[], float]


class StationStorage(Protocol):
    """缓存存储接口"""

    async def read(self) -> Optional[str]:
        """读取缓存内容，不存在时返回 None，读取失败抛出 CacheIOError"""
        ...

    async def write(self, text: str) -> None:
        """整体替换缓存内容，失败抛出 CacheIOError"""
        ...


class StationFetcher(Protocol):
    async def fetch(self) -> str:
        """拉取原始车站脚本，失败抛出 FetchError"""
        ...


class FileStationStorage:
    """本地文件缓存，先写临时文件再原子替换"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    async def read(self) -> Optional[str]:
        if not await aiofiles.os.path.exists(self.path):
            return None
        try:
            async with aiofiles.open(self.path, mode="r", encoding="utf-8") as f:
                return await f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise CacheIOError(message="读取车站缓存失败", cause=e, path=str(self.path)) from e

    async def write(self, text: str) -> None:
        tmp_path = None
        try:
            await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            os.close(fd)
            async with aiofiles.open(tmp_path, mode="w", encoding="utf-8") as f:
                await f.write(text)
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise CacheIOError(message="写入车站缓存失败", cause=e, path=str(self.path)) from e


class StationSource:
    """从12306拉取 station_name.js

    优先使用首页中带版本号的脚本地址，找不到时退回固定地址。
    """

    def __init__(self, http_client: Optional[HttpClient] = None,
                 settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.http_client = http_client or HttpClient(self.settings)

    async def fetch(self) -> str:
        async with self.http_client:
            url = await self._script_url()
            logger.info(f"正在拉取车站数据: {url}")
            return await self.http_client.get_text(url)

    async def _script_url(self) -> str:
        home_html = await self.http_client.get_text(self.settings.station_index_url)
        m = _VERSION_RE.search(home_html)
        if m:
            return f"{self.settings.station_script_base_url}?station_version={m.group(1)}"
        logger.info("首页未找到车站脚本版本号，使用后备地址")
        return self.settings.station_script_url


class StationCache:
    """车站目录缓存服务

    时钟、存储与数据源均可注入，便于测试过期与存储失败。
    """

    def __init__(self, source: StationFetcher, storage: StationStorage,
                 clock: Clock = time.time,
                 ttl_seconds: float = 7 * 24 * 3600):
        self.source = source
        self.storage = storage
        self.clock = clock
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "StationCache":
        settings = settings or get_settings()
        return cls(
            source=StationSource(settings=settings),
            storage=FileStationStorage(settings.cache_path),
            ttl_seconds=settings.cache_ttl.total_seconds(),
        )

    async def load(self, force_refresh: bool = False) -> StationDirectory:
        """加载车站目录：有效缓存直接返回，否则重新拉取并写入缓存"""
        if not force_refresh:
            directory = await self._read_cached()
            if directory is not None:
                return directory

        content = await self.source.fetch()
        directory = parse_station_payload(content)
        await self._write_cached(directory)
        return directory

    async def _read_cached(self) -> Optional[StationDirectory]:
        try:
            text = await self.storage.read()
        except CacheIOError as e:
            logger.warning(f"{e}，重新拉取")
            return None
        if text is None:
            logger.info("车站缓存不存在")
            return None
        try:
            envelope = CacheEnvelope.model_validate_json(text)
        except ValidationError as e:
            logger.warning(f"车站缓存格式错误，重新拉取: {e.error_count()}处错误")
            return None

        age = envelope.age(self.clock())
        if age >= self.ttl_seconds:
            logger.info(f"车站缓存已过期（{age / 86400:.1f}天），重新拉取")
            return None
        logger.debug(f"使用车站缓存，共{len(envelope.directory)}个车站")
        return envelope.directory

    async def _write_cached(self, directory: StationDirectory) -> None:
        envelope = CacheEnvelope(fetched_at=self.clock(), directory=directory)
        try:
            await self.storage.write(envelope.model_dump_json())
        except CacheIOError as e:
            logger.warning(f"{e}，本次使用内存数据")
            return
        logger.info(f"已缓存{len(directory)}个车站")

