"""异常定义

查询流程中的错误类型：
- FetchError: 远端不可达、非2xx响应或返回内容无法解析，终止本次调用
- CacheIOError: 本地缓存读写失败，读失败时转为重新拉取，写失败仅记录日志
- StationNotFound: 车站名称无法解析
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Ticket12306Error(Exception):
    """基础异常"""

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message


@dataclass
class FetchError(Ticket12306Error):
    """远端数据获取失败"""

    url: str = ""


@dataclass
class CacheIOError(Ticket12306Error):
    """车站缓存读写失败"""

    path: Optional[str] = None


@dataclass
class StationNotFound(Ticket12306Error):
    """车站无法解析"""

    query: str = ""

    @classmethod
    def for_query(cls, query: str) -> "StationNotFound":
        return cls(message=f"未找到车站: {query}", query=query)
