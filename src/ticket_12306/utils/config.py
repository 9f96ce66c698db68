"""配置管理"""

import logging
from datetime import timedelta
from typing import Optional
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """应用配置"""
    server_host: str = Field(default="0.0.0.0", description="服务器主机地址")
    server_port: int = Field(default=8000, description="服务器端口")
    debug: bool = Field(default=False, description="调试模式")
    user_agent: str = Field(
        default="Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
        description="用户代理字符串"
    )
    request_timeout: float = Field(default=30, description="请求超时时间（秒）")
    log_level: str = Field(default="INFO", description="日志级别")
    timezone: str = Field(default="Asia/Shanghai", description="默认时区")

    # 车站缓存
    cache_path: Path = Field(default=Path("data/stations.json"), description="车站缓存文件")
    cache_ttl_days: float = Field(default=7, gt=0, description="车站缓存有效期（天）")

    # 12306接口
    station_index_url: str = Field(default="https://www.12306.cn/index/", description="12306首页")
    station_script_base_url: str = Field(
        default="https://www.12306.cn/index/script/station_name.js",
        description="带版本号的车站脚本地址"
    )
    station_script_url: str = Field(
        default="https://kyfw.12306.cn/otn/resources/js/framework/station_name.js",
        description="车站脚本后备地址"
    )
    ticket_init_url: str = Field(
        default="https://kyfw.12306.cn/otn/leftTicket/init?linktypeid=dc",
        description="余票查询初始化页面（获取Cookie）"
    )
    ticket_query_url: str = Field(
        default="https://kyfw.12306.cn/otn/leftTicket/query",
        description="余票查询接口"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False
    )

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(days=self.cache_ttl_days)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """获取配置实例"""
    global _settings
    if _settings is None:
        env_file_path = Path(".env")
        if not env_file_path.exists():
            logger.debug(f"环境配置文件 {env_file_path.absolute()} 不存在，使用默认配置")
        else:
            logger.info(f"加载环境配置文件: {env_file_path.absolute()}")

        _settings = Settings()
        logger.debug(f"配置加载成功 - 缓存: {_settings.cache_path}, 有效期: {_settings.cache_ttl_days}天, 日志级别: {_settings.log_level}")

    return _settings
