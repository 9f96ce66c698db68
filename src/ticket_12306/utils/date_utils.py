"""日期工具"""

from datetime import datetime, timedelta
from typing import Optional
import re

import pytz


def validate_date(date_str: str) -> bool:
    """验证日期格式"""
    pattern = r'^\d{4}-\d{2}-\d{2}$'
    if not re.match(pattern, date_str):
        return False

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
        return True
    except ValueError:
        return False


def now_in(timezone: str = "Asia/Shanghai") -> datetime:
    """指定时区的当前时间"""
    return datetime.now(pytz.timezone(timezone))


def get_today(timezone: str = "Asia/Shanghai") -> str:
    """获取今天的日期（默认北京时间）"""
    return now_in(timezone).strftime("%Y-%m-%d")


def get_relative_date(days: int, timezone: str = "Asia/Shanghai",
                      base: Optional[datetime] = None) -> str:
    """获取相对今天若干天的日期"""
    base = base or now_in(timezone)
    return (base + timedelta(days=days)).strftime("%Y-%m-%d")
