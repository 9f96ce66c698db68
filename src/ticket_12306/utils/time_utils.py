"""时刻与历时工具

12306返回的时刻为当日 "HH:MM"，历时为 "HH:MM"（如 "05:30"、"00:45"）。
"""

import re
from typing import Optional, Tuple

MINUTES_PER_DAY = 24 * 60

_DURATION_LIMIT_RE = re.compile(r"^(?:(\d+)h)?(?:(\d+)m)?$", re.IGNORECASE)


def _split_hm(value: str) -> Tuple[int, int]:
    parts = value.strip().split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"无法解析时间: {value!r}")
    return int(parts[0]), int(parts[1])


def parse_clock(value: str) -> int:
    """当日时刻 HH:MM 转为零点起的分钟数"""
    hours, minutes = _split_hm(value)
    if minutes >= 60 or hours * 60 + minutes > MINUTES_PER_DAY:
        raise ValueError(f"时刻超出范围: {value!r}")
    return hours * 60 + minutes


def duration_to_minutes(duration: str) -> int:
    """历时 "H:MM" -> 分钟数"""
    hours, minutes = _split_hm(duration)
    return hours * 60 + minutes


def format_duration(duration: str) -> str:
    """历时转为可读格式：不足1小时为 "45m"，否则为 "1h30m"

    无法解析时原样返回。
    """
    try:
        hours, minutes = _split_hm(duration)
    except ValueError:
        return duration
    if hours > 0:
        return f"{hours}h{minutes:02d}m"
    return f"{minutes}m"


def parse_time_window(value: str) -> Tuple[int, int]:
    """解析时间段 "08:00-12:00"、"18:00-"、"-18:00"、"08:00"

    省略下界为0，省略上界为1440，不含 "-" 时视为只给出下界，两端均为闭区间。
    """
    lo_text, _, hi_text = value.partition("-")
    lo = parse_clock(lo_text) if lo_text.strip() else 0
    hi = parse_clock(hi_text) if hi_text.strip() else MINUTES_PER_DAY
    if lo > hi:
        raise ValueError(f"时间段起点晚于终点: {value!r}")
    return lo, hi


def parse_duration_limit(value: str) -> int:
    """解析最长历时 "2h"、"90m"、"1h30m" -> 分钟数"""
    text = value.strip()
    match: Optional[re.Match] = _DURATION_LIMIT_RE.match(text)
    if not text or match is None:
        raise ValueError(f"历时格式错误: {value!r}，示例: 2h、90m、1h30m")
    return int(match.group(1) or 0) * 60 + int(match.group(2) or 0)


def format_minutes(minutes: int) -> str:
    """分钟数转为 HH:MM"""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
