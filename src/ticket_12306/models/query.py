"""车票筛选条件模型"""

from typing import FrozenSet, Iterable, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..utils.time_utils import (
    MINUTES_PER_DAY,
    format_minutes,
    parse_duration_limit,
    parse_time_window,
)
from .ticket import SeatClass


class TimeWindow(BaseModel):
    """当日时间段（分钟，闭区间）"""
    model_config = ConfigDict(frozen=True)

    lo: int = Field(0, ge=0, le=MINUTES_PER_DAY, description="起点")
    hi: int = Field(MINUTES_PER_DAY, ge=0, le=MINUTES_PER_DAY, description="终点")

    @model_validator(mode="after")
    def _check_order(self) -> "TimeWindow":
        if self.lo > self.hi:
            raise ValueError(f"时间段起点晚于终点: {self.lo} > {self.hi}")
        return self

    @classmethod
    def parse(cls, value: str) -> "TimeWindow":
        lo, hi = parse_time_window(value)
        return cls(lo=lo, hi=hi)

    def contains(self, minutes: int) -> bool:
        return self.lo <= minutes <= self.hi

    def __str__(self) -> str:
        lo = format_minutes(self.lo) if self.lo > 0 else ""
        hi = format_minutes(self.hi) if self.hi < MINUTES_PER_DAY else ""
        return f"{lo}-{hi}"


class FilterCriteria(BaseModel):
    """车票筛选条件，各字段相互独立，缺省即不限"""
    model_config = ConfigDict(frozen=True)

    train_types: FrozenSet[str] = Field(default_factory=frozenset, description="车次首字母，如 {'G', 'D'}")
    depart_window: Optional[TimeWindow] = Field(None, description="出发时间段")
    arrive_window: Optional[TimeWindow] = Field(None, description="到达时间段")
    max_duration: Optional[int] = Field(None, ge=0, description="最长历时（分钟）")
    available_only: bool = Field(False, description="仅显示可预订车次")
    seat_classes: FrozenSet[SeatClass] = Field(default_factory=frozenset, description="须全部有票的席别")

    @field_validator("train_types", mode="before")
    @classmethod
    def _split_train_types(cls, value):
        if isinstance(value, str):
            value = [value]
        return frozenset(ch.upper() for entry in value for ch in entry if not ch.isspace())

    @field_validator("seat_classes", mode="before")
    @classmethod
    def _parse_seat_classes(cls, value):
        if isinstance(value, str):
            value = [s for s in value.split(",") if s.strip()]
        return frozenset(s if isinstance(s, SeatClass) else SeatClass.parse(s) for s in value)

    @classmethod
    def from_options(
        cls,
        train_type: Optional[str] = None,
        depart: Optional[str] = None,
        arrive: Optional[str] = None,
        max_duration: Optional[str] = None,
        available: bool = False,
        seat: Optional[str] = None,
    ) -> "FilterCriteria":
        """由命令行/工具参数构造，格式错误抛出 ValueError"""
        return cls(
            train_types=train_type or "",
            depart_window=TimeWindow.parse(depart) if depart else None,
            arrive_window=TimeWindow.parse(arrive) if arrive else None,
            max_duration=parse_duration_limit(max_duration) if max_duration else None,
            available_only=available,
            seat_classes=seat or "",
        )

    @property
    def is_empty(self) -> bool:
        return not (
            self.train_types
            or self.depart_window
            or self.arrive_window
            or self.max_duration is not None
            or self.available_only
            or self.seat_classes
        )

    def describe(self) -> str:
        """筛选条件说明，各项以 " | " 分隔，无条件时为空串"""
        parts = []
        if self.train_types:
            parts.append(f"{''.join(sorted(self.train_types))} 字头")
        if self.depart_window:
            parts.append(f"出发 {self.depart_window}")
        if self.arrive_window:
            parts.append(f"到达 {self.arrive_window}")
        if self.max_duration is not None:
            parts.append(f"耗时 ≤ {_format_limit(self.max_duration)}")
        if self.available_only:
            parts.append("仅可购")
        if self.seat_classes:
            parts.append(f"有票: {_join_seats(self.seat_classes)}")
        return " | ".join(parts)


def _format_limit(minutes: int) -> str:
    hours, rest = divmod(minutes, 60)
    if hours and rest:
        return f"{hours}h{rest}m"
    if hours:
        return f"{hours}h"
    return f"{rest}m"


def _join_seats(seats: Iterable[SeatClass]) -> str:
    order = list(SeatClass)
    return ",".join(s.value for s in sorted(seats, key=order.index))
