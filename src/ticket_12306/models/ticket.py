"""车票数据模型"""

from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .station import Station


class SeatClass(str, Enum):
    """席别"""
    BUSINESS = "swz"       # 商务座/特等座
    FIRST = "zy"           # 一等座
    SECOND = "ze"          # 二等座
    SOFT_SLEEPER = "rw"    # 软卧/动卧
    HARD_SLEEPER = "yw"    # 硬卧
    HARD_SEAT = "yz"       # 硬座
    STANDING = "wz"        # 无座

    @property
    def label(self) -> str:
        return SEAT_LABELS[self]

    @classmethod
    def parse(cls, value: str) -> "SeatClass":
        """解析席别代码，兼容 tz（特等座）与 dw（动卧）"""
        key = value.strip().lower()
        key = SEAT_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            valid = ",".join(s.value for s in cls)
            raise ValueError(f"未知席别: {value!r}，可选: {valid}") from None


SEAT_LABELS: Dict[SeatClass, str] = {
    SeatClass.BUSINESS: "商务/特等",
    SeatClass.FIRST: "一等座",
    SeatClass.SECOND: "二等座",
    SeatClass.SOFT_SLEEPER: "软卧/动卧",
    SeatClass.HARD_SLEEPER: "硬卧",
    SeatClass.HARD_SEAT: "硬座",
    SeatClass.STANDING: "无座",
}

SEAT_ALIASES: Dict[str, str] = {"tz": "swz", "dw": "rw"}


class SeatStatus(str, Enum):
    """余票状态"""
    COUNT = "count"              # 具体张数
    AVAILABLE = "available"      # 有票，数量未公布
    SOLD_OUT = "sold_out"        # 无票
    NOT_OFFERED = "not_offered"  # 该车次无此席别


class SeatAvailability(BaseModel):
    """某一席别的余票"""
    model_config = ConfigDict(frozen=True)

    status: SeatStatus
    count: Optional[int] = None

    @property
    def has_tickets(self) -> bool:
        if self.status is SeatStatus.AVAILABLE:
            return True
        return self.status is SeatStatus.COUNT and bool(self.count)

    @property
    def is_offered(self) -> bool:
        return self.status is not SeatStatus.NOT_OFFERED

    def display(self) -> str:
        if self.status is SeatStatus.COUNT:
            return str(self.count)
        if self.status is SeatStatus.AVAILABLE:
            return "有"
        if self.status is SeatStatus.SOLD_OUT:
            return "无"
        return "--"


NOT_OFFERED = SeatAvailability(status=SeatStatus.NOT_OFFERED)


class TicketQuery(BaseModel):
    """车票查询请求"""
    from_station: str = Field(..., description="出发站")
    to_station: str = Field(..., description="到达站")
    train_date: str = Field(..., description="出发日期 (YYYY-MM-DD)")
    purpose_codes: str = Field(default="ADULT", description="乘客类型")


class Ticket(BaseModel):
    """车票信息模型（单条余票记录解码结果）"""
    model_config = ConfigDict(frozen=True)

    train_no: str = Field(..., description="列车编号")
    train_code: str = Field(..., description="车次，如 G103")
    from_station_code: str = Field(..., description="出发站代码")
    from_station_name: str = Field(..., description="出发站名")
    to_station_code: str = Field(..., description="到达站代码")
    to_station_name: str = Field(..., description="到达站名")
    depart_time: str = Field(..., description="出发时间 HH:MM")
    arrive_time: str = Field(..., description="到达时间 HH:MM")
    duration: str = Field(..., description="历时 HH:MM")
    can_buy: bool = Field(False, description="是否可预订")
    train_date: str = Field("--", description="始发日期 YYYYMMDD")
    seats: Mapping[SeatClass, SeatAvailability] = Field(default_factory=dict, description="各席别余票（只读）")

    @field_validator("seats", mode="after")
    @classmethod
    def _freeze_seats(cls, value):
        return MappingProxyType(dict(value))

    @field_serializer("seats")
    def _dump_seats(self, seats) -> Dict[SeatClass, SeatAvailability]:
        return dict(seats)

    @property
    def train_type(self) -> str:
        return self.train_code[:1].upper()

    def seat(self, seat_class: SeatClass) -> SeatAvailability:
        return self.seats.get(seat_class, NOT_OFFERED)


class TicketSearchResult(BaseModel):
    """车票搜索结果，交给输出层渲染"""
    from_station: Station = Field(..., description="出发站")
    to_station: Station = Field(..., description="到达站")
    train_date: str = Field(..., description="出发日期")
    tickets: List[Ticket] = Field(default_factory=list, description="筛选后的车票列表")
    total: int = Field(0, description="筛选前的车次数")
    filter_description: str = Field("", description="筛选条件说明")
    search_date: datetime = Field(default_factory=datetime.now, description="查询时间")

    @property
    def is_empty(self) -> bool:
        return not self.tickets
