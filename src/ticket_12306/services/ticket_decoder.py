"""余票记录解码

12306余票接口 data.result 中每条记录是一串以 | 分隔的定长字段，
字段位置见 TicketSchema，位置变化时只需新增一份 schema。
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..models.station import StationDirectory
from ..models.ticket import SeatAvailability, SeatClass, SeatStatus, Ticket, NOT_OFFERED

logger = logging.getLogger(__name__)

BLANK = "--"


@dataclass(frozen=True)
class TicketSchema:
    """余票记录字段位置表"""
    version: str
    fields: Mapping[str, int]
    # 同一席别可能有多个位置，取第一个有值的位置
    seats: Mapping[SeatClass, Tuple[int, ...]] = field(default_factory=dict)

    def position(self, name: str) -> int:
        return self.fields[name]


DEFAULT_SCHEMA = TicketSchema(
    version="2020-01",
    fields={
        "train_no": 2,
        "train_code": 3,
        "from_code": 6,
        "to_code": 7,
        "depart_time": 8,
        "arrive_time": 9,
        "duration": 10,
        "can_buy": 11,
        "train_date": 13,
    },
    seats={
        SeatClass.BUSINESS: (32, 25),      # 商务座，特等座
        SeatClass.FIRST: (31,),
        SeatClass.SECOND: (30,),
        SeatClass.SOFT_SLEEPER: (23, 33),  # 软卧，动卧
        SeatClass.HARD_SLEEPER: (28,),
        SeatClass.HARD_SEAT: (29,),
        SeatClass.STANDING: (26,),
    },
)


def parse_seat_value(value: Optional[str]) -> SeatAvailability:
    """余票字段 -> 余票状态

    数字为张数，“有”为有票，“无”为售罄，空值、"--" 及其它无法识别的内容均视为无此席别。
    """
    token = (value or "").strip()
    if token.isdecimal():
        return SeatAvailability(status=SeatStatus.COUNT, count=int(token))
    if token == "有":
        return SeatAvailability(status=SeatStatus.AVAILABLE)
    if token == "无":
        return SeatAvailability(status=SeatStatus.SOLD_OUT)
    return NOT_OFFERED


class _Fields:
    def __init__(self, raw: str):
        self.parts: List[str] = raw.split("|")

    def at(self, idx: int) -> str:
        if 0 <= idx < len(self.parts) and self.parts[idx].strip():
            return self.parts[idx].strip()
        return BLANK


def _decode_seat(fields: _Fields, positions: Sequence[int]) -> SeatAvailability:
    for idx in positions:
        seat = parse_seat_value(fields.at(idx))
        if seat.is_offered:
            return seat
    return NOT_OFFERED


def decode_ticket(raw: str, directory: StationDirectory,
                  schema: TicketSchema = DEFAULT_SCHEMA) -> Ticket:
    """解码单条余票记录，字段缺失或格式异常时降级而不报错"""
    fields = _Fields(raw)

    def v(name: str) -> str:
        return fields.at(schema.position(name))

    from_code, to_code = v("from_code"), v("to_code")
    from_station = directory.get_by_code(from_code)
    to_station = directory.get_by_code(to_code)

    seats: Dict[SeatClass, SeatAvailability] = {
        seat_class: _decode_seat(fields, positions)
        for seat_class, positions in schema.seats.items()
    }
    return Ticket(
        train_no=v("train_no"),
        train_code=v("train_code"),
        from_station_code=from_code,
        from_station_name=from_station.name if from_station else from_code,
        to_station_code=to_code,
        to_station_name=to_station.name if to_station else to_code,
        depart_time=v("depart_time"),
        arrive_time=v("arrive_time"),
        duration=v("duration"),
        can_buy=v("can_buy") == "Y",
        train_date=v("train_date"),
        seats=seats,
    )


def decode_tickets(records: Sequence[str], directory: StationDirectory,
                   schema: TicketSchema = DEFAULT_SCHEMA) -> List[Ticket]:
    tickets = [decode_ticket(raw, directory, schema) for raw in records]
    logger.debug(f"已解码{len(tickets)}条余票记录（schema {schema.version}）")
    return tickets
