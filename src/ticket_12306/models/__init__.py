"""数据模型包"""

from .station import Station, StationDirectory, CacheEnvelope
from .ticket import (
    SeatClass,
    SeatStatus,
    SeatAvailability,
    Ticket,
    TicketQuery,
    TicketSearchResult,
)
from .query import FilterCriteria, TimeWindow

__all__ = [
    "Station",
    "StationDirectory",
    "CacheEnvelope",
    "SeatClass",
    "SeatStatus",
    "SeatAvailability",
    "Ticket",
    "TicketQuery",
    "TicketSearchResult",
    "FilterCriteria",
    "TimeWindow",
]
