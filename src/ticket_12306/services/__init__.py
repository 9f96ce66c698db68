"""服务层包"""

from .http_client import HttpClient
from .station_service import StationService, parse_station_payload, resolve_station
from .station_cache import StationCache, FileStationStorage, StationSource
from .ticket_decoder import DEFAULT_SCHEMA, TicketSchema, decode_ticket, decode_tickets
from .filter_service import apply_filters
from .ticket_service import TicketService

__all__ = [
    "HttpClient",
    "StationService",
    "parse_station_payload",
    "resolve_station",
    "StationCache",
    "FileStationStorage",
    "StationSource",
    "DEFAULT_SCHEMA",
    "TicketSchema",
    "decode_ticket",
    "decode_tickets",
    "apply_filters",
    "TicketService",
]
