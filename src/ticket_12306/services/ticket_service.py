"""车票查询服务"""

import logging
from typing import List, Optional

from ..exceptions import FetchError
from ..models.query import FilterCriteria
from ..models.station import Station, StationDirectory
from ..models.ticket import Ticket, TicketQuery, TicketSearchResult
from ..utils.config import Settings, get_settings
from .filter_service import apply_filters
from .http_client import HttpClient
from .station_cache import StationCache
from .station_service import StationService
from .ticket_decoder import DEFAULT_SCHEMA, TicketSchema, decode_tickets

logger = logging.getLogger(__name__)


def extract_ticket_records(payload) -> List[str]:
    """取出 data.result，结构不符时抛出 FetchError"""
    data = payload.get("data") if isinstance(payload, dict) else None
    result = data.get("result") if isinstance(data, dict) else None
    if not isinstance(result, list) or not all(isinstance(r, str) for r in result):
        logger.error(f"12306返回数据异常: {str(payload)[:500]}")
        raise FetchError(message="12306未返回余票数据")
    return result


class TicketService:
    """车票查询服务"""

    def __init__(self, http_client: Optional[HttpClient] = None,
                 station_cache: Optional[StationCache] = None,
                 settings: Optional[Settings] = None,
                 schema: TicketSchema = DEFAULT_SCHEMA):
        self.settings = settings or get_settings()
        self.http_client = http_client or HttpClient(self.settings)
        self.station_cache = station_cache or StationCache.from_settings(self.settings)
        self.schema = schema

    async def fetch_records(self, query: TicketQuery, from_code: str, to_code: str) -> List[str]:
        """请求余票接口，返回原始记录"""
        params = {
            'leftTicketDTO.train_date': query.train_date,
            'leftTicketDTO.from_station': from_code,
            'leftTicketDTO.to_station': to_code,
            'purpose_codes': query.purpose_codes
        }
        async with self.http_client:
            # 先访问初始化页面以获取Cookie
            await self.http_client.get(self.settings.ticket_init_url)
            payload = await self.http_client.get_json(self.settings.ticket_query_url, params=params)
        return extract_ticket_records(payload)

    async def query_tickets(self, from_station: Station, to_station: Station,
                            train_date: str, directory: StationDirectory) -> List[Ticket]:
        """查询并解码某日两站间的全部车次"""
        query = TicketQuery(
            from_station=from_station.name,
            to_station=to_station.name,
            train_date=train_date,
        )
        logger.info(f"查询: {from_station.name}({from_station.code}) → {to_station.name}({to_station.code}) {train_date}")
        records = await self.fetch_records(query, from_station.code, to_station.code)
        return decode_tickets(records, directory, self.schema)

    async def search(self, from_name: str, to_name: str, train_date: str,
                     criteria: Optional[FilterCriteria] = None,
                     force_refresh: bool = False,
                     directory: Optional[StationDirectory] = None) -> TicketSearchResult:
        """完整查询流程：加载车站 → 解析车站 → 查询 → 解码 → 筛选

        已持有车站目录时（如服务端启动时已加载）可直接传入，跳过缓存读取。
        """
        criteria = criteria or FilterCriteria()
        if directory is None:
            directory = await self.station_cache.load(force_refresh=force_refresh)
        stations = StationService(directory)
        from_station = stations.resolve(from_name)
        to_station = stations.resolve(to_name)

        tickets = await self.query_tickets(from_station, to_station, train_date, directory)
        filtered = apply_filters(tickets, criteria)
        logger.info(f"{len(filtered)}/{len(tickets)} 趟列车符合条件")
        return TicketSearchResult(
            from_station=from_station,
            to_station=to_station,
            train_date=train_date,
            tickets=filtered,
            total=len(tickets),
            filter_description=criteria.describe(),
        )
