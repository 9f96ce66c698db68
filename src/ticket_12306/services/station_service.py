"""车站解析服务"""

import re
import logging
from typing import List, Optional

from ..exceptions import FetchError, StationNotFound
from ..models.station import Station, StationDirectory

logger = logging.getLogger(__name__)

# station_name.js 中的第一个字符串字面量
_QUOTED_BLOB_RE = re.compile(r"'([^']+)'|\"([^\"]+)\"")

# 可去掉的行政/车站后缀
STATION_SUFFIXES = ("市", "站")


def extract_station_blob(content: str) -> str:
    """提取 var station_names ='...' 中引号内的内容"""
    m = _QUOTED_BLOB_RE.search(content)
    if not m:
        raise FetchError(message="未能解析到站点JS内容")
    return m.group(1) if m.group(1) is not None else m.group(2)


def parse_station_payload(content: str) -> StationDirectory:
    """
    解析12306原始JS，生成车站目录。

    记录格式：@bjb|北京北|VAP|beijingbei|bjb|0|0357|北京|||
    依次为：简码|车站名|电报码|拼音|简拼|编号|区域码|城市，城市为空时以车站名代替。
    缺少车站名或电报码的记录直接跳过。
    """
    data = extract_station_blob(content)
    stations = []
    for st in data.split('@'):
        if not st.strip():
            continue
        parts = [p.strip() for p in st.split('|')]

        def field(idx: int) -> str:
            return parts[idx] if idx < len(parts) else ""

        name, code = field(1), field(2)
        if not name or not code:
            logger.debug(f"缺少站名或电报码，跳过：{st}")
            continue
        stations.append(Station(
            code=code,
            name=name,
            pinyin=field(3),
            py_short=field(4),
            city=field(7) or name,
        ))
    if not stations:
        raise FetchError(message="站点数据为空")
    directory = StationDirectory(stations=tuple(stations))
    logger.info(f"已解析{len(directory)}个车站，{len(directory.cities)}个城市")
    return directory


def _resolve_city(directory: StationDirectory, city: str) -> Optional[Station]:
    primary = directory.get_city_primary(city)
    if primary:
        return primary
    stations = directory.get_city_stations(city)
    return stations[0] if stations else None


def resolve_station(directory: StationDirectory, query: str) -> Optional[Station]:
    """
    将用户输入解析为车站，按顺序匹配，命中即返回：
    1. 车站全名
    2. 与城市同名的车站
    3. 城市下的第一个车站（源顺序）
    4. 去掉末尾的“市”或“站”后重试2、3
    """
    q = query.strip()
    if not q:
        return None
    station = directory.get_by_name(q) or _resolve_city(directory, q)
    if station:
        return station
    if len(q) > 1 and q.endswith(STATION_SUFFIXES):
        return _resolve_city(directory, q[:-1])
    return None


class StationService:
    """车站查询服务，数据来自已加载的车站目录"""

    def __init__(self, directory: Optional[StationDirectory] = None):
        self.directory = directory or StationDirectory()

    def resolve(self, query: str) -> Station:
        """解析车站，失败抛出 StationNotFound"""
        station = resolve_station(self.directory, query)
        if station is None:
            logger.warning(f"未找到车站: {query}")
            raise StationNotFound.for_query(query)
        return station

    def city_stations_of(self, station: Station) -> List[Station]:
        """与该站同城的全部车站"""
        return self.directory.get_city_stations(station.city)
