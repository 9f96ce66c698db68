"""车站数据模型"""

import time
from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


class Station(BaseModel):
    """车站信息模型"""
    model_config = ConfigDict(frozen=True)

    code: str = Field(..., description="车站代码（电报码）")
    name: str = Field(..., description="车站名称")
    pinyin: str = Field("", description="拼音")
    py_short: str = Field("", description="拼音简写")
    city: str = Field(..., description="所属城市，缺省为车站名")


class StationDirectory(BaseModel):
    """车站目录快照

    按数据源顺序保存车站，构造时建立四个索引：
    代码索引、站名索引、城市车站列表、城市同名主站。
    重名或重码时后出现者覆盖先出现者，城市列表保留全部车站。
    """
    model_config = ConfigDict(frozen=True)

    stations: Tuple[Station, ...] = Field(default_factory=tuple, description="车站列表（源顺序）")

    _by_code: Dict[str, Station] = PrivateAttr(default_factory=dict)
    _by_name: Dict[str, Station] = PrivateAttr(default_factory=dict)
    _city_stations: Dict[str, List[Station]] = PrivateAttr(default_factory=dict)
    _city_primary: Dict[str, Station] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        for station in self.stations:
            self._by_code[station.code] = station
            self._by_name[station.name] = station
            self._city_stations.setdefault(station.city, []).append(station)
            if station.name == station.city:
                self._city_primary[station.city] = station

    def __len__(self) -> int:
        return len(self._by_code)

    def get_by_code(self, code: str) -> Optional[Station]:
        return self._by_code.get(code)

    def get_by_name(self, name: str) -> Optional[Station]:
        return self._by_name.get(name)

    def get_city_primary(self, city: str) -> Optional[Station]:
        """城市同名车站，如 "上海" -> 上海站"""
        return self._city_primary.get(city)

    def get_city_stations(self, city: str) -> List[Station]:
        """城市下全部车站，保持源顺序"""
        return list(self._city_stations.get(city, []))

    @property
    def cities(self) -> List[str]:
        return list(self._city_stations)


class CacheEnvelope(BaseModel):
    """车站缓存文件内容"""
    fetched_at: float = Field(..., description="拉取时间（Unix时间戳，秒）")
    directory: StationDirectory = Field(..., description="车站目录")

    def age(self, now: Optional[float] = None) -> float:
        """缓存已存在的秒数"""
        return (time.time() if now is None else now) - self.fetched_at
