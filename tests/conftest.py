from typing import List, Optional

import pytest

from ticket_12306.exceptions import CacheIOError
from ticket_12306.services.station_service import parse_station_payload


STATION_JS = (
    "var station_names ='"
    "@bjb|北京北|VAP|beijingbei|bjb|0|0357|北京|||"
    "@bjp|北京|BJP|beijing|bj|1|0357|北京|||"
    "@bxp|北京西|BXP|beijingxi|bjx|2|0357|北京|||"
    "@aoh|上海虹桥|AOH|shanghaihongqiao|shhq|3|0712|上海|||"
    "@shh|上海|SHH|shanghai|sh|4|0712|上海|||"
    "@hgh|杭州东|HGH|hangzhoudong|hzd|5|1233|杭州|||"
    "@xhh|杭州南|XHH|hangzhounan|hzn|6|1233|杭州|||"
    "@xzz|小站|XZZ|xiaozhan|xz|7|9999||||"
    "@   "
    "@wmz|无码站||wumazhan|wmz|8|||||"
    "';"
)


@pytest.fixture
def station_js() -> str:
    return STATION_JS


@pytest.fixture
def directory():
    return parse_station_payload(STATION_JS)


def build_record(**overrides: str) -> str:
    """按默认字段位置拼出一条余票记录"""
    fields = [""] * 36
    defaults = {
        0: "secret",
        1: "预订",
        2: "240000G1030A",
        3: "G103",
        4: "BJP",
        5: "SHH",
        6: "BJP",
        7: "SHH",
        8: "08:00",
        9: "13:30",
        10: "05:30",
        11: "Y",
        13: "20200101",
        25: "--",
        30: "有",
        31: "",
        32: "--",
    }
    names = {
        "train_no": 2, "train_code": 3, "from_code": 6, "to_code": 7,
        "depart": 8, "arrive": 9, "duration": 10, "can_buy": 11, "date": 13,
        "rw": 23, "rz": 24, "tz": 25, "wz": 26, "yw": 28, "yz": 29,
        "ze": 30, "zy": 31, "swz": 32, "dw": 33,
    }
    for idx, value in defaults.items():
        fields[idx] = value
    for key, value in overrides.items():
        fields[names[key]] = value
    return "|".join(fields)


@pytest.fixture
def make_record():
    return build_record


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class MemoryStorage:
    """内存缓存存储，可模拟读写失败"""

    def __init__(self, text: Optional[str] = None):
        self.text = text
        self.fail_read = False
        self.fail_write = False
        self.writes: List[str] = []

    async def read(self) -> Optional[str]:
        if self.fail_read:
            raise CacheIOError(message="读取车站缓存失败")
        return self.text

    async def write(self, text: str) -> None:
        if self.fail_write:
            raise CacheIOError(message="写入车站缓存失败")
        self.text = text
        self.writes.append(text)


class FakeSource:
    def __init__(self, payload: str = STATION_JS, error: Optional[Exception] = None):
        self.payload = payload
        self.error = error
        self.calls = 0

    async def fetch(self) -> str:
        self.calls += 1
        if self.error:
            raise self.error
        return self.payload


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()
