import pytest

from ticket_12306.exceptions import StationNotFound
from ticket_12306.services.station_service import StationService, resolve_station


def test_exact_station_name_wins(directory):
    assert resolve_station(directory, "北京西").code == "BXP"
    assert resolve_station(directory, "上海虹桥").code == "AOH"


def test_city_with_same_named_station(directory):
    # 上海虹桥在源数据中排在上海之前，仍应返回同名主站
    assert resolve_station(directory, "上海").code == "SHH"
    assert resolve_station(directory, "北京").code == "BJP"


def test_city_without_primary_returns_first_in_source_order(directory):
    results = {resolve_station(directory, "杭州").code for _ in range(5)}
    assert results == {"HGH"}


def test_suffix_is_stripped(directory):
    assert resolve_station(directory, "北京市").code == "BJP"
    assert resolve_station(directory, "上海站").code == "SHH"
    assert resolve_station(directory, "杭州市").code == "HGH"


def test_suffix_strip_only_retries_city_lookups(directory):
    # "北京西站" 去后缀后是车站名而不是城市名
    assert resolve_station(directory, "北京西站") is None


def test_pseudo_city_resolves_like_single_station_city(directory):
    assert resolve_station(directory, "小站").code == "XZZ"
    assert resolve_station(directory, "小站市").code == "XZZ"


def test_not_found(directory):
    assert resolve_station(directory, "广州") is None
    assert resolve_station(directory, "站") is None
    assert resolve_station(directory, "  ") is None


def test_whitespace_is_trimmed(directory):
    assert resolve_station(directory, " 北京北 ").code == "VAP"


def test_service_raises_station_not_found(directory):
    service = StationService(directory)
    with pytest.raises(StationNotFound) as exc:
        service.resolve("广州")
    assert exc.value.query == "广州"
    assert "广州" in str(exc.value)


def test_city_stations_of(directory):
    service = StationService(directory)
    station = service.resolve("北京西")
    assert [s.name for s in service.city_stations_of(station)] == ["北京北", "北京", "北京西"]
