import httpx
import pytest

from ticket_12306.exceptions import FetchError, StationNotFound
from ticket_12306.models.query import FilterCriteria
from ticket_12306.services.http_client import HttpClient
from ticket_12306.services.station_cache import StationCache
from ticket_12306.services.ticket_service import TicketService, extract_ticket_records
from ticket_12306.utils.config import Settings


def make_service(handler, source, storage, clock):
    settings = Settings(_env_file=None)
    http_client = HttpClient(settings, transport=httpx.MockTransport(handler))
    cache = StationCache(source=source, storage=storage, clock=clock)
    return TicketService(http_client=http_client, station_cache=cache, settings=settings)


def ticket_handler(records, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if request.url.path.endswith("/leftTicket/init"):
            return httpx.Response(200, text="<html></html>", headers={"Set-Cookie": "JSESSIONID=abc; Path=/"})
        return httpx.Response(200, json={"status": True, "data": {"result": records}})
    return handler


@pytest.mark.asyncio
async def test_search_resolves_queries_and_filters(make_record, source, storage, clock):
    seen = []
    records = [make_record(), make_record(train_code="D5", ze="无")]
    service = make_service(ticket_handler(records, seen), source, storage, clock)

    result = await service.search("北京市", "上海站", "2020-01-01", FilterCriteria(seat_classes="ze"))

    assert result.from_station.code == "BJP"
    assert result.to_station.code == "SHH"
    assert result.total == 2
    assert [t.train_code for t in result.tickets] == ["G103"]
    assert result.filter_description == "有票: ze"

    query = seen[-1]
    assert query.url.params["leftTicketDTO.train_date"] == "2020-01-01"
    assert query.url.params["leftTicketDTO.from_station"] == "BJP"
    assert query.url.params["leftTicketDTO.to_station"] == "SHH"
    assert query.url.params["purpose_codes"] == "ADULT"
    # 初始化页面下发的Cookie随查询请求带回
    assert "JSESSIONID=abc" in query.headers.get("cookie", "")


@pytest.mark.asyncio
async def test_empty_result_is_not_an_error(source, storage, clock):
    service = make_service(ticket_handler([]), source, storage, clock)

    result = await service.search("北京", "上海", "2020-01-01")

    assert result.is_empty
    assert result.total == 0


@pytest.mark.asyncio
async def test_unknown_station(source, storage, clock):
    service = make_service(ticket_handler([]), source, storage, clock)

    with pytest.raises(StationNotFound):
        await service.search("广州", "上海", "2020-01-01")


@pytest.mark.asyncio
async def test_http_error_is_fetch_error(source, storage, clock):
    service = make_service(lambda request: httpx.Response(502), source, storage, clock)

    with pytest.raises(FetchError):
        await service.search("北京", "上海", "2020-01-01")


@pytest.mark.asyncio
async def test_transport_error_is_fetch_error(source, storage, clock):
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    service = make_service(handler, source, storage, clock)

    with pytest.raises(FetchError):
        await service.search("北京", "上海", "2020-01-01")


@pytest.mark.asyncio
async def test_non_json_body_is_fetch_error(source, storage, clock):
    def handler(request):
        return httpx.Response(200, text="<html>error.html</html>")

    service = make_service(handler, source, storage, clock)

    with pytest.raises(FetchError):
        await service.search("北京", "上海", "2020-01-01")


@pytest.mark.parametrize("payload", [
    {"status": False, "messages": ["系统忙"]},
    {"data": {}},
    {"data": {"result": "x"}},
    {"data": {"result": [1, 2]}},
    [],
])
def test_extract_ticket_records_rejects_other_shapes(payload):
    with pytest.raises(FetchError):
        extract_ticket_records(payload)


def test_extract_ticket_records():
    assert extract_ticket_records({"data": {"result": ["a|b"]}}) == ["a|b"]
