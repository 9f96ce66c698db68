import asyncio

import pytest

from ticket_12306 import cli
from ticket_12306.exceptions import StationNotFound
from ticket_12306.models.ticket import TicketSearchResult
from ticket_12306.services.ticket_decoder import decode_ticket


@pytest.fixture
def fake_search(directory, make_record, monkeypatch):
    calls = []

    async def search(self, from_name, to_name, train_date, criteria=None, force_refresh=False):
        calls.append((from_name, to_name, train_date, criteria, force_refresh))
        if from_name == "广州":
            raise StationNotFound.for_query(from_name)
        return TicketSearchResult(
            from_station=directory.get_by_code("BJP"),
            to_station=directory.get_by_code("SHH"),
            train_date=train_date,
            tickets=[decode_ticket(make_record(), directory)],
            total=1,
            filter_description=criteria.describe(),
        )

    monkeypatch.setattr(cli.TicketService, "search", search)
    return calls


def run(argv):
    return asyncio.run(cli.run(cli.build_parser().parse_args(argv)))


def test_markdown_to_stdout(fake_search, capsys):
    code = run(["北京", "上海", "-d", "2020-01-01", "-t", "G", "--seat", "ze", "-f", "md", "--refresh"])

    assert code == 0
    out = capsys.readouterr().out
    assert out.startswith("## 北京 → 上海 | 2020-01-01 | 1 趟列车")
    assert "> G 字头 | 有票: ze" in out
    from_name, to_name, train_date, criteria, force_refresh = fake_search[0]
    assert (from_name, to_name, train_date, force_refresh) == ("北京", "上海", "2020-01-01", True)


def test_json_flag(fake_search, capsys):
    assert run(["北京", "上海", "-d", "2020-01-01", "--json"]) == 0
    assert '"train_code": "G103"' in capsys.readouterr().out


def test_html_written_to_file(fake_search, tmp_path, capsys):
    out_path = tmp_path / "out" / "result.html"

    assert run(["北京", "上海", "-d", "2020-01-01", "-o", str(out_path)]) == 0

    assert capsys.readouterr().out.strip() == str(out_path)
    assert "G103" in out_path.read_text(encoding="utf-8")


def test_station_not_found_exits_nonzero(fake_search):
    assert run(["广州", "上海", "-d", "2020-01-01", "-f", "md"]) == 1


def test_bad_date(fake_search):
    assert run(["北京", "上海", "-d", "2020/01/01"]) == 1
    assert fake_search == []


def test_bad_filter(fake_search):
    assert run(["北京", "上海", "-d", "2020-01-01", "--max-duration", "soon"]) == 1
    assert fake_search == []
