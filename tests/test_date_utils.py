from datetime import datetime

import pytz

from ticket_12306.utils.date_utils import get_relative_date, get_today, validate_date


def test_validate_date():
    assert validate_date("2020-01-01")
    assert not validate_date("2020/01/01")
    assert not validate_date("2020-02-30")


def test_relative_date_crosses_month():
    base = pytz.timezone("Asia/Shanghai").localize(datetime(2020, 1, 31, 23, 0))
    assert get_relative_date(1, base=base) == "2020-02-01"


def test_today_is_valid_date():
    assert validate_date(get_today())
