"""HTML 时刻表输出"""

from jinja2 import Environment, select_autoescape

from ..models.ticket import SeatStatus, TicketSearchResult
from ..utils.time_utils import format_duration
from .text import EMPTY_MESSAGE, SEAT_COLUMNS

_SEAT_CSS = {
    SeatStatus.COUNT: "count",
    SeatStatus.AVAILABLE: "available",
    SeatStatus.SOLD_OUT: "sold-out",
    SeatStatus.NOT_OFFERED: "na",
}

TEMPLATE = """<!DOCTYPE html>
<html lang="zh-CN">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{{ result.from_station.name }} → {{ result.to_station.name }} 列车时刻表</title>
<style>
  *, *::before, *::after { box-sizing: border-box; margin: 0; padding: 0; }
  body { font-family: -apple-system, "SF Pro Text", "Helvetica Neue", sans-serif; background: #f5f5f7; color: #1d1d1f; }
  .container { max-width: 1100px; margin: 0 auto; padding: 40px 20px; }
  header { text-align: center; margin-bottom: 32px; }
  h1 { font-size: 28px; font-weight: 600; }
  h1 .arrow { margin: 0 12px; color: #86868b; font-weight: 300; }
  .meta { margin-top: 8px; color: #86868b; font-size: 15px; }
  .meta span + span::before { content: "\\00b7"; margin: 0 8px; }
  .filters { margin-top: 6px; color: #0071e3; font-size: 13px; }
  .table-wrap { background: #fff; border-radius: 12px; overflow: hidden; box-shadow: 0 1px 3px rgba(0,0,0,.08); }
  .empty { padding: 60px 20px; text-align: center; color: #86868b; font-size: 15px; }
  table { width: 100%; border-collapse: collapse; font-size: 14px; }
  th { padding: 12px 10px; font-weight: 500; color: #86868b; font-size: 12px; border-bottom: 1px solid #f0f0f0; white-space: nowrap; }
  td { padding: 11px 10px; border-bottom: 1px solid #f5f5f5; text-align: center; white-space: nowrap; }
  .train-code { font-weight: 600; text-align: left; padding-left: 16px; }
  .type-g { color: #0071e3; } .type-d { color: #34c759; } .type-z { color: #af52de; }
  .type-t { color: #ff9500; } .type-k { color: #86868b; }
  .depart { font-weight: 600; } .arrive { color: #6e6e73; }
  .duration { color: #86868b; }
  .na { color: #d2d2d7; } .available { color: #34c759; font-weight: 500; }
  .sold-out { color: #ff3b30; } .count { font-weight: 600; }
  .buy-yes { color: #34c759; font-weight: 500; } .buy-no { color: #ff3b30; font-weight: 500; }
  footer { text-align: center; margin-top: 24px; color: #c0c0c0; font-size: 12px; }
</style>
</head>
<body>
<div class="container">
  <header>
    <h1>{{ result.from_station.name }}<span class="arrow">→</span>{{ result.to_station.name }}</h1>
    <div class="meta"><span>{{ result.train_date }}</span><span>{{ result.tickets | length }} 趟列车</span></div>
    {% if result.filter_description %}<div class="filters">{{ result.filter_description }}</div>{% endif %}
  </header>
  <div class="table-wrap">
  {% if result.is_empty %}
    <div class="empty">{{ empty_message }}</div>
  {% else %}
    <table>
      <thead><tr>
        <th style="text-align:left;padding-left:16px">车次</th><th>时间</th><th>耗时</th>
        {% for seat in seat_columns %}<th>{{ seat.label }}</th>{% endfor %}<th>状态</th>
      </tr></thead>
      <tbody>
      {% for t in result.tickets %}
      <tr>
        <td class="train-code type-{{ t.train_type | lower }}">{{ t.train_code }}</td>
        <td class="time"><span class="depart">{{ t.depart_time }}</span> → <span class="arrive">{{ t.arrive_time }}</span></td>
        <td class="duration">{{ t.duration | duration }}</td>
        {% for seat in seat_columns %}{% set s = t.seat(seat) %}<td class="{{ s.status | seat_css }}">{{ s.display() }}</td>{% endfor %}
        <td class="{{ 'buy-yes' if t.can_buy else 'buy-no' }}">{{ '可购' if t.can_buy else '售罄' }}</td>
      </tr>
      {% endfor %}
      </tbody>
    </table>
  {% endif %}
  </div>
  <footer>数据来源 12306 · {{ result.search_date.strftime('%Y-%m-%d %H:%M') }}</footer>
</div>
</body>
</html>
"""

_env = Environment(autoescape=select_autoescape(default_for_string=True, default=True))
_env.filters["duration"] = format_duration
_env.filters["seat_css"] = lambda status: _SEAT_CSS[status]
_template = _env.from_string(TEMPLATE)


def render_html(result: TicketSearchResult) -> str:
    return _template.render(
        result=result,
        seat_columns=SEAT_COLUMNS,
        empty_message=EMPTY_MESSAGE,
    )
