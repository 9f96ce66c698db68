"""Markdown 与 JSON 输出"""

import json
from typing import List

from ..models.ticket import SeatClass, Ticket, TicketSearchResult
from ..utils.time_utils import format_duration

EMPTY_MESSAGE = "没有找到符合条件的列车"

SEAT_COLUMNS: List[SeatClass] = list(SeatClass)


def render_markdown(result: TicketSearchResult) -> str:
    lines = [
        f"## {result.from_station.name} → {result.to_station.name} | "
        f"{result.train_date} | {len(result.tickets)} 趟列车"
    ]
    if result.filter_description:
        lines.append(f"> {result.filter_description}")
    lines.append("")

    if result.is_empty:
        lines.append(EMPTY_MESSAGE)
        return "\n".join(lines)

    header = ["车次", "出发→到达", "耗时"] + [s.label for s in SEAT_COLUMNS] + ["状态"]
    lines.append("| " + " | ".join(header) + " |")
    lines.append("|" + "|".join("------" for _ in header) + "|")
    for t in result.tickets:
        lines.append("| " + " | ".join(_markdown_row(t)) + " |")
    return "\n".join(lines)


def _markdown_row(t: Ticket) -> List[str]:
    row = [t.train_code, f"{t.depart_time}→{t.arrive_time}", format_duration(t.duration)]
    row += [t.seat(s).display() for s in SEAT_COLUMNS]
    row.append("✅" if t.can_buy else "❌")
    return row


def render_json(result: TicketSearchResult) -> str:
    tickets = [t.model_dump(mode="json") for t in result.tickets]
    return json.dumps(tickets, ensure_ascii=False, indent=2)
