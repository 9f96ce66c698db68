"""车票筛选

每个条件是一个只读取车票与筛选条件的独立谓词，结果为全部谓词的与，
因此与求值顺序无关。
"""

from typing import Callable, List, Sequence

from ..models.query import FilterCriteria, TimeWindow
from ..models.ticket import Ticket
from ..utils.time_utils import duration_to_minutes, parse_clock

Predicate = Callable[[Ticket], bool]


def train_type_predicate(types: frozenset) -> Predicate:
    def check(ticket: Ticket) -> bool:
        return ticket.train_type in types
    return check


def _time_window_predicate(window: TimeWindow, attr: str) -> Predicate:
    def check(ticket: Ticket) -> bool:
        try:
            minutes = parse_clock(getattr(ticket, attr))
        except ValueError:
            return False
        return window.contains(minutes)
    return check


def depart_window_predicate(window: TimeWindow) -> Predicate:
    return _time_window_predicate(window, "depart_time")


def arrive_window_predicate(window: TimeWindow) -> Predicate:
    return _time_window_predicate(window, "arrive_time")


def max_duration_predicate(limit: int) -> Predicate:
    def check(ticket: Ticket) -> bool:
        try:
            return duration_to_minutes(ticket.duration) <= limit
        except ValueError:
            return False
    return check


def available_predicate(ticket: Ticket) -> bool:
    return ticket.can_buy


def seat_classes_predicate(seat_classes: frozenset) -> Predicate:
    """所列席别须全部有票"""
    def check(ticket: Ticket) -> bool:
        return all(ticket.seat(s).has_tickets for s in seat_classes)
    return check


def build_predicates(criteria: FilterCriteria) -> List[Predicate]:
    predicates: List[Predicate] = []
    if criteria.train_types:
        predicates.append(train_type_predicate(criteria.train_types))
    if criteria.depart_window is not None:
        predicates.append(depart_window_predicate(criteria.depart_window))
    if criteria.arrive_window is not None:
        predicates.append(arrive_window_predicate(criteria.arrive_window))
    if criteria.max_duration is not None:
        predicates.append(max_duration_predicate(criteria.max_duration))
    if criteria.available_only:
        predicates.append(available_predicate)
    if criteria.seat_classes:
        predicates.append(seat_classes_predicate(criteria.seat_classes))
    return predicates


def apply_filters(tickets: Sequence[Ticket], criteria: FilterCriteria) -> List[Ticket]:
    """按条件筛选车票，保持原顺序，不修改输入"""
    predicates = build_predicates(criteria)
    return [t for t in tickets if all(p(t) for p in predicates)]
