"""命令行入口：查询余票并输出 HTML / Markdown / JSON"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .exceptions import Ticket12306Error
from .models.query import FilterCriteria
from .output import render
from .services.ticket_service import TicketService
from .utils.config import get_settings
from .utils.date_utils import get_today, validate_date

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ticket-12306",
        description="查询12306车次、时刻与余票",
    )
    parser.add_argument("from_station", help="出发站或城市，如 北京、上海虹桥")
    parser.add_argument("to_station", help="到达站或城市")
    parser.add_argument("-d", "--date", help="出发日期 YYYY-MM-DD（默认今天）")
    parser.add_argument("-t", "--type", default="", help="车次类型，可组合，如 GD")
    parser.add_argument("--depart", help="出发时间段，如 08:00-12:00、18:00-")
    parser.add_argument("--arrive", help="到达时间段，如 -18:00、14:00-20:00")
    parser.add_argument("--max-duration", help="最长历时，如 2h、90m、1h30m")
    parser.add_argument("--available", action="store_true", help="仅显示可预订车次")
    parser.add_argument("--seat", help="须有票的席别，逗号分隔：swz,zy,ze,rw,dw,yw,yz,wz")
    parser.add_argument("-f", "--format", default="html", choices=["html", "md", "json"],
                        help="输出格式（默认 html）")
    parser.add_argument("-o", "--output", help="HTML 输出文件路径")
    parser.add_argument("--json", action="store_true", help="输出原始 JSON（同 -f json）")
    parser.add_argument("--refresh", action="store_true", help="强制刷新车站缓存")
    return parser


def default_output_path(from_name: str, to_name: str, train_date: str) -> Path:
    return get_settings().cache_path.parent / f"{from_name}-{to_name}-{train_date}.html"


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    train_date = args.date or get_today(settings.timezone)
    if not validate_date(train_date):
        logger.error(f"日期格式错误，请使用 YYYY-MM-DD 格式: {train_date}")
        return 1
    try:
        criteria = FilterCriteria.from_options(
            train_type=args.type,
            depart=args.depart,
            arrive=args.arrive,
            max_duration=args.max_duration,
            available=args.available,
            seat=args.seat,
        )
    except ValueError as e:
        logger.error(f"筛选参数错误: {e}")
        return 1

    service = TicketService(settings=settings)
    try:
        result = await service.search(
            args.from_station, args.to_station, train_date,
            criteria=criteria, force_refresh=args.refresh,
        )
    except Ticket12306Error as e:
        logger.error(f"❌ {e}")
        return 1

    fmt = "json" if args.json else args.format
    output = render(result, fmt)
    if fmt != "html":
        print(output)
        return 0

    out_path = Path(args.output) if args.output else default_output_path(
        result.from_station.name, result.to_station.name, train_date)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(output, encoding="utf-8")
    logger.info(f"{len(result.tickets)}/{result.total} 趟列车符合条件，已保存到 {out_path}")
    print(out_path)
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
