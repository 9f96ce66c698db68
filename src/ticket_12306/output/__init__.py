"""输出层：将筛选后的车票渲染为 HTML、Markdown 或 JSON"""

from ..models.ticket import TicketSearchResult
from .html import render_html
from .text import render_json, render_markdown

FORMATS = ("html", "md", "json")


def render(result: TicketSearchResult, fmt: str = "html") -> str:
    fmt = fmt.lower()
    if fmt == "html":
        return render_html(result)
    if fmt in ("md", "markdown"):
        return render_markdown(result)
    if fmt == "json":
        return render_json(result)
    raise ValueError(f"不支持的输出格式: {fmt}，可选: {', '.join(FORMATS)}")


__all__ = ["FORMATS", "render", "render_html", "render_markdown", "render_json"]
