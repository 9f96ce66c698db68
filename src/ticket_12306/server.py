import asyncio
import json
import logging
from datetime import datetime
from typing import Dict, Any
import uuid
import pytz

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse, Response
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from .exceptions import Ticket12306Error
from .models.query import FilterCriteria
from .models.station import StationDirectory
from .output import render
from .services.station_cache import StationCache
from .services.station_service import StationService, resolve_station
from .services.ticket_service import TicketService
from .utils.config import get_settings
from .utils.date_utils import validate_date, get_relative_date

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)
station_cache = StationCache.from_settings(settings)
station_service = StationService()
ticket_service = TicketService(station_cache=station_cache, settings=settings)

MCP_PROTOCOL_VERSION = "2025-03-26"
SERVER_NAME = "ticket-12306"
SERVER_VERSION = "1.0.0"

# Connected clients for session management
connected_clients: Dict[str, Dict] = {}

_TIME_RANGE_PATTERN = "^(\\d{1,2}:\\d{2})?(-(\\d{1,2}:\\d{2})?)?$"

MCP_TOOLS = [
    {
        "name": "query-tickets",
        "description": "12306余票/车次/时刻查询。输入出发站、到达站（车站名或城市名）、日期，可按车次类型、出发/到达时间段、最长历时、可预订、席别余票筛选，返回Markdown表格或JSON。",
        "inputSchema": {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "type": "object",
            "title": "车票查询参数",
            "properties": {
                "from_station": {"type": "string", "title": "出发站", "description": "车站或城市名称，例如：北京、上海虹桥、杭州市", "minLength": 1},
                "to_station": {"type": "string", "title": "到达站", "description": "车站或城市名称", "minLength": 1},
                "train_date": {"type": "string", "title": "出发日期", "description": "格式：YYYY-MM-DD", "pattern": "^\\d{4}-\\d{2}-\\d{2}$"},
                "train_type": {"type": "string", "title": "车次类型", "description": "车次首字母，可组合，如 GD"},
                "depart": {"type": "string", "title": "出发时间段", "description": "如 08:00-12:00、18:00-", "pattern": _TIME_RANGE_PATTERN},
                "arrive": {"type": "string", "title": "到达时间段", "description": "如 -18:00", "pattern": _TIME_RANGE_PATTERN},
                "max_duration": {"type": "string", "title": "最长历时", "description": "如 2h、90m、1h30m"},
                "available": {"type": "boolean", "title": "仅可预订", "default": False},
                "seat": {"type": "string", "title": "须有票的席别", "description": "逗号分隔：swz,zy,ze,rw,dw,yw,yz,wz"},
                "format": {"type": "string", "title": "输出格式", "enum": ["md", "json"], "default": "md"}
            },
            "required": ["from_station", "to_station", "train_date"],
            "additionalProperties": False
        }
    },
    {
        "name": "resolve-station",
        "description": "将车站名或城市名解析为12306车站及电报码，并列出同城全部车站。支持“杭州市”“上海站”等带后缀写法。",
        "inputSchema": {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "type": "object",
            "title": "车站解析参数",
            "properties": {
                "name": {"type": "string", "title": "车站或城市名称", "minLength": 1, "maxLength": 20}
            },
            "required": ["name"],
            "additionalProperties": False
        }
    },
    {
        "name": "get-current-time",
        "description": "获取当前日期时间及明天、后天日期，便于确定查询日期。",
        "inputSchema": {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "type": "object",
            "title": "获取当前时间参数",
            "properties": {
                "timezone": {"type": "string", "title": "时区", "default": "Asia/Shanghai"}
            },
            "additionalProperties": False
        }
    }
]

app = FastAPI(
    title="12306 Ticket Query",
    version=SERVER_VERSION,
    description="基于MCP协议(Streamable HTTP)的12306余票查询服务",
    debug=settings.debug
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)


@app.get("/")
async def root():
    return {
        "name": SERVER_NAME,
        "version": SERVER_VERSION,
        "status": "running",
        "mcp_endpoint": "/mcp",
        "protocol_version": MCP_PROTOCOL_VERSION,
        "stations_loaded": len(station_service.directory),
        "tools": [tool["name"] for tool in MCP_TOOLS],
        "active_sessions": len(connected_clients)
    }


@app.get("/health")
async def health():
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "stations": len(station_service.directory),
        "active_sessions": len(connected_clients)
    }


@app.options("/mcp")
async def mcp_options():
    """Handle CORS preflight for /mcp endpoint"""
    return JSONResponse(
        {},
        headers={
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": "POST, DELETE, OPTIONS",
            "Access-Control-Allow-Headers": "Content-Type, Authorization, Mcp-Session-Id",
        }
    )


def _rpc_error(request_id, code: int, message: str, status_code: int, data: Any = None) -> JSONResponse:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return JSONResponse({"jsonrpc": "2.0", "id": request_id, "error": error}, status_code=status_code)


@app.post("/mcp")
async def mcp_endpoint_post(request: Request):
    """MCP Streamable HTTP Endpoint - POST for JSON-RPC messages"""
    request_id = None
    try:
        data = await request.json()

        if not isinstance(data, dict) or data.get("jsonrpc") != "2.0":
            raise HTTPException(status_code=400, detail="Invalid JSON-RPC 2.0 message")

        method = data.get("method")
        params = data.get("params", {})
        request_id = data.get("id")

        if not method:
            raise HTTPException(status_code=400, detail="Method is required")

        logger.info(f"📨 Received MCP request: {method} (ID: {request_id})")

        if method == "initialize":
            client_protocol_version = params.get("protocolVersion") or MCP_PROTOCOL_VERSION
            session_id = str(uuid.uuid4())
            connected_clients[session_id] = {
                "connected_at": datetime.now().isoformat(),
                "user_agent": request.headers.get("user-agent", ""),
                "client_ip": request.client.host if request.client else "unknown",
                "initialized": False,
                "protocol_version": client_protocol_version
            }
            response = {
                "jsonrpc": "2.0",
                "id": request_id,
                "result": {
                    "protocolVersion": client_protocol_version,
                    "serverInfo": {
                        "name": SERVER_NAME,
                        "version": SERVER_VERSION,
                        "description": "12306余票查询服务，提供车票查询、车站解析功能"
                    },
                    "capabilities": {
                        "tools": {},
                        "logging": {}
                    }
                }
            }
            logger.info(f"✅ Initialize response sent - Protocol: {client_protocol_version}, Session: {session_id}")
            return JSONResponse(
                response,
                headers={
                    "Mcp-Session-Id": session_id,
                    "Access-Control-Allow-Origin": "*"
                }
            )

        # For all other methods, require session ID
        session_id = request.headers.get("mcp-session-id")
        if not session_id:
            logger.error("❌ Missing Mcp-Session-Id header for non-initialize request")
            return _rpc_error(request_id, -32000, "Bad Request: No valid session ID provided", 400)
        if session_id not in connected_clients:
            logger.error(f"❌ Invalid session ID: {session_id}")
            return _rpc_error(request_id, -32000, "Invalid session ID", 404)

        if method == "tools/list":
            return JSONResponse({"jsonrpc": "2.0", "id": request_id, "result": {"tools": MCP_TOOLS}})

        elif method == "tools/call":
            tool_name = params.get("name")
            arguments = params.get("arguments", {})
            if not tool_name:
                return _rpc_error(request_id, -32602, "Invalid params: tool name is required", 400)

            logger.info(f"🔧 Executing tool: {tool_name}")
            handler = TOOL_HANDLERS.get(tool_name)
            if handler is None:
                content = [{"type": "text", "text": f"❌ 未知工具: {tool_name}"}]
                is_error = True
            else:
                content, is_error = await handler(arguments)
            return JSONResponse({
                "jsonrpc": "2.0",
                "id": request_id,
                "result": {"content": content, "isError": is_error}
            })

        elif method.startswith("notifications/"):
            if method == "notifications/initialized":
                connected_clients[session_id]["initialized"] = True
                logger.info("🎉 Client initialized successfully - MCP handshake complete!")
            return Response(status_code=202)

        else:
            logger.warning(f"⚠️ Unknown method: {method}")
            return _rpc_error(request_id, -32601, "Method not found", 404, {"method": method})

    except json.JSONDecodeError:
        logger.error("❌ Invalid JSON in request")
        return _rpc_error(None, -32700, "Parse error", 400)
    except HTTPException as e:
        return _rpc_error(request_id, -32600, str(e.detail), e.status_code)


@app.delete("/mcp")
async def mcp_endpoint_delete(request: Request):
    """MCP Streamable HTTP Endpoint - DELETE for session termination"""
    session_id = request.headers.get("mcp-session-id")

    if not session_id:
        return JSONResponse({"error": "Missing Mcp-Session-Id header"}, status_code=400)

    if session_id in connected_clients:
        del connected_clients[session_id]
        logger.info(f"🗑️ Session terminated: {session_id}")
        return Response(status_code=200)
    return JSONResponse({"error": "Invalid session ID"}, status_code=404)


def _text(text: str, is_error: bool = False):
    return [{"type": "text", "text": text}], is_error


def _str_arg(args: dict, key: str) -> str:
    """工具参数统一转为去空白的字符串，缺省为空串"""
    value = args.get(key)
    return str(value).strip() if value is not None else ""


async def query_tickets_tool(args: dict):
    from_station = _str_arg(args, "from_station")
    to_station = _str_arg(args, "to_station")
    train_date = _str_arg(args, "train_date")
    logger.info(f"🔍 查询参数: {from_station} → {to_station} ({train_date})")
    errors = []
    if not from_station:
        errors.append("出发站不能为空")
    if not to_station:
        errors.append("到达站不能为空")
    if not train_date:
        errors.append("出发日期不能为空")
    elif not validate_date(train_date):
        errors.append("日期格式错误，请使用 YYYY-MM-DD 格式")
    try:
        criteria = FilterCriteria.from_options(
            train_type=_str_arg(args, "train_type") or None,
            depart=_str_arg(args, "depart") or None,
            arrive=_str_arg(args, "arrive") or None,
            max_duration=_str_arg(args, "max_duration") or None,
            available=bool(args.get("available", False)),
            seat=_str_arg(args, "seat") or None,
        )
    except ValueError as e:
        errors.append(f"筛选条件错误: {e}")
    fmt = _str_arg(args, "format") or "md"
    if fmt not in ("md", "json"):
        errors.append(f"不支持的输出格式: {fmt}")
    if errors:
        error_text = "❌ **参数验证失败:**\n" + "\n".join(f"{i+1}. {err}" for i, err in enumerate(errors))
        return _text(error_text, is_error=True)

    try:
        result = await ticket_service.search(
            from_station, to_station, train_date,
            criteria=criteria, directory=station_service.directory,
        )
    except Ticket12306Error as e:
        logger.error(f"❌ 查询车票失败: {e}")
        return _text(f"❌ **查询失败:** {e}", is_error=True)
    return _text(render(result, fmt))


async def resolve_station_tool(args: dict):
    name = _str_arg(args, "name")
    if not name:
        return _text("❌ 请输入车站或城市名称", is_error=True)
    station = resolve_station(station_service.directory, name)
    if station is None:
        return _text(f"❌ 未找到车站: {name}", is_error=True)
    text = f"🚉 **{station.name}** `({station.code})` 城市: {station.city}\n"
    siblings = station_service.city_stations_of(station)
    if len(siblings) > 1:
        text += f"\n{station.city}的全部车站:\n"
        text += "\n".join(f"- {s.name} `({s.code})`" for s in siblings)
    return _text(text)


async def get_current_time_tool(args: dict):
    timezone_str = args.get("timezone", settings.timezone)
    try:
        tz = pytz.timezone(timezone_str)
    except pytz.exceptions.UnknownTimeZoneError:
        tz = pytz.timezone(settings.timezone)
    now = datetime.now(tz)
    text = now.strftime("%Y-%m-%d %H:%M:%S") + f" {tz.zone}\n"
    text += f"明天: {get_relative_date(1, base=now)}\n后天: {get_relative_date(2, base=now)}"
    return _text(text)


TOOL_HANDLERS = {
    "query-tickets": query_tickets_tool,
    "resolve-station": resolve_station_tool,
    "get-current-time": get_current_time_tool,
}


async def load_station_directory(force_refresh: bool = False) -> StationDirectory:
    directory = await station_cache.load(force_refresh=force_refresh)
    station_service.directory = directory
    return directory


@app.on_event("startup")
async def startup_event():
    """应用启动时加载车站数据"""
    logger.info("📚 正在加载车站数据...")
    directory = await load_station_directory()
    logger.info(f"✅ 已加载 {len(directory)} 个车站")


async def main_server():
    """启动MCP服务器"""
    logger.info("🚀 启动12306余票查询服务...")
    logger.info(f"📡 MCP端点: http://{settings.server_host}:{settings.server_port}/mcp")
    logger.info(f"📚 健康检查: http://{settings.server_host}:{settings.server_port}/health")

    config = uvicorn.Config(
        app,
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower()
    )
    uvicorn_server = uvicorn.Server(config)
    await uvicorn_server.serve()


def main():
    asyncio.run(main_server())


if __name__ == "__main__":
    main()
