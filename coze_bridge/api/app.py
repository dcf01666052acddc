"""HTTP 入口。

单一端点，POST 中转一条消息，OPTIONS 用于浏览器预检。
所有响应（包括错误响应）都带固定的跨域头。
"""

import traceback
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from coze_bridge.api.service import relay_chat
from coze_bridge.config.settings import settings
from coze_bridge.infrastructure.logging.logger import logger


CHAT_PATHS = ("/api/coze", "/")


def cors_headers() -> Dict[str, str]:
    return {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Origin": settings.allow_origin,
        "Access-Control-Allow-Methods": "POST,OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }


app = FastAPI(
    title="Coze Bridge",
    description="Relay a message to a Coze bot, wait for the answer, return it.",
    version="1.0.0",
)


@app.middleware("http")
async def add_cors_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.update(cors_headers())
    return response


async def general_exception_handler(request: Request, exc: Exception):
    """兜底：未预期的异常同样返回 {success: false, error}。"""
    logger.error(
        f"Unhandled exception: {exc} for {request.method} {request.url.path}",
        extra={"extra": {"traceback": traceback.format_exc()}},
    )
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": f"internal error: {exc}"},
        headers=cors_headers(),
    )


app.add_exception_handler(Exception, general_exception_handler)


async def _read_body(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        # 空体或非法 JSON 一律按空请求处理，由参数校验返回 400
        return {}


async def chat(request: Request):
    payload = await _read_body(request)
    status_code, body = await relay_chat(payload)
    return JSONResponse(status_code=status_code, content=body)


async def preflight():
    return Response(status_code=200)


for _path in CHAT_PATHS:
    app.add_api_route(_path, chat, methods=["POST"])
    app.add_api_route(_path, preflight, methods=["OPTIONS"])
