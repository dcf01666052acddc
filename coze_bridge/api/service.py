"""对外 API 服务模块。

提供与 HTTP 框架无关的函数接口：输入解析后的请求体，输出 (状态码, 响应体)。
"""

from typing import Any, Dict, Mapping, Optional, Tuple

from coze_bridge.agents.orchestrator import ConversationOrchestrator
from coze_bridge.domain.exceptions import ValidationError
from coze_bridge.domain.models import BridgeRequest, BridgeResponse
from coze_bridge.infrastructure.logging.logger import logger


_orchestrator: Optional[ConversationOrchestrator] = None


def get_default_orchestrator() -> ConversationOrchestrator:
    """获取默认编排器实例（单例，只持有配置，不持有请求状态）。"""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = ConversationOrchestrator()
    return _orchestrator


async def relay_chat(
    payload: Any,
    orchestrator: Optional[ConversationOrchestrator] = None,
) -> Tuple[int, Dict[str, Any]]:
    """处理一次中转请求。

    Args:
        payload: 已解析的 JSON 请求体；不是对象时按空请求处理。
        orchestrator: 编排器（可选，默认使用单例）。

    Returns:
        (HTTP 状态码, 响应体字典)
    """
    body: Mapping[str, Any] = payload if isinstance(payload, Mapping) else {}
    try:
        request = BridgeRequest.from_payload(body)
    except ValidationError as e:
        logger.warning(f"Rejected request: {e.message}", extra={"extra": {
            "missing": [k for k in ("token", "botId", "message") if not body.get(k)],
        }})
        return e.http_status, BridgeResponse.fail(e.message, http_status=e.http_status).to_dict()

    result = await (orchestrator or get_default_orchestrator()).relay(request)
    return (200 if result.success else result.http_status), result.to_dict()
