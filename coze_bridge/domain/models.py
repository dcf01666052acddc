"""中转服务的数据模型。

本模块定义编排层与 Provider 之间共享的标准数据结构：

- BridgeRequest: 调用方传入的一次中转请求。
- ChatTask: 后端的一次对话任务（conversation_id + chat_id + status）。
- BotMessage: 任务产生的一条消息。
- BridgeResponse: 返回给调用方的统一结果。

Provider 适配器（如 CozeClient）负责在 Coze 的 JSON 与这些模型之间做转换。
"""

from dataclasses import dataclass
from typing import Any, Dict, Literal, Mapping, Optional

from coze_bridge.domain.exceptions import ValidationError


# Coze 对话任务状态
ChatStatus = Literal["created", "in_progress", "completed", "failed", "requires_action", "canceled"]

TERMINAL_FAILURE_STATUSES = frozenset({"failed", "canceled"})


def _clean_str(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


@dataclass
class BridgeRequest:
    """一次中转请求。

    - token: Coze 个人访问令牌，逐请求透传，不在服务端保存。
    - bot_id: 目标 Bot 标识。
    - message: 用户输入的文本。
    - user_id: 为空时由编排层补默认值。
    - conversation_id: 传入则在该会话中继续对话。
    """

    token: str
    bot_id: str
    message: str
    user_id: Optional[str] = None
    conversation_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "BridgeRequest":
        """从请求体（camelCase 字段）构造，缺少必填字段时抛出 ValidationError。"""

        token = _clean_str(payload.get("token"))
        bot_id = _clean_str(payload.get("botId"))
        # message 保留原文，只用 strip 判断是否为空
        message = payload.get("message")
        if not token or not bot_id or not _clean_str(message):
            raise ValidationError()
        return cls(
            token=token,
            bot_id=bot_id,
            message=message,
            user_id=_clean_str(payload.get("userId")),
            conversation_id=_clean_str(payload.get("conversationId")),
        )


@dataclass
class ChatTask:
    """后端对话任务，由 (conversation_id, chat_id) 唯一确定。"""

    conversation_id: str
    chat_id: str
    status: str = "created"

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"

    @property
    def is_failed(self) -> bool:
        return self.status in TERMINAL_FAILURE_STATUSES


@dataclass
class BotMessage:
    """任务中的一条消息（role 为 user/assistant，type 如 answer/verbose/follow_up）。"""

    role: str
    type: str
    content: str
    content_type: Optional[str] = None
    id: Optional[str] = None

    @property
    def is_answer(self) -> bool:
        return self.role == "assistant" and self.type == "answer"


@dataclass
class BridgeResponse:
    """返回给调用方的结果。http_status 只用于 HTTP 层，不进入响应体。"""

    success: bool
    reply: Optional[str] = None
    conversation_id: Optional[str] = None
    error: Optional[str] = None
    http_status: int = 200

    @classmethod
    def ok(cls, reply: str, conversation_id: Optional[str]) -> "BridgeResponse":
        return cls(success=True, reply=reply, conversation_id=conversation_id)

    @classmethod
    def fail(cls, error: str, http_status: int = 500) -> "BridgeResponse":
        return cls(success=False, error=error, http_status=http_status)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": self.success}
        if self.reply is not None:
            body["reply"] = self.reply
        if self.conversation_id is not None:
            body["conversationId"] = self.conversation_id
        if self.error is not None:
            body["error"] = self.error
        return body
