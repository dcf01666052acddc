"""Coze V3 对话 API 适配器。

本模块负责：

1. 把一次中转请求转换为 Coze V3 的三个 HTTP 调用：
   - POST {base}/chat                发起对话（非流式，自动保存历史）
   - GET  {base}/chat/retrieve       查询任务状态
   - GET  {base}/chat/message/list   获取任务消息
2. 处理网络异常与无法解析的响应。
3. 将响应 JSON 解析为统一的 ChatTask / BotMessage 结构。

认证: Authorization: Bearer <token>，token 由调用方逐请求提供。
"""

import json
from typing import Any, Dict, List, Optional

import httpx

from coze_bridge.config.settings import settings
from coze_bridge.domain.exceptions import SubmissionError, TransportError
from coze_bridge.domain.models import BotMessage, ChatTask
from coze_bridge.providers.registry import resolve_base_url


class CozeClient:
    """Coze 对话后端客户端实现。

    - name: 后端名称（供日志使用）。
    - 每个实例只绑定一个 token，不在实例之间共享状态。
    """

    name = "coze"

    def __init__(self, token: str, cfg=settings):
        self._token = token
        self._settings = cfg
        self._base = resolve_base_url(
            getattr(cfg, "coze_region", "cn"),
            getattr(cfg, "coze_base_url", None),
        )

    @property
    def base_url(self) -> str:
        return self._base

    # ---- 发起对话 ----

    async def create_chat(
        self,
        bot_id: str,
        user_id: str,
        message: str,
        conversation_id: Optional[str] = None,
    ) -> ChatTask:
        payload = self._build_chat_payload(bot_id, user_id, message, conversation_id)
        # Coze 官方文档把 conversation_id 放在 query 上，body 里同样携带
        params = {"conversation_id": conversation_id} if conversation_id else None
        body = await self._request("POST", "/chat", json=payload, params=params)
        data = body.get("data")
        if body.get("code") != 0 or not isinstance(data, dict):
            detail = body.get("msg") or json.dumps(body, ensure_ascii=False)
            raise SubmissionError(f"chat submission failed: {detail}", backend_code=body.get("code"))
        chat_id = data.get("id")
        conv_id = data.get("conversation_id")
        if not chat_id or not conv_id:
            raise SubmissionError(
                "chat submission failed: response is missing chat id or conversation id",
                backend_code=body.get("code"),
            )
        return ChatTask(conversation_id=conv_id, chat_id=chat_id, status=data.get("status") or "created")

    # ---- 查询状态 ----

    async def retrieve_chat(self, conversation_id: str, chat_id: str) -> Optional[ChatTask]:
        body = await self._request(
            "GET",
            "/chat/retrieve",
            params={"conversation_id": conversation_id, "chat_id": chat_id},
        )
        data = body.get("data")
        if not isinstance(data, dict):
            return None
        return ChatTask(
            conversation_id=data.get("conversation_id") or conversation_id,
            chat_id=data.get("id") or chat_id,
            status=data.get("status") or "created",
        )

    # ---- 获取消息 ----

    async def list_messages(self, conversation_id: str, chat_id: str) -> List[BotMessage]:
        body = await self._request(
            "GET",
            "/chat/message/list",
            params={"conversation_id": conversation_id, "chat_id": chat_id},
        )
        data = body.get("data")
        if not isinstance(data, list):
            return []
        return [self._parse_message(item) for item in data if isinstance(item, dict)]

    # ---- 辅助方法 ----

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = await client.request(method, f"{self._base}{path}", headers=self._headers(), **kwargs)
        except httpx.RequestError as e:
            # DNS 失败、连接超时等
            raise TransportError(f"network error: {e}")
        try:
            body = resp.json()
        except ValueError:
            raise TransportError(
                f"network error: unreadable response from Coze (HTTP {resp.status_code})",
                code="BAD_RESPONSE",
            )
        if not isinstance(body, dict):
            raise TransportError(
                f"network error: unexpected response from Coze (HTTP {resp.status_code})",
                code="BAD_RESPONSE",
            )
        return body

    @staticmethod
    def _build_chat_payload(
        bot_id: str,
        user_id: str,
        message: str,
        conversation_id: Optional[str],
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "bot_id": bot_id,
            "user_id": user_id,
            "stream": False,
            "auto_save_history": True,
            "additional_messages": [
                {
                    "role": "user",
                    "content": message,
                    "content_type": "text",
                }
            ],
        }
        if conversation_id:
            payload["conversation_id"] = conversation_id
        return payload

    @staticmethod
    def _parse_message(item: Dict[str, Any]) -> BotMessage:
        return BotMessage(
            role=item.get("role") or "",
            type=item.get("type") or "",
            content=item.get("content") or "",
            content_type=item.get("content_type"),
            id=item.get("id"),
        )
