"""对话编排模块。

一次中转分三步顺序执行：发起对话 -> 轮询状态 -> 获取回复。
编排器本身无状态，多轮会话的连续性由调用方回传 conversationId 维持。
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional
from uuid import uuid4

from coze_bridge.config.settings import settings
from coze_bridge.domain.exceptions import BusinessError, NotFoundError, PollTimeoutError, ProcessingError
from coze_bridge.domain.models import BotMessage, BridgeRequest, BridgeResponse, ChatTask
from coze_bridge.infrastructure.logging.logger import logger
from coze_bridge.providers import create_backend
from coze_bridge.providers.base import ChatBackend


BackendFactory = Callable[[str], ChatBackend]
Sleeper = Callable[[float], Awaitable[Any]]


@dataclass
class OrchestratorConfig:
    poll_interval: float = 1.0  # 两次状态查询之间的间隔（秒）
    max_poll_attempts: int = 15  # 受调用方请求时长上限约束
    default_user_id: str = "user_001"

    @classmethod
    def from_settings(cls, cfg=settings) -> "OrchestratorConfig":
        return cls(
            poll_interval=cfg.poll_interval,
            max_poll_attempts=cfg.max_poll_attempts,
            default_user_id=cfg.default_user_id,
        )


class ConversationOrchestrator:
    def __init__(
        self,
        backend_factory: Optional[BackendFactory] = None,
        config: Optional[OrchestratorConfig] = None,
        sleep: Optional[Sleeper] = None,
    ):
        self._backend_factory = backend_factory or create_backend
        self._config = config or OrchestratorConfig.from_settings()
        self._sleep = sleep or asyncio.sleep

    async def relay(self, request: BridgeRequest) -> BridgeResponse:
        """执行一次完整中转，任何业务异常都会被转换为失败响应。"""

        start_time = time.time()
        log_ctx: Dict[str, Any] = {
            "trace_id": f"tr-{uuid4().hex}",
            "bot_id": request.bot_id,
        }
        if request.conversation_id:
            log_ctx["conversation_id"] = request.conversation_id

        try:
            backend = self._backend_factory(request.token)
            task = await self._submit(backend, request, log_ctx)
            await self._wait_until_completed(backend, task, log_ctx)
            reply = await self._fetch_reply(backend, task, log_ctx)
        except BusinessError as e:
            self._log(
                logging.ERROR,
                f"Coze relay failed: {e.message}",
                log_ctx,
                code=e.code,
                elapsed_seconds=round(time.time() - start_time, 2),
            )
            return BridgeResponse.fail(e.message, http_status=e.http_status)

        self._log(
            logging.INFO,
            "Coze relay completed",
            log_ctx,
            elapsed_seconds=round(time.time() - start_time, 2),
        )
        return BridgeResponse.ok(reply, task.conversation_id)

    async def _submit(self, backend: ChatBackend, request: BridgeRequest, log_ctx: Dict[str, Any]) -> ChatTask:
        self._log(logging.INFO, "Submitting chat", log_ctx)
        task = await backend.create_chat(
            bot_id=request.bot_id,
            user_id=request.user_id or self._config.default_user_id,
            message=request.message,
            conversation_id=request.conversation_id,
        )
        log_ctx["conversation_id"] = task.conversation_id
        log_ctx["chat_id"] = task.chat_id
        self._log(logging.INFO, "Chat created, polling status", log_ctx)
        return task

    async def _wait_until_completed(self, backend: ChatBackend, task: ChatTask, log_ctx: Dict[str, Any]) -> None:
        attempts = self._config.max_poll_attempts
        for attempt in range(1, attempts + 1):
            await self._sleep(self._config.poll_interval)
            latest = await backend.retrieve_chat(task.conversation_id, task.chat_id)
            if latest is None:
                self._log(logging.WARNING, "Status response without data", log_ctx, attempt=attempt)
                continue
            task.status = latest.status
            self._log(logging.INFO, "Polled status", log_ctx, attempt=attempt, status=task.status)
            if task.is_failed:
                raise ProcessingError(f"chat task failed or canceled (status={task.status})")
            if task.is_completed:
                return
        raise PollTimeoutError(f"chat polling timeout after {attempts} attempts, please retry")

    async def _fetch_reply(self, backend: ChatBackend, task: ChatTask, log_ctx: Dict[str, Any]) -> str:
        messages = await backend.list_messages(task.conversation_id, task.chat_id)
        answer = select_answer(messages)
        if answer is None:
            self._log(logging.WARNING, "No assistant answer in message list", log_ctx, message_count=len(messages))
            raise NotFoundError()
        return answer.content

    @staticmethod
    def _log(level: int, message: str, log_ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})


def select_answer(messages: List[BotMessage]) -> Optional[BotMessage]:
    """返回第一条 role=assistant 且 type=answer 的消息。"""

    for m in messages:
        if m.is_answer:
            return m
    return None
