"""对话后端抽象接口。

编排层不直接依赖 Coze 的 HTTP 细节，而是依赖此协议：

- create_chat: 发起对话，返回 ChatTask。
- retrieve_chat: 查询任务状态。
- list_messages: 获取任务的消息列表。

这样测试时可以换成内存实现，也便于以后接入其他同类后端。
"""

from typing import List, Optional, Protocol

from coze_bridge.domain.models import BotMessage, ChatTask


class ChatBackend(Protocol):
    """对话后端客户端协议。每个实例绑定一个调用方 token。"""

    name: str

    async def create_chat(
        self,
        bot_id: str,
        user_id: str,
        message: str,
        conversation_id: Optional[str] = None,
    ) -> ChatTask:
        ...

    async def retrieve_chat(self, conversation_id: str, chat_id: str) -> Optional[ChatTask]:
        """返回最新状态；响应里没有 data 时返回 None。"""

        ...

    async def list_messages(self, conversation_id: str, chat_id: str) -> List[BotMessage]:
        ...
