"""Coze Bridge 顶层包。

该包把一条用户消息中转给扣子（Coze）V3 对话 API，
包括配置加载、领域模型、后端适配、对话编排与 HTTP 入口等能力。
"""

from coze_bridge.agents.orchestrator import ConversationOrchestrator
from coze_bridge.domain.models import BridgeRequest, BridgeResponse

__all__ = ["BridgeRequest", "BridgeResponse", "ConversationOrchestrator"]
