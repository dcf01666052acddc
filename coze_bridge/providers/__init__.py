"""对话后端集成层。

该包下的模块负责：
- 定义后端抽象接口 (base)。
- 维护区域端点配置 (registry)。
- 提供 Coze V3 的具体实现 (coze_client)。
"""

from typing import Optional

from coze_bridge.config.settings import settings
from coze_bridge.providers.base import ChatBackend
from coze_bridge.providers.coze_client import CozeClient


def create_backend(token: str, cfg: Optional[object] = None) -> ChatBackend:
    """用调用方 token 创建后端客户端，默认读取全局配置。"""

    return CozeClient(token, cfg or settings)


__all__ = ["ChatBackend", "CozeClient", "create_backend"]
