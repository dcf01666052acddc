"""领域层模型与异常。

包含：
- models: BridgeRequest / ChatTask / BotMessage / BridgeResponse。
- exceptions: 业务异常类型定义。
"""
