"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在编排层或 API 层做统一捕获，并转换为 {success: false, error} 响应。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "SUBMISSION_FAILED"）。
        message: 用户可读错误信息，会原样放进响应的 error 字段。
        http_status: 映射到 HTTP 时使用的状态码，默认 400。
        extra: 其他补充字段（例如 conversation_id、chat_id 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class ValidationError(BusinessError):
    """请求参数校验失败（token/botId/message 缺失）。"""

    def __init__(self, message: str = "missing parameters", **extra):
        super().__init__(code="MISSING_PARAMETERS", message=message, http_status=400, **extra)


class SubmissionError(BusinessError):
    """发起对话被后端拒绝，或返回体缺少 data。"""

    def __init__(self, message: str, **extra):
        super().__init__(code="SUBMISSION_FAILED", message=message, http_status=500, **extra)


class ProcessingError(BusinessError):
    """后端报告任务 failed / canceled。"""

    def __init__(self, message: str, **extra):
        super().__init__(code="CHAT_FAILED", message=message, http_status=500, **extra)


class PollTimeoutError(BusinessError):
    """轮询次数用尽仍未 completed。"""

    def __init__(self, message: str, **extra):
        super().__init__(code="POLL_TIMEOUT", message=message, http_status=500, **extra)


class NotFoundError(BusinessError):
    """消息列表里没有 assistant 的 answer。"""

    def __init__(self, message: str = "assistant answer not found", **extra):
        super().__init__(code="ANSWER_NOT_FOUND", message=message, http_status=500, **extra)


class TransportError(BusinessError):
    """网络层错误或响应体无法解析，例如连接失败、超时、非 JSON 响应。"""

    def __init__(self, message: str, code: str = "NETWORK_ERROR", **extra):
        super().__init__(code=code, message=message, http_status=500, **extra)
