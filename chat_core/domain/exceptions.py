"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于 RequestController 在发送周期内统一捕获并归一化为错误结果。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "NETWORK_ERROR"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 provider、model 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class NetworkError(BusinessError):
    """网络层错误，例如连接失败、超时等。"""


class ApiError(BusinessError):
    """Provider 返回无法解析为错误响应体的非 2xx 状态时抛出。"""


class RateLimitError(BusinessError):
    """Provider 限流错误（HTTP 429）。"""


class ValidationError(BusinessError):
    """参数或配置校验失败，例如缺少 API Key。"""


class RequestCancelledError(BusinessError):
    """请求在等待响应期间被取消。"""

    def __init__(self, message: str = "Request cancelled", **extra):
        super().__init__(code="REQUEST_CANCELLED", message=message, http_status=499, **extra)
