"""Provider 响应归一化。"""

from typing import Any

from chat_core.domain.models import (
    UNKNOWN_ERROR_MESSAGE,
    ChatResponseError,
    ChatResponseSuccess,
    ChatResult,
)


def map_response(raw: Any) -> ChatResult:
    """将 Provider 响应变体映射为 {text, is_error}。

    优先级：
    1. 无响应或无法识别的结构 -> "Unknown error."
    2. 错误变体 -> error.message（缺失时同样为 "Unknown error."）
    3. 成功变体 -> 首个 choice 的内容去除首尾空白，缺失时为空串
    """

    if isinstance(raw, ChatResponseError):
        message = raw.error.message if raw.error is not None else None
        return ChatResult(text=message if message is not None else UNKNOWN_ERROR_MESSAGE, is_error=True)
    if isinstance(raw, ChatResponseSuccess):
        content = None
        if raw.choices:
            first = raw.choices[0].message
            if first is not None and first.content is not None:
                content = first.content.strip()
        return ChatResult(text=content or "", is_error=False)
    return ChatResult(text=UNKNOWN_ERROR_MESSAGE, is_error=True)
