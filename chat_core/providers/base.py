"""外部协作者协议。

会话核心不直接依赖具体的 HTTP SDK 或系统剪贴板，而是依赖此处的协议：

- ChatTransport: 把 ChatRequest 发送给补全服务并返回 Provider 响应变体。
- ClipboardService: 复制消息文本。

协作者通过构造参数显式注入 Conversation，不从全局注册表解析。
"""

from typing import TYPE_CHECKING, Optional, Protocol

from chat_core.domain.models import ChatRequest, ProviderResponse

if TYPE_CHECKING:
    from chat_core.conversation.cancellation import CancellationToken


class ChatTransport(Protocol):
    """补全服务传输协议。

    实现者需要：
    - 观察 cancellation 信号，被取消时抛出 RequestCancelledError；
    - api_key 非空时仅在本次调用中使用该凭据，不修改任何全局状态；
    - 格式良好的错误响应以 ChatResponseError 返回，其余故障以异常抛出。
    """

    name: str

    async def send(
        self,
        request: ChatRequest,
        cancellation: "CancellationToken",
        api_key: Optional[str] = None,
    ) -> ProviderResponse:
        ...


class ClipboardService(Protocol):
    async def set_text(self, text: str) -> None:
        ...
