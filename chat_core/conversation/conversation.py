"""会话聚合根。

Conversation 维护有序的消息转录、当前消息指针与 enabled 标志，
对外暴露 send / cancel / remove / copy_message / copy 等操作，
发送周期委托给 RequestController 完成。
"""

from typing import Iterable, Optional, Tuple

from chat_core.conversation.cancellation import CancellationToken
from chat_core.conversation.controller import RequestController
from chat_core.domain.message import ChatMessage
from chat_core.domain.models import (
    DEFAULT_DIRECTIONS,
    DEFAULT_MODEL,
    MARKDOWN_MESSAGE_FORMAT,
    ChatSettings,
    Role,
    SendResult,
)
from chat_core.domain.observable import Observable
from chat_core.infrastructure.logging.logger import logger
from chat_core.providers.base import ChatTransport, ClipboardService


class Conversation(Observable):
    """一次对话。

    - messages: 有序转录，下标 0 为系统提示/欢迎语槽位。
    - current_message: 最近与 UI 相关的消息，始终是 messages 的成员或 None。
    - enabled: 发送周期进行中为 False。
    - transport / clipboard: 显式注入的外部协作者。

    除字段变化外，消息列表增删时会以字段名 "messages" 通知监听器。
    """

    _observed_fields = frozenset({"name", "settings", "current_message", "enabled"})

    def __init__(
        self,
        settings: Optional[ChatSettings] = None,
        messages: Optional[Iterable[ChatMessage]] = None,
        name: Optional[str] = None,
        transport: Optional[ChatTransport] = None,
        clipboard: Optional[ClipboardService] = None,
    ):
        self.name = name
        self.settings = settings
        self._messages = list(messages or [])
        self.current_message: Optional[ChatMessage] = None
        self.enabled = True
        self._clipboard = clipboard
        self._controller = RequestController(self, transport)

    @classmethod
    def create(
        cls,
        directions: str = DEFAULT_DIRECTIONS,
        temperature: float = 0.7,
        top_p: float = 1.0,
        presence_penalty: float = 0.0,
        frequency_penalty: float = 0.0,
        max_tokens: int = 2000,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        format: str = MARKDOWN_MESSAGE_FORMAT,
        **kwargs,
    ) -> "Conversation":
        """按生成参数直接构造会话。"""

        settings = ChatSettings(
            directions=directions,
            temperature=temperature,
            top_p=top_p,
            presence_penalty=presence_penalty,
            frequency_penalty=frequency_penalty,
            max_tokens=max_tokens,
            api_key=api_key,
            model=model,
            format=format,
        )
        return cls(settings=settings, **kwargs)

    # ---- 状态 ----

    @property
    def messages(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._messages)

    @property
    def pending_cancellation(self) -> Optional[CancellationToken]:
        return self._controller.pending_cancellation

    @property
    def is_busy(self) -> bool:
        return self._controller.is_busy

    @property
    def transport(self) -> Optional[ChatTransport]:
        return self._controller.transport

    @property
    def clipboard(self) -> Optional[ClipboardService]:
        return self._clipboard

    # ---- 消息构造 ----

    def add_message(self, message: ChatMessage) -> ChatMessage:
        self._messages.append(message)
        self._notify_messages()
        return message

    def add_system_message(self, content: Optional[str]) -> "Conversation":
        return self._add(role="system", content=content)

    def add_user_message(self, content: Optional[str]) -> "Conversation":
        return self._add(role="user", content=content)

    def add_assistant_message(self, content: Optional[str]) -> "Conversation":
        return self._add(role="assistant", content=content)

    def _add(self, role: Role, content: Optional[str]) -> "Conversation":
        self.add_message(ChatMessage(role=role, content=content or ""))
        return self

    # ---- 操作 ----

    async def send(self, message: ChatMessage, only_add_message: bool = False) -> SendResult:
        """执行一次发送周期，详见 RequestController。"""

        return await self._controller.send(message, only_add_message)

    async def send_message(self, message: ChatMessage) -> SendResult:
        """消息级发送动作。

        总是退出编辑态；已发送的消息只提交编辑结果，不发起新的请求。
        """

        message.is_editing = False
        if message.is_sent:
            return SendResult.success(committed_edit=True)
        return await self.send(message)

    def cancel(self) -> bool:
        return self._controller.cancel()

    def close(self) -> None:
        self.cancel()

    def remove(self, message: ChatMessage) -> bool:
        """删除一条可删除的消息。

        删除在途的等待消息前会先请求取消；删除后若只剩一条消息，
        它重新成为不可删除、未发送的输入槽。
        """

        if not message.can_remove:
            return False

        if message.is_awaiting and message is self._controller.awaiting_message:
            try:
                self.cancel()
            except Exception:
                logger.warning(
                    "Failed to cancel request for removed message",
                    exc_info=True,
                    extra={"extra": {"conversation": self.name}},
                )

        index = self._index_of(message)
        if index is None:
            return False
        del self._messages[index]
        self._notify_messages()

        if self.current_message is message:
            self.current_message = self._messages[-1] if self._messages else None

        if len(self._messages) == 1:
            last = self._messages[0]
            last.can_remove = False
            last.is_sent = False
        return True

    async def copy_message(self, message: ChatMessage) -> bool:
        """把消息文本复制到剪贴板。"""

        if self._clipboard is None or message.content is None:
            return False
        await self._clipboard.set_text(message.content)
        return True

    def copy(self) -> "Conversation":
        """克隆会话：设置与消息均为独立副本，current_message 指向克隆序列。"""

        messages = []
        current = None
        for message in self._messages:
            message_copy = message.clone()
            messages.append(message_copy)
            if message is self.current_message:
                current = message_copy

        clone = Conversation(
            settings=self.settings.copy() if self.settings is not None else None,
            messages=messages,
            name=self.name,
            transport=self.transport,
            clipboard=self._clipboard,
        )
        clone.current_message = current
        return clone

    def _index_of(self, message: ChatMessage) -> Optional[int]:
        for i, item in enumerate(self._messages):
            if item is message:
                return i
        return None

    def _notify_messages(self) -> None:
        self._notify("messages", None, self.messages)
