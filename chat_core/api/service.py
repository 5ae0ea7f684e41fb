"""对外 API 服务模块。

提供简化的函数接口供上层应用调用。
"""

from typing import Any, Dict, Optional

from chat_core.config.settings import settings
from chat_core.conversation.conversation import Conversation
from chat_core.domain.message import ChatMessage
from chat_core.domain.models import WELCOME_MESSAGE, ChatSettings
from chat_core.infrastructure.logging.logger import logger
from chat_core.providers import create_transport
from chat_core.providers.base import ChatTransport, ClipboardService


_transport: Optional[ChatTransport] = None


def get_default_transport() -> ChatTransport:
    """获取默认的 Transport 实例（单例）。"""
    global _transport
    if _transport is None:
        _transport = create_transport()
    return _transport


def default_chat_settings() -> ChatSettings:
    """按应用配置生成新会话的 ChatSettings。"""
    return ChatSettings(
        directions=settings.default_directions,
        temperature=settings.default_temperature,
        top_p=settings.default_top_p,
        max_tokens=settings.default_max_tokens,
        model=settings.default_model,
        format=settings.default_format,
    )


def create_conversation(
    name: Optional[str] = None,
    chat_settings: Optional[ChatSettings] = None,
    transport: Optional[ChatTransport] = None,
    clipboard: Optional[ClipboardService] = None,
) -> Conversation:
    """创建新会话：首条为欢迎语，其后是一个空的输入槽。

    Args:
        name: 会话名称（可选）
        chat_settings: 生成参数（可选，不提供则使用应用配置）
        transport: 补全服务（可选，不提供则使用默认单例）
        clipboard: 剪贴板服务（可选）
    """
    chat_settings = chat_settings or default_chat_settings()
    conv = Conversation(
        settings=chat_settings,
        name=name,
        transport=transport or get_default_transport(),
        clipboard=clipboard,
    )
    conv.add_message(ChatMessage(role="system", content=WELCOME_MESSAGE, is_sent=True, format=chat_settings.format))
    prompt_slot = conv.add_message(ChatMessage(role="user", content="", format=chat_settings.format))
    conv.current_message = prompt_slot
    return conv


async def ask(conversation: Conversation, user_input: str) -> Dict[str, Any]:
    """把用户输入填入当前输入槽并发送。

    Returns:
        包含是否成功、失败类型、助手回复与消息数量的字典
    """
    slot = conversation.current_message
    # 只复用未发送的 user 输入槽；被取消周期遗留的 assistant 占位消息保持原样
    if slot is None or slot.role != "user" or slot.is_sent or slot.is_awaiting:
        slot = conversation.add_message(
            ChatMessage(role="user", content="", format=conversation.settings.format if conversation.settings else None)
        )
        conversation.current_message = slot
    slot.content = user_input
    before = len(conversation.messages)
    result = await conversation.send(slot)

    reply = None
    for message in conversation.messages[before:]:
        if message.role == "assistant" and message.is_sent:
            reply = message
            break
    if not result.ok:
        logger.error(f"Chat failed: {result.failure}", extra={"extra": {
            "conversation": conversation.name,
            "failure": result.failure,
        }})
    return {
        "ok": result.ok,
        "failure": result.failure,
        "reply": reply.content if reply is not None else None,
        "is_error": reply.is_error if reply is not None else None,
        "message_count": len(conversation.messages),
    }
