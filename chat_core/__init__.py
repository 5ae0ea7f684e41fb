"""Chat Core 顶层包。

该包提供对话客户端的核心控制器：维护有序的消息转录，保证同一会话
同一时间只有一个在途请求，从历史构造 Provider 请求，并把成功或失败的
响应归一化后写回转录。渲染、持久化与剪贴板等均通过协议注入。
"""

from chat_core.conversation import Conversation
from chat_core.domain.message import ChatMessage
from chat_core.domain.models import ChatSettings, SendResult

__all__ = ["ChatMessage", "ChatSettings", "Conversation", "SendResult"]
