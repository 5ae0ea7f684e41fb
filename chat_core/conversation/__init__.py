"""会话核心。

- prompt_builder: 转录 -> Provider 消息列表。
- response_mapper: Provider 响应 -> {text, is_error}。
- cancellation: 协作式取消句柄。
- controller: 单会话发送周期状态机。
- conversation: 会话聚合根。
"""

from chat_core.conversation.cancellation import CancellationToken
from chat_core.conversation.conversation import Conversation
from chat_core.conversation.prompt_builder import build_prompt
from chat_core.conversation.response_mapper import map_response

__all__ = ["CancellationToken", "Conversation", "build_prompt", "map_response"]
