"""把转录消息序列化为 Provider 请求所需的 role/content 列表。"""

from typing import List, Sequence

from chat_core.domain.message import ChatMessage
from chat_core.domain.models import WELCOME_MESSAGE, ChatPromptMessage, ChatSettings


def build_prompt(messages: Sequence[ChatMessage], settings: ChatSettings) -> List[ChatPromptMessage]:
    """按顺序输出全部消息。

    首条消息若仍是未编辑过的欢迎语，则以 settings.directions 作为内容，
    避免欢迎语被发送给 Provider；其余消息原样输出，不做删减或截断。
    """

    # TODO: 按模型上下文窗口裁剪历史消息（需要引入 token 计数）
    prompt: List[ChatPromptMessage] = []
    for i, message in enumerate(messages):
        content = message.content or ""
        if i == 0 and content == WELCOME_MESSAGE:
            content = settings.directions or ""
        prompt.append(ChatPromptMessage(role=message.role, content=content))
    return prompt
