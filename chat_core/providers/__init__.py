"""补全服务集成层。

该包下的模块负责：
- 定义 Transport / Clipboard 协议 (base)。
- 维护 Provider 与模型配置 (registry)。
- 提供具体实现 (openai_transport)。
"""

from typing import Optional

from chat_core.config.settings import settings
from chat_core.providers.base import ChatTransport, ClipboardService
from chat_core.providers.openai_transport import OpenAIChatTransport
from chat_core.providers.registry import get_provider_config


def create_transport(name: Optional[str] = None) -> ChatTransport:
    """根据名称创建 Transport 实例，默认取配置中的 provider。"""

    provider_name = (name or getattr(settings, "default_provider", "openai")).lower()
    # 未知名称直接抛出 KeyError
    provider_config = get_provider_config(provider_name)
    return OpenAIChatTransport(settings, provider_config=provider_config)


__all__ = ["ChatTransport", "ClipboardService", "OpenAIChatTransport", "create_transport"]
