"""对话相关的统一数据模型。

本模块定义了会话核心在 Provider 之间共享的标准数据结构：

- ChatSettings: 一个会话的生成参数与系统提示词（directions）。
- ChatPromptMessage: 发给 Provider 的 role/content 对。
- ChatRequest: 一次完整的 chat/completions 请求体。
- ChatResponseSuccess / ChatResponseError: Provider 响应的两种变体。
- ChatResult: 经 ResponseMapper 归一化后的 {text, is_error} 结果。
- SendResult: Conversation.send 的返回值。

Transport 适配器（如 OpenAIChatTransport）只依赖这些模型，
并负责在厂商 JSON 与这些模型之间做转换。
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Literal, Optional, Union


# 消息角色（与 OpenAI chat/completions 的 role 字段对应）
Role = Literal["system", "user", "assistant"]

# 欢迎语：会话首条消息若从未被编辑，发送时会被替换为 directions
WELCOME_MESSAGE = "Hi! I'm Clippy, your Windows Assistant. Would you like to get some assistance?"
# 等待响应期间占位消息显示的文本
SENDING_MESSAGE = "Sending..."
UNKNOWN_ERROR_MESSAGE = "Unknown error."

TEXT_MESSAGE_FORMAT = "Text"
MARKDOWN_MESSAGE_FORMAT = "Markdown"

DEFAULT_DIRECTIONS = "You are a helpful assistant."
DEFAULT_MODEL = "gpt-3.5-turbo"


@dataclass
class ChatSettings:
    """会话级生成参数。

    - directions: 系统提示词，在首条消息为欢迎语时替换其内容。
    - api_key: 单次调用使用的凭据，为空时由 Transport 使用全局配置。
    - format: 渲染格式提示，核心逻辑不解释，只透传给新消息。
    """

    directions: str = DEFAULT_DIRECTIONS
    temperature: float = 0.7
    top_p: float = 1.0
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0
    max_tokens: int = 2000
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    format: str = MARKDOWN_MESSAGE_FORMAT

    def copy(self) -> "ChatSettings":
        return replace(self)


@dataclass(frozen=True)
class ChatPromptMessage:
    """Provider 请求中的单条消息。"""

    role: str
    content: str

    def to_payload(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class ChatRequest:
    """一次 chat/completions 请求。

    RequestController 根据 ChatSettings 与 PromptBuilder 的输出构造本结构，
    Transport 负责把它转换成具体 API 的 JSON 请求体。
    """

    model: str
    messages: List[ChatPromptMessage]
    temperature: float = 0.7
    max_tokens: Optional[int] = None
    top_p: float = 1.0
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0
    stop: Optional[List[str]] = None
    suffix: Optional[str] = None


@dataclass
class ChatUsage:
    """Provider 返回的 token 统计信息。"""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass
class ChatResponseMessage:
    role: Optional[str] = None
    content: Optional[str] = None


@dataclass
class ChatResponseChoice:
    index: int = 0
    message: Optional[ChatResponseMessage] = None
    finish_reason: Optional[str] = None


@dataclass
class ChatResponseSuccess:
    """Provider 正常返回的响应变体。"""

    choices: Optional[List[ChatResponseChoice]] = None
    usage: Optional[ChatUsage] = None
    raw: Optional[dict] = None


@dataclass
class ChatError:
    message: Optional[str] = None
    type: Optional[str] = None
    code: Optional[str] = None


@dataclass
class ChatResponseError:
    """Provider 返回的格式良好的错误响应变体。"""

    error: Optional[ChatError] = None
    raw: Optional[dict] = None


ProviderResponse = Union[ChatResponseSuccess, ChatResponseError]


@dataclass(frozen=True)
class ChatResult:
    """一次响应经归一化后的结果，直接写回占位消息。"""

    text: str
    is_error: bool


FailureKind = Literal["validation", "busy", "error", "cancelled", "unknown"]


@dataclass(frozen=True)
class SendResult:
    """Conversation.send 的返回值，bool(result) 等价于 result.ok。"""

    ok: bool
    failure: Optional[FailureKind] = None
    detail: Dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, **detail: Any) -> "SendResult":
        return cls(ok=True, detail=detail)

    @classmethod
    def failed(cls, failure: FailureKind, **detail: Any) -> "SendResult":
        return cls(ok=False, failure=failure, detail=detail)
