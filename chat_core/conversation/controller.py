"""发送周期控制器。

一次发送周期的状态流转：

    Idle -> Validating -> AwaitingResponse -> Resolved -> Idle
                               |
                               +-> Cancelled

- Validating: 校验 settings 与输入文本，通过后锁定会话（enabled=False）
  并把待发送消息标记为已发送。
- AwaitingResponse: 构建 prompt，追加 assistant 占位消息，携带取消句柄调用
  Transport。only_add_message=True 时跳过本阶段。
- Resolved: 把归一化结果写回占位消息，追加新的空 user 输入槽。
- Cancelled: 占位消息保持等待状态留在转录中，不追加输入槽。

无论哪条路径，返回前都会恢复 enabled=True，异常不会逃逸出发送周期。
"""

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import uuid4

from chat_core.conversation.cancellation import CancellationToken
from chat_core.conversation.prompt_builder import build_prompt
from chat_core.conversation.response_mapper import map_response
from chat_core.domain.exceptions import RequestCancelledError
from chat_core.domain.message import ChatMessage
from chat_core.domain.models import (
    SENDING_MESSAGE,
    TEXT_MESSAGE_FORMAT,
    ChatPromptMessage,
    ChatRequest,
    ChatResponseSuccess,
    ChatResult,
    ChatSettings,
    ProviderResponse,
    SendResult,
)
from chat_core.infrastructure.logging.logger import logger
from chat_core.providers.base import ChatTransport

if TYPE_CHECKING:
    from chat_core.conversation.conversation import Conversation


class RequestController:
    """编排单个会话的发送周期，并持有在途请求的取消句柄。"""

    def __init__(self, conversation: "Conversation", transport: Optional[ChatTransport] = None):
        self._conversation = conversation
        self._transport = transport
        self._lock = asyncio.Lock()
        self._pending: Optional[CancellationToken] = None
        self._awaiting: Optional[ChatMessage] = None

    @property
    def transport(self) -> Optional[ChatTransport]:
        return self._transport

    @property
    def pending_cancellation(self) -> Optional[CancellationToken]:
        return self._pending

    @property
    def awaiting_message(self) -> Optional[ChatMessage]:
        """当前在途请求对应的占位消息。"""

        return self._awaiting

    @property
    def is_busy(self) -> bool:
        return self._lock.locked()

    def cancel(self) -> bool:
        """请求取消在途调用；没有在途调用时什么也不做。"""

        token = self._pending
        if token is None:
            return False
        token.cancel()
        logger.info("Cancellation requested", extra={"extra": {"conversation": self._conversation.name}})
        return True

    async def send(self, message: ChatMessage, only_add_message: bool = False) -> SendResult:
        # 同一会话同一时间只允许一个发送周期
        if self._lock.locked():
            self._log(logging.WARNING, "Send rejected, another send is in flight", {})
            return SendResult.failed("busy")
        async with self._lock:
            return await self._run_cycle(message, only_add_message)

    async def _run_cycle(self, message: ChatMessage, only_add_message: bool) -> SendResult:
        conv = self._conversation
        settings = conv.settings
        log_ctx: Dict[str, Any] = {
            "trace_id": f"tr-{uuid4().hex}",
            "conversation": conv.name,
        }

        if settings is None:
            self._log(logging.WARNING, "Send rejected, conversation has no settings", log_ctx)
            return SendResult.failed("validation", reason="missing_settings")
        if not message.content and not only_add_message:
            self._log(logging.INFO, "Send rejected, message is empty", log_ctx)
            return SendResult.failed("validation", reason="empty_message")

        start_time = time.time()
        conv.enabled = False
        result = SendResult.success()
        try:
            message.can_remove = True
            message.is_sent = True

            cancelled = False
            if not only_add_message:
                prompt = build_prompt(conv.messages, settings)
                token = CancellationToken()
                self._pending = token
                try:
                    resolved = await self._resolve(prompt, settings, token, log_ctx)
                finally:
                    cancelled = token.is_cancellation_requested
                    self._pending = None
                    self._awaiting = None
                if cancelled:
                    result = SendResult.failed("cancelled")
                elif resolved.is_error:
                    result = SendResult.failed("error", message=resolved.text)

            if not cancelled:
                next_message = ChatMessage(
                    role="user",
                    content="",
                    is_sent=False,
                    can_remove=True,
                    format=settings.format,
                )
                conv.add_message(next_message)
                conv.current_message = next_message
        except Exception:
            logger.exception("Send cycle failed", extra={"extra": log_ctx})
            result = SendResult.failed("unknown")
        finally:
            conv.enabled = True

        self._log(
            logging.INFO,
            "Completed send cycle",
            log_ctx,
            ok=result.ok,
            failure=result.failure,
            only_add_message=only_add_message,
            elapsed_seconds=round(time.time() - start_time, 2),
        )
        return result

    async def _resolve(
        self,
        prompt: List[ChatPromptMessage],
        settings: ChatSettings,
        token: CancellationToken,
        log_ctx: Dict[str, Any],
    ) -> ChatResult:
        """追加等待占位消息、调用 Transport 并写回结果。"""

        conv = self._conversation
        # 被取消的周期会遗留 is_awaiting 的占位消息，新周期开始前清除其等待标记
        for stale in conv.messages:
            if stale.is_awaiting:
                stale.is_awaiting = False

        placeholder = ChatMessage(
            role="assistant",
            content=SENDING_MESSAGE,
            is_sent=False,
            can_remove=True,
            is_awaiting=True,
            format=TEXT_MESSAGE_FORMAT,
        )
        conv.add_message(placeholder)
        conv.current_message = placeholder
        self._awaiting = placeholder

        request = ChatRequest(
            model=settings.model,
            messages=prompt,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            top_p=settings.top_p,
            presence_penalty=settings.presence_penalty,
            frequency_penalty=settings.frequency_penalty,
            stop=None,
            suffix=None,
        )
        self._log(
            logging.INFO,
            "Calling transport",
            log_ctx,
            model=settings.model,
            message_count=len(prompt),
        )

        response: Optional[ProviderResponse] = None
        try:
            response = await self._call_transport(request, settings, token, log_ctx)
        except RequestCancelledError:
            token.cancel()

        if token.is_cancellation_requested:
            self._log(logging.INFO, "Send cycle cancelled", log_ctx)
            return ChatResult(text=placeholder.content, is_error=True)

        resolved = map_response(response)
        placeholder.content = resolved.text
        placeholder.is_error = resolved.is_error
        placeholder.format = settings.format
        placeholder.is_awaiting = False
        placeholder.is_sent = True
        return resolved

    async def _call_transport(
        self,
        request: ChatRequest,
        settings: ChatSettings,
        token: CancellationToken,
        log_ctx: Dict[str, Any],
    ) -> Optional[ProviderResponse]:
        if self._transport is None:
            self._log(logging.WARNING, "No chat transport configured", log_ctx)
            return None
        try:
            response = await self._transport.send(request, token, api_key=settings.api_key or None)
        except RequestCancelledError:
            raise
        except Exception as e:
            # 网络错误、限流、未知异常统一归一化为 "Unknown error."
            self._log(
                logging.ERROR,
                "Transport call failed",
                log_ctx,
                error=str(e),
                error_type=type(e).__name__,
                code=getattr(e, "code", None),
            )
            return None
        if isinstance(response, ChatResponseSuccess) and response.usage is not None:
            self._log(
                logging.INFO,
                "Token usage",
                log_ctx,
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            )
        return response

    @staticmethod
    def _log(level: int, message: str, log_ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})
