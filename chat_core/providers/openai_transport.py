"""OpenAI 兼容 chat/completions Transport。

本模块负责：

1. 接收统一的 ChatRequest。
2. 将其转换为 chat/completions 的 HTTP 请求体。
3. 以异步方式调用 HTTP 接口，同时观察取消信号。
4. 将响应 JSON 解析为 ChatResponseSuccess / ChatResponseError。

凭据优先使用单次调用传入的 api_key，其次使用全局配置，不修改环境变量。
"""

import asyncio
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import httpx

from chat_core.domain.exceptions import (
    ApiError,
    NetworkError,
    RateLimitError,
    RequestCancelledError,
    ValidationError,
)
from chat_core.domain.models import (
    ChatError,
    ChatRequest,
    ChatResponseChoice,
    ChatResponseError,
    ChatResponseMessage,
    ChatResponseSuccess,
    ChatUsage,
    ProviderResponse,
)
from chat_core.infrastructure.logging.logger import logger
from chat_core.providers.registry import OPENAI_CONFIG, ProviderConfig

if TYPE_CHECKING:
    from chat_core.conversation.cancellation import CancellationToken


class OpenAIChatTransport:
    """OpenAI 兼容接口的 Transport 实现。

    - name: Provider 名称（供日志/调试使用）。
    - send: 对外统一调用入口，返回 Provider 响应变体。
    """

    name = "openai"

    def __init__(
        self,
        settings,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        provider_config: ProviderConfig = OPENAI_CONFIG,
    ):
        # Settings 里包含 base_url、api_key、超时等配置
        self._settings = settings
        self._provider_config = provider_config
        # 测试时可注入 httpx.MockTransport
        self._http_transport = http_transport

    async def send(
        self,
        request: ChatRequest,
        cancellation: "CancellationToken",
        api_key: Optional[str] = None,
    ) -> ProviderResponse:
        """执行一次非流式补全调用。

        步骤：
        1. 解析凭据，缺失时抛出 ValidationError。
        2. 构造 HTTP 请求 payload。
        3. 与取消信号竞争等待响应，被取消时抛出 RequestCancelledError。
        4. 区分错误响应体、限流、其他 HTTP 错误并解析结果。
        """

        key = api_key or getattr(self._settings, "openai_api_key", None)
        if not key:
            raise ValidationError(code="MISSING_API_KEY", message="OPENAI_API_KEY not set")
        cancellation.raise_if_cancellation_requested()

        payload = self._build_payload(request)
        base = getattr(self._settings, "openai_base_url", None) or self._provider_config.base_url
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.http_timeout,
                trust_env=False,
                transport=self._http_transport,
            ) as client:
                post = asyncio.ensure_future(
                    client.post(
                        f"{base}/chat/completions",
                        json=payload,
                        headers={
                            "Authorization": f"Bearer {key}",
                            "Content-Type": "application/json",
                        },
                    )
                )
                cancelled = asyncio.ensure_future(cancellation.wait())
                try:
                    await asyncio.wait({post, cancelled}, return_when=asyncio.FIRST_COMPLETED)
                finally:
                    cancelled.cancel()
                if not post.done():
                    post.cancel()
                    await asyncio.gather(post, return_exceptions=True)
                    logger.info("Request aborted by cancellation", extra={"extra": {"model": request.model}})
                    raise RequestCancelledError()
                resp = post.result()
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接超时等
            raise NetworkError(code="NETWORK_ERROR", message=str(e))

        data = self._json_or_none(resp)
        if resp.status_code >= 400:
            # 带 error 对象的响应体属于格式良好的错误响应
            if isinstance(data, dict) and isinstance(data.get("error"), dict):
                return self._parse_error(data)
            if resp.status_code == 429:
                raise RateLimitError(code="RATE_LIMIT", message="Provider rate limit")
            raise ApiError(code="API_ERROR", message=resp.text, http_status=resp.status_code)
        if not isinstance(data, dict):
            raise ApiError(code="INVALID_RESPONSE", message="Response is not a JSON object", http_status=resp.status_code)
        if isinstance(data.get("error"), dict):
            return self._parse_error(data)
        return self._parse_success(data)

    def _build_payload(self, req: ChatRequest) -> Dict[str, Any]:
        """将 ChatRequest 转成 chat/completions 所需的请求 JSON。"""

        model_cfg = self._provider_config.model(req.model)
        payload: Dict[str, Any] = {
            "model": req.model,
            "messages": [m.to_payload() for m in req.messages],
            "temperature": req.temperature,
            "top_p": req.top_p,
            "presence_penalty": req.presence_penalty,
            "frequency_penalty": req.frequency_penalty,
        }
        max_tokens = req.max_tokens or (model_cfg.max_tokens if model_cfg else None)
        if max_tokens:
            payload["max_tokens"] = max_tokens
        if req.stop:
            payload["stop"] = req.stop
        if req.suffix:
            payload["suffix"] = req.suffix
        return payload

    @staticmethod
    def _json_or_none(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError:
            return None

    @staticmethod
    def _parse_error(data: Dict[str, Any]) -> ChatResponseError:
        err = data.get("error") or {}
        code = err.get("code")
        return ChatResponseError(
            error=ChatError(
                message=err.get("message"),
                type=err.get("type"),
                code=str(code) if code is not None else None,
            ),
            raw=data,
        )

    @staticmethod
    def _parse_success(data: Dict[str, Any]) -> ChatResponseSuccess:
        """将原始响应 JSON 解析为 ChatResponseSuccess。"""

        choices: List[ChatResponseChoice] = []
        for i, ch in enumerate(data.get("choices") or []):
            msg = ch.get("message") or {}
            choices.append(
                ChatResponseChoice(
                    index=ch.get("index", i),
                    message=ChatResponseMessage(role=msg.get("role"), content=msg.get("content")),
                    finish_reason=ch.get("finish_reason"),
                )
            )
        usage_raw = data.get("usage") or {}
        usage = None
        if usage_raw:
            usage = ChatUsage(
                prompt_tokens=usage_raw.get("prompt_tokens", 0),
                completion_tokens=usage_raw.get("completion_tokens", 0),
                total_tokens=usage_raw.get("total_tokens", 0),
            )
        return ChatResponseSuccess(choices=choices, usage=usage, raw=data)
