"""协作式取消句柄。"""

import asyncio

from chat_core.domain.exceptions import RequestCancelledError


class CancellationToken:
    """单次发送周期内有效的取消信号。

    cancel() 只设置信号，不会中断底层 I/O；Transport 通过 wait() 或
    raise_if_cancellation_requested() 观察信号并自行退出。
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancellation_requested(self) -> None:
        if self._event.is_set():
            raise RequestCancelledError()
