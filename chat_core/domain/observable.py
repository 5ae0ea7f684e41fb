"""可观察对象基类。

UI 层通过 add_listener 订阅字段变化，每次被观察字段的值真正发生变化时，
监听器都会收到 (source, field_name, old, new) 四元组。
"""

from typing import Any, Callable, ClassVar, FrozenSet, List

from chat_core.infrastructure.logging.logger import logger


PropertyListener = Callable[[Any, str, Any, Any], None]

_MISSING = object()


class Observable:
    """为子类提供字段变更通知。

    子类在 _observed_fields 中声明需要通知的字段名；对这些字段的赋值
    会在值变化时触发监听器。监听器抛出的异常只记录日志，不会中断调用方。
    """

    _observed_fields: ClassVar[FrozenSet[str]] = frozenset()

    def add_listener(self, listener: PropertyListener) -> Callable[[], None]:
        """订阅字段变化，返回取消订阅的函数。"""

        listeners = self._listeners()
        listeners.append(listener)

        def unsubscribe() -> None:
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def __setattr__(self, name: str, value: Any) -> None:
        if name not in self._observed_fields:
            super().__setattr__(name, value)
            return
        old = self.__dict__.get(name, _MISSING)
        super().__setattr__(name, value)
        if old is _MISSING or old is value or old == value:
            return
        self._notify(name, old, value)

    def _listeners(self) -> List[PropertyListener]:
        listeners = self.__dict__.get("_property_listeners")
        if listeners is None:
            listeners = []
            object.__setattr__(self, "_property_listeners", listeners)
        return listeners

    def _notify(self, name: str, old: Any, new: Any) -> None:
        listeners = self.__dict__.get("_property_listeners")
        if not listeners:
            return
        for listener in list(listeners):
            try:
                listener(self, name, old, new)
            except Exception:
                logger.exception(
                    "Property listener failed",
                    extra={"extra": {"source": type(self).__name__, "field": name}},
                )
