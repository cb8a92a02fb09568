"""Store - 持有当前 AppState 快照

职责：
- dispatch: 通过 reducer 产生新快照并通知订阅者
- subscribe: 注册监听器，返回取消订阅函数
- 串行化：监听器内部再次 dispatch 时入队，当前通知结束后依次处理，
  每个监听器都按 dispatch 顺序看到每一个快照

单线程使用（asyncio 事件循环），不加锁。
"""

from collections import deque
from collections.abc import Callable
from typing import Any

from ..domain.types import AppState
from ..telemetry import get_logger, metrics
from .reducer import create_initial_state, reduce

logger = get_logger(__name__)

Listener = Callable[[AppState], Any]
Unsubscribe = Callable[[], None]


class Store:
    """状态容器

    Attributes:
        state: 当前快照
    """

    def __init__(self, initial_state: AppState | None = None):
        self._state = initial_state if initial_state is not None else create_initial_state()
        self._listeners: list[Listener] = []
        self._pending: deque = deque()
        self._dispatching = False

    def get_state(self) -> AppState:
        return self._state

    @property
    def state(self) -> AppState:
        return self._state

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """注册监听器

        Args:
            listener: 每次 dispatch 后以新快照调用（状态未变化时也会调用）

        Returns:
            取消订阅函数，重复调用无副作用
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: object) -> None:
        """应用 action 并通知监听器

        在监听器内部调用时，action 入队，待当前通知结束后处理。
        """
        self._pending.append(action)
        if self._dispatching:
            return

        self._dispatching = True
        try:
            while self._pending:
                self._apply(self._pending.popleft())
        finally:
            self._dispatching = False

    def _apply(self, action: object) -> None:
        kind = getattr(action, "kind", type(action).__name__)
        self._state = reduce(self._state, action)
        metrics.inc("store.dispatch", {"action": kind})
        logger.debug(f"[Store] {kind}")

        # 快照：通知过程中的订阅/取消订阅不影响本轮
        for listener in tuple(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                logger.error(f"[Store] Listener error on {kind}: {e}", exc_info=True)
                metrics.inc("store.listener_error")

    @property
    def listener_count(self) -> int:
        return len(self._listeners)
