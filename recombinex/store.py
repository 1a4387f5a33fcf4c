import logging
import threading
from typing import Any, Callable, Generic, Iterable, Optional

from reactivex import Observable, Subject
from reactivex import operators as ops
from reactivex.abc import DisposableBase, ObserverBase, SchedulerBase
from reactivex.subject import BehaviorSubject

from .actions import Action
from .effects import Effect, EffectsManager
from .errors import EffectError
from .types import ActionStream, ReducerFn, S

logger = logging.getLogger(__name__)


class Store(Observable, Generic[S]):
    """
    狀態容器，透過單一 reducer 串行處理所有狀態變更，
    並廣播每一次的新狀態與觸發它的 action。

    Store 本身就是狀態的 Observable：訂閱時立即收到目前狀態，
    之後收到每一次 dispatch 後的狀態，不會自行完成，也不會發出錯誤。
    """

    def __init__(
        self,
        reducer: ReducerFn[S],
        initial_state: S,
        effects: Iterable[Effect] = (),
    ):
        """
        初始化 Store。

        Args:
            reducer: 處理整個狀態的 reducer，通常由 combine_reducers 組成
            initial_state: 初始狀態
            effects: 與 Store 同生命週期的 Effect / Epic，無法單獨取消
        """
        super().__init__()
        self._reducer = reducer
        self._state = initial_state
        # 狀態流：新訂閱者會立即收到目前狀態
        self._state_subject: BehaviorSubject = BehaviorSubject(initial_state)
        # 動作流：不重播歷史
        self._action_subject: Subject = Subject()
        self._dispatch_lock = threading.RLock()
        self._is_torn_down = False
        self._effects_manager = EffectsManager(self)

        try:
            for effect in effects:
                # 建構時註冊的 effects 與 Store 同生命週期，handle 由管理器保留
                self._effects_manager.register(effect)
        except EffectError:
            # 建構失敗時，已註冊的 effects 不能留在一個不會被返回的 Store 上
            self._effects_manager.teardown()
            raise

    def _subscribe_core(
        self,
        observer: ObserverBase,
        scheduler: Optional[SchedulerBase] = None,
    ) -> DisposableBase:
        return self._state_subject.subscribe(observer, scheduler=scheduler)

    def _effect_action_stream(self) -> ActionStream:
        """提供給 Effect 的 actions$，隱藏 Subject 的 on_next。"""
        return self._action_subject.pipe(ops.as_observable())

    def dispatch(self, action: Action[Any]) -> None:
        """
        分發一個動作。

        依序執行：計算新狀態、更新 state、發布新狀態、發布 action。
        Effect 同步觀察到 action 並再次 dispatch 時，內層 dispatch 會完整執行完
        才回到外層（深度優先），且看到的是已更新的狀態。

        Args:
            action: 要分發的 Action
        """
        if self._is_torn_down:
            logger.warning("Store 已清理，忽略 action: %s", getattr(action, "type", action))
            return

        with self._dispatch_lock:
            logger.debug("dispatch %s", getattr(action, "type", action))
            new_state = self._reducer(self._state, action)
            self._state = new_state
            self._state_subject.on_next(new_state)
            self._action_subject.on_next(action)

    def select(self, selector: Optional[Callable[[S], Any]] = None) -> Observable:
        """
        選擇狀態的一部分進行觀察。

        每個狀態都會經過 selector，連續相同 (`==`) 的結果只發出一次；
        新訂閱者會立即收到目前狀態的投影。

        Args:
            selector: 一個函式，接收整個狀態並返回希望觀察的部分；
                      省略時觀察整個狀態

        Returns:
            一個可重複訂閱的 Observable
        """
        if selector is None:
            return self.pipe(ops.distinct_until_changed())

        return self.pipe(
            ops.map(selector),
            ops.distinct_until_changed(),
        )

    @property
    def state(self) -> S:
        """
        獲取當前狀態的快照。
        """
        return self._state

    def register(self, effect: Effect) -> DisposableBase:
        """
        註冊一個 Effect 或 Epic。

        Args:
            effect: 要註冊的 Effect

        Returns:
            取消用的 handle；dispose 後該 Effect 的輸出不再被 dispatch，
            其管線也會被取消訂閱
        """
        return self._effects_manager.register(effect)

    def register_effects(self, *effects_modules: Any) -> None:
        """
        註冊一個或多個 Effect 模組（類別、實例或 Python 模組），
        其中所有 Effect 屬性都與 Store 同生命週期。

        Args:
            *effects_modules: 包含 effects 的模組或物件
        """
        self._effects_manager.add_effects(*effects_modules)

    def remove_effects(self, *effects_modules: Any) -> None:
        """
        卸載先前以 register_effects 註冊的模組。
        """
        self._effects_manager.remove_effects(*effects_modules)

    def teardown(self) -> None:
        """
        清理 Store：取消所有 Effect 並完成狀態流與動作流。
        """
        if self._is_torn_down:
            return
        self._is_torn_down = True
        self._effects_manager.teardown()
        self._action_subject.on_completed()
        self._state_subject.on_completed()

    def __enter__(self) -> "Store[S]":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.teardown()


def create_store(
    reducer: ReducerFn[S],
    initial_state: S,
    effects: Iterable[Effect] = (),
) -> Store[S]:
    """
    建立一個新的 Store 實例。

    Args:
        reducer: 處理整個狀態的 reducer
        initial_state: 初始狀態
        effects: 與 Store 同生命週期的 effects

    Returns:
        Store: 新建立的 Store 實例
    """
    return Store(reducer, initial_state, effects)
