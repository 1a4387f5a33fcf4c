"""
測試用的 Store 替身。

MockStore 把「訂閱者看到的狀態」與「被 dispatch 的 action」拆開：
狀態只能透過 set_state 設定，dispatch 只會記錄到 dispatched_actions，
不會執行任何 reducer。
"""
import logging
from typing import Any, List

import reactivex
from reactivex import Observable
from reactivex import operators as ops
from reactivex.subject import BehaviorSubject

from .actions import Action, noop_action
from .effects import Effect, Epic
from .store import Store
from .types import ActionStream, S

logger = logging.getLogger(__name__)


def _identity_reducer(state: Any, action: Action[Any]) -> Any:
    return state


class MockStore(Store[S]):
    """
    給 view / view-model 測試使用的 Store。

    範例:
        >>> store = MockStore(ScoreboardState())
        >>> store.set_state(ScoreboardState(home=Home(score=3)))
        >>> view_model.on_home_tapped()
        >>> store.dispatched_actions.subscribe(on_next=received.append)
    """

    def __init__(self, state: S):
        # 以哨兵 action 作為初始值，讓「目前值」語意的訂閱者在 dispatch 之前也有值可拿
        self._dispatched_subject: BehaviorSubject = BehaviorSubject(noop_action())
        super().__init__(_identity_reducer, state)

    def set_state(self, state: S) -> None:
        """
        不經過 dispatch 與 reducer，直接發布新的狀態。

        Args:
            state: 要讓訂閱者看到的狀態
        """
        self._state = state
        self._state_subject.on_next(state)

    def dispatch(self, action: Action[Any]) -> None:
        """
        只把 action 記錄到 dispatched_actions，不改變狀態。
        """
        logger.debug("mock dispatch %s", getattr(action, "type", action))
        self._dispatched_subject.on_next(action)

    @property
    def dispatched_actions(self) -> Observable:
        """被 dispatch 的 action 流，訂閱時會先收到最後一個（或哨兵）action。"""
        return self._dispatched_subject.pipe(ops.as_observable())

    @property
    def last_dispatched_action(self) -> Action[Any]:
        """最後一個被 dispatch 的 action；尚未 dispatch 時為哨兵 action。"""
        return self._dispatched_subject.value

    def _effect_action_stream(self) -> ActionStream:
        # effect 觀察的是被測程式碼 dispatch 的 action
        return self.dispatched_actions

    def teardown(self) -> None:
        if self._is_torn_down:
            return
        super().teardown()
        self._dispatched_subject.on_completed()


def run_effect(effect: Effect, *actions: Action[Any], state: Any = None) -> List[Any]:
    """
    以給定的 actions 同步執行一個 Effect 的管線，返回它輸出的所有值。

    只適用於同步的管線；含有 delay 等非同步階段的輸出不會被收集。
    Epic 會拿到一個以 `state` 為狀態的 MockStore 作為 state$。

    範例:
        >>> outputs = run_effect(load_effect, load_request())
        >>> assert all(out.type != load_request.type for out in outputs)
    """
    outputs: List[Any] = []
    action_stream = reactivex.from_iterable(actions)
    if isinstance(effect, Epic):
        source = effect.source(MockStore(state), action_stream)
    else:
        source = effect.source(action_stream)
    source.subscribe(on_next=outputs.append)
    return outputs
