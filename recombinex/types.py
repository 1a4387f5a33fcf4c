"""
recombinex 共用的型別定義。

集中放置 TypeVar、型別別名與 Protocol，避免各模組之間的循環引用。
"""
from typing import Any, Callable, Protocol, TypeVar

from reactivex import Observable

from .actions import Action

S = TypeVar("S")  # 狀態類型
K = TypeVar("K")  # 子狀態類型
V = TypeVar("V")  # selector 輸出類型
T = TypeVar("T")  # 轉換結果類型
P_co = TypeVar("P_co", covariant=True)

# Reducer：(state, action) -> new_state，必須是純函式且對所有 action 皆有定義
ReducerFn = Callable[[S, Action[Any]], S]

# Selector：state -> 衍生值
SelectorFn = Callable[[S], V]

# 通用的 Action 資料流
ActionStream = Observable[Action[Any]]

# Effect 來源：actions$ -> actions$
EffectSource = Callable[[ActionStream], ActionStream]

# Epic 來源：(state$, actions$) -> actions$
EpicSource = Callable[[Observable[Any], ActionStream], ActionStream]


class ActionCreatorWithoutPayload(Protocol):
    """無負載的 action creator。"""

    type: str

    def __call__(self) -> Action[None]: ...


class ActionCreatorWithPayload(Protocol[P_co]):
    """帶負載的 action creator。"""

    type: str

    def __call__(self, *args: Any, **kwargs: Any) -> Action[P_co]: ...
