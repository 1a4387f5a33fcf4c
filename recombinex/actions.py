"""
Action 定義模組。

此模組提供 Action 類別以及建立 Action 的工具函式。
Actions 是描述狀態變更意圖的不可變物件，以 `type` 字串作為種類標籤，
reducer、selector 與 effect 運算子都依賴這個標籤做分派。
"""
from typing import TYPE_CHECKING, Any, Callable, Dict, Generic, Optional, TypeVar, Union, overload

from .errors import ActionError
from .immutable_utils import to_immutable

if TYPE_CHECKING:
    from .types import ActionCreatorWithoutPayload, ActionCreatorWithPayload

P = TypeVar("P")


class Action(Generic[P]):
    """
    表示一個有種類標籤和可選負載的動作。

    泛型參數:
        P: 負載的類型

    屬性:
        type: 動作的種類標籤
        payload: 動作的負載資料（可選）
    """
    __slots__ = ("type", "payload")

    def __init__(self, type: str, payload: Optional[P] = None):
        super().__setattr__("type", type)
        super().__setattr__("payload", payload)

    def __setattr__(self, name, value):
        raise AttributeError(f"Cannot modify immutable instance attribute '{name}'")

    def __delattr__(self, name):
        raise AttributeError(f"Cannot delete immutable instance attribute '{name}'")

    def __eq__(self, other):
        if not isinstance(other, Action):
            return False
        return self.type == other.type and self.payload == other.payload

    def __hash__(self):
        return hash((self.type, self.payload))

    def __repr__(self):
        return f"Action(type='{self.type}', payload={repr(self.payload)})"


def _process_payload(payload: Any) -> Any:
    """
    將字典負載（連同巢狀的 list / dict）轉為可雜湊的 Map，其餘原樣返回。

    Args:
        payload: 原始 payload

    Returns:
        處理後的 payload
    """
    if isinstance(payload, dict):
        return to_immutable(payload)
    return payload


@overload
def create_action(action_type: str) -> "ActionCreatorWithoutPayload":
    ...


@overload
def create_action(action_type: str, prepare_fn: Callable[..., P]) -> "ActionCreatorWithPayload[P]":
    ...


def create_action(action_type: str, prepare_fn: Optional[Callable[..., Any]] = None):
    """
    建立一個 Action 生成器函式。

    Args:
        action_type: Action 的種類標籤
        prepare_fn: 可選的預處理函式，用於在建立 Action 前處理輸入參數

    Returns:
        一個可呼叫的函式，用於生成指定種類的 Action；其 `type` 屬性即為標籤，
        可直接傳給 `on`、`of_type`、`of_types`。

    範例:
        >>> increment = create_action("[Counter] Increment")
        >>> increment()  # Action(type='[Counter] Increment', payload=None)
        >>>
        >>> add = create_action("[Counter] Add", lambda amount: amount)
        >>> add(5)  # Action(type='[Counter] Add', payload=5)
    """
    def action_creator(*args: Any, **kwargs: Any) -> Action[Any]:
        if prepare_fn:
            return Action(action_type, _process_payload(prepare_fn(*args, **kwargs)))
        if len(args) == 1 and not kwargs:
            return Action(action_type, _process_payload(args[0]))
        if args or kwargs:
            payload: Dict[Union[int, str], Any] = dict(zip(range(len(args)), args))
            payload.update(kwargs)
            return Action(action_type, _process_payload(payload))
        # 無參數，無負載
        return Action(action_type)

    action_creator.type = action_type  # type: ignore[attr-defined]
    action_creator.__name__ = action_type
    action_creator.__qualname__ = action_type
    return action_creator


def kind_of(kind: Any) -> str:
    """
    取得 action 種類的標籤字串。

    Args:
        kind: action creator、Action 實例或標籤字串

    Returns:
        種類標籤

    Raises:
        ActionError: 無法辨識的種類
    """
    if isinstance(kind, str):
        return kind
    tag = getattr(kind, "type", None)
    if isinstance(tag, str):
        return tag

    raise ActionError(f"無法辨識的 action 種類: {kind!r}", kind=repr(kind))


# MockStore 的初始哨兵 Action：表示「尚未 dispatch 任何東西」
noop_action: "ActionCreatorWithoutPayload" = create_action("[MockStore] Noop")
