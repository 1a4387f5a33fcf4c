"""
Action 資料流的篩選運算子。

這些運算子可直接放進 `Observable.pipe`，讓 Effect 從通用的 actions$ 中
挑出自己關心的 action 種類：

    actions.pipe(
        of_type(load_count_request),
        ops.map(lambda _: load_count_success(42)),
    )
"""
from typing import Any, Callable, Tuple, cast

import reactivex
from reactivex import Observable
from reactivex import operators as ops

from .actions import Action, kind_of
from .errors import ActionError
from .types import ActionStream

MIN_KINDS = 2
MAX_KINDS = 5


def _matches(tags: Tuple[str, ...]) -> Callable[[Any], bool]:
    def predicate(action: Any) -> bool:
        if not isinstance(action, Action):
            return False
        # 依列出的順序比對，第一個符合即通過
        for tag in tags:
            if action.type == tag:
                return True
        return False

    return predicate


def of_type(kind: Any) -> Callable[[ActionStream], Observable[Action[Any]]]:
    """
    只保留指定種類的 action。

    Args:
        kind: action creator 或種類標籤字串

    Returns:
        pipe 運算子；輸出的 action 皆為 `kind` 這個具體種類

    Raises:
        ActionError: 無法辨識的種類
    """
    return ops.filter(_matches((kind_of(kind),)))


def of_types(*kinds: Any) -> Callable[[ActionStream], ActionStream]:
    """
    保留符合任一指定種類的 action。

    種類依列出順序比對。輸出仍是通用的 Action 資料流，
    因為結果可能混合多種種類。需要超過五種時，請分別篩選後以
    merge_actions 合併。

    Args:
        *kinds: 2 到 5 個 action creator 或種類標籤字串

    Returns:
        pipe 運算子

    Raises:
        ActionError: 種類數量不在 2 到 5 之間，或有無法辨識的種類
    """
    if not MIN_KINDS <= len(kinds) <= MAX_KINDS:
        raise ActionError(
            f"of_types 需要 {MIN_KINDS} 到 {MAX_KINDS} 個種類，收到 {len(kinds)} 個",
            arity=len(kinds),
        )
    return ops.filter(_matches(tuple(kind_of(kind) for kind in kinds)))


def erase_action_type() -> Callable[[Observable[Action[Any]]], ActionStream]:
    """
    把單一具體種類的資料流重新暴露為通用的 Action 資料流。

    執行期不做任何轉換，只在型別層面放寬，用於讓 Effect 的輸出符合
    `actions$ -> actions$` 的契約。
    """
    def erase(source: Observable[Action[Any]]) -> ActionStream:
        return cast(ActionStream, source)

    return erase


def merge_actions(*streams: ActionStream) -> ActionStream:
    """
    合併多條各自篩選過的 Action 資料流。

    範例:
        >>> reactions = merge_actions(
        ...     actions.pipe(of_types(a1, a2, a3, a4, a5)),
        ...     actions.pipe(of_types(a6, a7)),
        ... )
    """
    return reactivex.merge(*streams)
