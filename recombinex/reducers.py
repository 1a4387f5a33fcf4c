"""
Reducer 組合工具。

- combine_reducers：依序串接多個作用於同一狀態類型的 reducer
- for_key：把只處理子狀態的 reducer 提升為處理整個狀態的 reducer
- create_reducer / on：以 action 種類對應處理函式的方式建立 reducer
"""
from typing import Any, Callable, Dict, Optional, Tuple, Union

from .actions import Action, kind_of
from .errors import ReducerError
from .immutable_utils import Path, get_in, normalize_path, set_in
from .types import K, ReducerFn, S


def combine_reducers(*reducers: ReducerFn[S]) -> ReducerFn[S]:
    """
    將多個 reducer 合併為一個 reducer。

    對同一個 action，狀態會依照傳入順序逐一經過每個 reducer，
    後面的 reducer 看到的是前一個 reducer 的輸出。因此當兩個 reducer
    讀取同一塊子狀態時結果與順序有關；以這種方式組合的 reducer
    應該各自處理互不重疊的子狀態（通常搭配 for_key 使用）。

    Args:
        *reducers: 要合併的 reducer，皆作用於相同的狀態類型

    Returns:
        合併後的 reducer

    範例:
        >>> scoreboard_reducer = combine_reducers(
        ...     for_key("home", home_score_reducer),
        ...     for_key("away", away_score_reducer),
        ... )
    """
    reducers = tuple(reducers)

    def combined(state: S, action: Action[Any]) -> S:
        for reducer in reducers:
            state = reducer(state, action)
        return state

    combined.reducers = reducers  # type: ignore[attr-defined]
    return combined


def for_key(path: Path, reducer: ReducerFn[K]) -> ReducerFn[S]:
    """
    將處理子狀態的 reducer 轉換為處理整個狀態的 reducer。

    取出 `path` 上的子狀態交給 `reducer`，再把結果寫回並返回新的整體狀態，
    只有該位置被替換。若子 reducer 回傳的是同一個物件，則原狀態原樣返回。

    Args:
        path: 子狀態路徑。可以是鍵或屬性名稱、以點分隔的字串（"home.score"），
              或鍵/索引的元組
        reducer: 子狀態的 reducer

    Returns:
        作用於整個狀態的 reducer

    Raises:
        ReducerError: 路徑為空
    """
    keys = normalize_path(path)
    if not keys or any(key == "" for key in keys):
        raise ReducerError(f"無效的狀態路徑: {path!r}", reducer_name=_name_of(reducer))

    def keyed(state: S, action: Action[Any]) -> S:
        try:
            sub_state = get_in(state, keys)
        except (KeyError, IndexError, AttributeError, TypeError) as err:
            raise ReducerError(
                f"無法讀取狀態路徑 {path!r}: {err}",
                reducer_name=_name_of(reducer),
                state_type=type(state).__name__,
            ) from err

        next_sub_state = reducer(sub_state, action)
        if next_sub_state is sub_state:
            return state

        try:
            return set_in(state, keys, next_sub_state)
        except TypeError as err:
            raise ReducerError(
                f"無法寫入狀態路徑 {path!r}: {err}",
                reducer_name=_name_of(reducer),
                state_type=type(state).__name__,
            ) from err

    keyed.path = keys  # type: ignore[attr-defined]
    return keyed


def _name_of(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", None) or repr(fn)


Handler = Callable[[Any, Action[Any]], Any]


def create_reducer(
    initial_state: S,
    *handlers: Union[Tuple[Any, Handler], Dict[str, Handler]],
) -> ReducerFn[S]:
    """
    建立一個依 action 種類分派的 reducer。

    Args:
        initial_state: 初始狀態，state 為 None 時使用
        *handlers: 一系列 (action 種類, handler) 元組或使用 on 函式建立的處理器

    Returns:
        reducer；沒有對應處理器的 action 會原樣返回狀態
    """
    action_handlers: Dict[str, Handler] = {}

    for handler in handlers:
        if isinstance(handler, tuple) and len(handler) == 2:
            action_kind, handler_fn = handler
            action_handlers[kind_of(action_kind)] = handler_fn
        elif isinstance(handler, dict):
            action_handlers.update(handler)
        else:
            raise ReducerError(f"無效的處理器定義: {handler!r}")

    def reducer(state: Optional[S], action: Action[Any]) -> S:
        if state is None:
            state = initial_state
        handler = action_handlers.get(action.type)
        if handler:
            return handler(state, action)
        return state

    reducer.initial_state = initial_state  # type: ignore[attr-defined]
    reducer.handlers = action_handlers  # type: ignore[attr-defined]
    return reducer


def on(action_kind: Any, handler: Handler) -> Dict[str, Handler]:
    """
    建立 action 種類與處理函式的對應。

    Args:
        action_kind: Action creator 或種類標籤字串
        handler: 處理該 Action 的函式，接收 (state, action) 並返回新狀態

    Returns:
        {action_type: handler}
    """
    return {kind_of(action_kind): handler}
