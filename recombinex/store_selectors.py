"""
記憶化 Selector 引擎。

create_selector 把多個輸入 selector 與一個轉換函式組合成新的 selector。
記憶化採用單一快取槽：只保留上一次的輸入與輸出，並以 `==` 判斷輸入是否相同，
這正好對應「每次拿最新狀態來查詢」的使用模式，長時間執行也不會累積記憶體。
"""
import functools
from collections import namedtuple
from typing import Any, Callable

from .errors import SelectorError
from .types import S, SelectorFn, T

MAX_SELECTORS = 9

CacheInfo = namedtuple("CacheInfo", ["hits", "misses", "maxsize", "currsize"])

_EMPTY = object()


def _args_equal(args: tuple, cached_args: tuple) -> bool:
    if len(args) != len(cached_args):
        return False
    return all(a is b or a == b for a, b in zip(args, cached_args))


def memoize(fn: Callable[..., T]) -> Callable[..., T]:
    """
    以單一快取槽包裝函式。

    當所有位置參數都與上一次呼叫相等 (`==`) 時直接返回上一次的結果；
    任何一個參數不同都會重新計算並取代整組快取。

    Args:
        fn: 純函式

    Returns:
        包裝後的函式，附帶 cache_info() 與 cache_clear()
    """
    last_args: Any = _EMPTY
    last_result: Any = None
    hits = 0
    misses = 0

    @functools.wraps(fn)
    def memoized(*args: Any) -> T:
        nonlocal last_args, last_result, hits, misses
        if last_args is not _EMPTY and _args_equal(args, last_args):
            hits += 1
            return last_result
        misses += 1
        result = fn(*args)
        last_args, last_result = args, result
        return result

    def cache_info() -> CacheInfo:
        return CacheInfo(hits, misses, 1, 0 if last_args is _EMPTY else 1)

    def cache_clear() -> None:
        nonlocal last_args, last_result, hits, misses
        last_args, last_result = _EMPTY, None
        hits = misses = 0

    memoized.cache_info = cache_info  # type: ignore[attr-defined]
    memoized.cache_clear = cache_clear  # type: ignore[attr-defined]
    return memoized


def create_selector(
    *selectors: SelectorFn[S, Any],
    result_fn: Callable[..., T],
    memoized: bool = True,
) -> SelectorFn[S, T]:
    """
    建立一個組合 selector。

    1. 以同一個 state 執行每個輸入 selector，得到 n 個中間值
    2. 把中間值交給 result_fn；memoized 時 result_fn 以單槽快取包裝，
       必須 n 個參數全部相等才會命中
    3. memoized 時整個組合 selector（state -> 結果）再以另一個單槽快取包裝，
       以 state 是否相等作為鍵
    4. memoized=False 時整條鏈都不快取，每次呼叫都重新計算

    由組合 selector 再組合出的 selector 會形成依賴圖，每個節點各自快取，
    上游未變的分支會直接拿到快取值。

    Args:
        *selectors: 1 到 9 個輸入 selector
        result_fn: 接收所有中間值並產生結果的轉換函式，必須是純函式
        memoized: 是否啟用記憶化，預設為 True

    Returns:
        組合後的 selector。memoized 時附帶 cache_info()、result_fn_cache_info()
        與 cache_clear()

    Raises:
        SelectorError: selector 數量不在 1 到 9 之間，或參數不可呼叫

    範例:
        >>> get_home_score = lambda state: state.home.score
        >>> get_summary = create_selector(
        ...     get_home_score, result_fn=lambda score: f"Score is {score}"
        ... )
    """
    if not 1 <= len(selectors) <= MAX_SELECTORS:
        raise SelectorError(
            f"create_selector 需要 1 到 {MAX_SELECTORS} 個輸入 selector，收到 {len(selectors)} 個",
            arity=len(selectors),
        )
    for select in selectors:
        if not callable(select):
            raise SelectorError(f"輸入 selector 必須可呼叫: {select!r}")
    if not callable(result_fn):
        raise SelectorError(f"result_fn 必須可呼叫: {result_fn!r}")

    selectors = tuple(selectors)
    transformation = memoize(result_fn) if memoized else result_fn

    def selector(state: S) -> T:
        return transformation(*(select(state) for select in selectors))

    selector.__name__ = getattr(result_fn, "__name__", "selector")
    selector.__qualname__ = getattr(result_fn, "__qualname__", selector.__name__)

    if not memoized:
        selector.memoized = False  # type: ignore[attr-defined]
        return selector

    memoized_selector = memoize(selector)
    outer_cache_clear = memoized_selector.cache_clear  # type: ignore[attr-defined]

    def cache_clear() -> None:
        outer_cache_clear()
        transformation.cache_clear()  # type: ignore[attr-defined]

    memoized_selector.result_fn_cache_info = transformation.cache_info  # type: ignore[attr-defined]
    memoized_selector.cache_clear = cache_clear  # type: ignore[attr-defined]
    memoized_selector.memoized = True  # type: ignore[attr-defined]
    return memoized_selector
