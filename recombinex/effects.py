"""
Effect 定義與管理模組。

Effect 是描述副作用管線的不可變值：`source` 接收 actions$ 並產生新的
actions$，`dispatch` 決定輸出是否重新送回 Store。所有執行期行為
（訂閱、dispatch、取消）都由 EffectsManager 負責。

注意：dispatch=True 的 Effect 若把某個種類再映射回同一種類，
會形成無限重新 dispatch 的迴圈。Effect 應該輸出不同的種類，
或標記為 dispatch=False。
"""
import functools
import inspect
import logging
import types
import weakref
from typing import Any, Callable, Dict, List, Optional

from reactivex import Observable
from reactivex.abc import DisposableBase
from reactivex.disposable import CompositeDisposable, Disposable

from .actions import Action
from .errors import EffectError, StoreError, global_error_handler
from .types import EffectSource, EpicSource

logger = logging.getLogger(__name__)


class Effect:
    """
    表示一個副作用管線的不可變描述。

    屬性:
        source: actions$ -> actions$ 的函式
        dispatch: 輸出的 action 是否重新 dispatch 回 Store
        name: 用於日誌與錯誤回報的名稱
        is_instance_method: source 是否為需要綁定實例的方法
    """
    __slots__ = ("source", "dispatch", "name", "is_instance_method")

    def __init__(
        self,
        source: Callable[..., Observable[Any]],
        dispatch: bool = True,
        name: Optional[str] = None,
        is_instance_method: bool = False,
    ):
        if not callable(source):
            raise EffectError(f"Effect 的 source 必須可呼叫: {source!r}", effect_name=name)
        object.__setattr__(self, "source", source)
        object.__setattr__(self, "dispatch", bool(dispatch))
        object.__setattr__(self, "name", name or getattr(source, "__name__", type(self).__name__))
        object.__setattr__(self, "is_instance_method", is_instance_method)

    def __setattr__(self, name, value):
        raise AttributeError(f"Cannot modify immutable instance attribute '{name}'")

    def __get__(self, instance, owner=None):
        # 定義在類別上的 @create_effect 方法，透過實例存取時綁定 self
        if instance is None or not self.is_instance_method:
            return self
        return type(self)(
            types.MethodType(self.source, instance),
            dispatch=self.dispatch,
            name=self.name,
        )

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r}, dispatch={self.dispatch})"


class Epic(Effect):
    """
    可以讀取狀態的 Effect。

    `source` 的簽名為 (state$, actions$) -> actions$，state$ 即 Store 本身：
    訂閱時會先收到目前狀態，也可以透過 `state$.state` 同步讀取。
    """
    __slots__ = ()


def _is_instance_method(fn: Callable[..., Any]) -> bool:
    return bool(
        inspect.isfunction(fn)
        and fn.__code__.co_varnames
        and fn.__code__.co_varnames[0] == "self"
    )


def create_effect(effect_fn: Optional[EffectSource] = None, *, dispatch: bool = True):
    """
    建立 Effect 的裝飾器。

    用法：
      @create_effect
      def foo(action_stream): ...
    或
      class CounterEffects:
          @create_effect(dispatch=False)
          def bar(self, action_stream): ...

    :param effect_fn: 被裝飾的函式，預設為 None。
    :param dispatch: 是否自動 dispatch 輸出的 Action，預設為 True。
    :return: Effect，或尚待套用的裝飾器。
    """
    if effect_fn is None:
        return functools.partial(create_effect, dispatch=dispatch)
    return Effect(
        effect_fn,
        dispatch=dispatch,
        name=effect_fn.__name__,
        is_instance_method=_is_instance_method(effect_fn),
    )


def create_epic(epic_fn: Optional[EpicSource] = None, *, dispatch: bool = True):
    """
    建立 Epic 的裝飾器，用法與 create_effect 相同，
    被裝飾的函式接收 (state_stream, action_stream)。
    """
    if epic_fn is None:
        return functools.partial(create_epic, dispatch=dispatch)
    return Epic(
        epic_fn,
        dispatch=dispatch,
        name=epic_fn.__name__,
        is_instance_method=_is_instance_method(epic_fn),
    )


class EffectsManager:
    """
    管理 Store 上所有執行中的 Effect，負責註冊、取消和清理。

    只以弱參考持有 Store，Effect 不會延長 Store 的生命週期。
    """

    def __init__(self, store):
        """
        初始化 EffectsManager。

        :param store: 擁有此管理器的 Store。
        """
        self._store_ref = weakref.ref(store)
        self._subscriptions = CompositeDisposable()
        self._subs_by_module: Dict[Any, List[DisposableBase]] = {}

    @property
    def store(self):
        store = self._store_ref()
        if store is None:
            raise StoreError("Store 已被釋放", operation="register")
        return store

    def register(self, effect: Effect) -> DisposableBase:
        """
        訂閱 Effect 的資料流，並在 dispatch=True 時把輸出送回 Store。

        :param effect: 要註冊的 Effect 或 Epic。
        :return: 取消訂閱用的 handle。
        """
        if not isinstance(effect, Effect):
            raise EffectError(f"只能註冊 Effect 或 Epic，收到 {type(effect).__name__}")

        store = self.store
        action_stream = store._effect_action_stream()
        if isinstance(effect, Epic):
            source = effect.source(store, action_stream)
        else:
            source = effect.source(action_stream)
        if not isinstance(source, Observable):
            raise EffectError(
                f"Effect {effect.name} 必須返回 Observable，收到 {type(source).__name__}",
                effect_name=effect.name,
            )

        subscription = source.subscribe(
            on_next=self._dispatcher(effect),
            on_error=self._error_reporter(effect),
        )
        self._subscriptions.add(subscription)
        logger.debug("註冊 effect %s (dispatch=%s)", effect.name, effect.dispatch)

        def cancel() -> None:
            # CompositeDisposable.remove 會同時 dispose 該訂閱
            self._subscriptions.remove(subscription)
            logger.debug("取消 effect %s", effect.name)

        return Disposable(cancel)

    def _dispatcher(self, effect: Effect) -> Callable[[Any], None]:
        """
        處理 Effect 的輸出：dispatch=False 時丟棄，非 Action 的輸出記錄警告後丟棄。
        """
        store_ref = self._store_ref

        def dispatcher(item: Any) -> None:
            if not effect.dispatch:
                return
            if not isinstance(item, Action):
                logger.warning("Effect %s 輸出了非 Action 的值: %r", effect.name, item)
                return
            store = store_ref()
            if store is not None:
                store.dispatch(item)

        return dispatcher

    def _error_reporter(self, effect: Effect) -> Callable[[Exception], None]:
        """
        Effect 管線中未被轉成 Action 的錯誤會終止該 Effect，並交給全域錯誤處理器。
        """
        def reporter(err: Exception) -> None:
            global_error_handler.handle(
                EffectError(
                    f"Effect {effect.name} 發生未處理的錯誤: {err}",
                    effect_name=effect.name,
                    original_type=type(err).__name__,
                )
            )

        return reporter

    def add_effects(self, *effects_items: Any) -> None:
        """
        註冊一個或多個 Effect 模組中的所有 Effect，生命週期與 Store 相同。

        :param effects_items: 類別（會以無參數實例化）、實例、Python 模組，或它們的列表。
        """
        for item in effects_items:
            if isinstance(item, (list, tuple)):
                self.add_effects(*item)
                continue
            if item in self._subs_by_module:
                continue
            module = item() if inspect.isclass(item) else item
            subs = []
            for _, member in inspect.getmembers(module, lambda m: isinstance(m, Effect)):
                subs.append(self.register(member))
            self._subs_by_module[item] = subs
            logger.debug("註冊 effects 模組 %r，共 %d 個 effect", item, len(subs))

    def remove_effects(self, *effects_items: Any) -> None:
        """
        卸載指定模組的所有 Effect，不影響其他模組。

        :param effects_items: 先前傳給 add_effects 的項目。
        """
        for item in effects_items:
            for sub in self._subs_by_module.pop(item, []):
                sub.dispose()

    def teardown(self) -> None:
        """
        清理所有訂閱和模組引用。
        """
        self._subscriptions.dispose()
        self._subs_by_module.clear()
