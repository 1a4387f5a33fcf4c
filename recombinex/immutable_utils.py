# recombinex/immutable_utils.py
"""
不可變狀態的工具函式。

`for_key` 透過這裡的 get_in / set_in 讀寫子狀態；set_in 永遠回傳新的物件，
只替換路徑上的節點，其餘部分與原物件共享。
to_immutable 用於凍結 action 的字典負載。
"""
import dataclasses
from typing import Any, Hashable, Sequence, Tuple, Union

from immutables import Map
from pydantic import BaseModel

Path = Union[Hashable, Sequence[Hashable]]


def normalize_path(path: Path) -> Tuple[Hashable, ...]:
    """
    將路徑轉為鍵的元組。

    - "home.score" -> ("home", "score")
    - ("items", 0) -> ("items", 0)
    - "home" -> ("home",)
    """
    if isinstance(path, str):
        return tuple(path.split("."))
    if isinstance(path, (tuple, list)):
        return tuple(path)
    return (path,)


def _get(obj: Any, key: Hashable) -> Any:
    if isinstance(obj, (Map, dict)):
        return obj[key]
    if isinstance(obj, (tuple, list)) and isinstance(key, int):
        return obj[key]
    if isinstance(key, str):
        return getattr(obj, key)
    raise TypeError(f"無法以 {key!r} 讀取 {type(obj).__name__}")


def _set(obj: Any, key: Hashable, value: Any) -> Any:
    if isinstance(obj, Map):
        return obj.set(key, value)
    if isinstance(obj, dict):
        new_obj = obj.copy()
        new_obj[key] = value
        return new_obj
    if isinstance(obj, BaseModel):
        return obj.model_copy(update={key: value})
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.replace(obj, **{key: value})
    if isinstance(obj, tuple) and hasattr(obj, "_replace") and isinstance(key, str):
        # namedtuple
        return obj._replace(**{key: value})
    if isinstance(obj, (tuple, list)) and isinstance(key, int):
        items = list(obj)
        items[key] = value
        return type(obj)(items)
    raise TypeError(f"無法在 {type(obj).__name__} 上設定 {key!r}")


def get_in(obj: Any, path: Path) -> Any:
    """
    依路徑讀取巢狀值。

    Raises:
        KeyError / IndexError / AttributeError: 路徑不存在
        TypeError: 容器類型不支援
    """
    for key in normalize_path(path):
        obj = _get(obj, key)
    return obj


def set_in(obj: Any, path: Path, value: Any) -> Any:
    """
    依路徑寫入巢狀值並返回新物件，原物件不被修改。

    若寫入的值與原值是同一個物件，直接返回原物件。
    """
    keys = normalize_path(path)
    if not keys:
        return value
    head, rest = keys[0], keys[1:]
    current = _get(obj, head)
    new_child = set_in(current, rest, value) if rest else value
    if new_child is current:
        return obj
    return _set(obj, head, new_child)


def to_immutable(obj: Any) -> Any:
    """
    把巢狀的 dict / list / set 換成 Map / tuple / frozenset，讓整個值可以雜湊。

    Pydantic 模型與其他值原樣保留。
    """
    if isinstance(obj, (dict, Map)):
        return Map({key: to_immutable(value) for key, value in obj.items()})
    if isinstance(obj, (list, tuple)) and not hasattr(obj, "_replace"):
        return tuple(to_immutable(item) for item in obj)
    if isinstance(obj, (set, frozenset)):
        return frozenset(to_immutable(item) for item in obj)
    return obj
