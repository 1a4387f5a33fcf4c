"""
recombinex：以 ReactiveX 為基礎的單一狀態樹 Store。

提供 Store、reducer 組合、記憶化 selector、Effect 與 action 篩選運算子，
以及測試用的 MockStore（recombinex.testing）。
"""

from .errors import (
    RecombinexError, ActionError, ReducerError, EffectError,
    SelectorError, StoreError, ErrorHandler, global_error_handler
)
from .actions import Action, create_action, noop_action
from .reducers import combine_reducers, for_key, create_reducer, on
from .store_selectors import create_selector, memoize, CacheInfo
from .operators import of_type, of_types, erase_action_type, merge_actions
from .effects import Effect, Epic, create_effect, create_epic, EffectsManager
from .store import Store, create_store
from .immutable_utils import get_in, set_in, to_immutable

__version__ = "0.1.0"

# 匯出所有公開 API
__all__ = [
    # Errors
    "RecombinexError", "ActionError", "ReducerError", "EffectError",
    "SelectorError", "StoreError", "ErrorHandler", "global_error_handler",

    # Actions
    "Action", "create_action", "noop_action",

    # Reducers
    "combine_reducers", "for_key", "create_reducer", "on",

    # Selectors
    "create_selector", "memoize", "CacheInfo",

    # Operators
    "of_type", "of_types", "erase_action_type", "merge_actions",

    # Effects
    "Effect", "Epic", "create_effect", "create_epic", "EffectsManager",

    # Store
    "Store", "create_store",

    # Immutable Utils
    "get_in", "set_in", "to_immutable",
]
