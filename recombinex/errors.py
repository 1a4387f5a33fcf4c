"""
recombinex 錯誤處理模組。

定義函式庫的例外階層，以及集中式的錯誤處理器。
Store 的 dispatch 本身沒有可恢復的錯誤通道：這裡的例外只用於
建構期的契約違反（例如不支援的 arity），以及 Effect 管線未處理的錯誤回報。
"""
import logging
import traceback as tb
from typing import Any, Callable, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


class RecombinexError(Exception):
    """所有 recombinex 例外的基礎類。"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        formatted = tb.format_exc()
        # 不在 except 區塊內建立時，format_exc 只會回傳 "NoneType: None"
        self.traceback = "" if formatted.startswith("NoneType: None") else formatted

    def to_dict(self) -> Dict[str, Any]:
        """
        轉換為可序列化的字典。

        Returns:
            包含錯誤類型、訊息與細節的字典
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "traceback": self.traceback,
        }

    def __str__(self) -> str:
        if not self.details:
            return self.message
        details = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        return f"{self.message} ({details})"


class ActionError(RecombinexError):
    """與 Action 或 action 種類相關的錯誤。"""

    def __init__(self, message: str, action_type: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, {"action_type": action_type, **kwargs})


class ReducerError(RecombinexError):
    """與 Reducer 組合相關的錯誤。"""

    def __init__(self, message: str, reducer_name: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, {"reducer_name": reducer_name, **kwargs})


class SelectorError(RecombinexError):
    """與 Selector 相關的錯誤。"""

    def __init__(self, message: str, selector_name: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, {"selector_name": selector_name, **kwargs})


class EffectError(RecombinexError):
    """與 Effect 相關的錯誤。"""

    def __init__(
        self,
        message: str,
        effect_name: Optional[str] = None,
        module_name: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message, {"effect_name": effect_name, "module_name": module_name, **kwargs}
        )


class StoreError(RecombinexError):
    """與 Store 操作相關的錯誤。"""

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message, {"operation": operation, **kwargs})


class ErrorHandler:
    """
    集中式錯誤處理器，用於記錄與分派錯誤。

    Attributes:
        log_to_console: 是否以 logging 輸出到主控台
        log_to_file: 是否同時寫入檔案
        log_file: 日誌檔路徑
        handlers: 額外註冊的錯誤回呼
    """

    def __init__(
        self,
        log_to_console: bool = True,
        log_to_file: bool = False,
        log_file: Optional[str] = None,
    ) -> None:
        self.log_to_console = log_to_console
        self.log_to_file = log_to_file
        self.log_file = log_file
        self.handlers: List[Callable[[RecombinexError], None]] = []
        # 檔案 handler 屬於這個實例，不掛在共用的模組 logger 上
        self._file_handler: Optional[logging.FileHandler] = None

        if log_to_file:
            self._file_handler = logging.FileHandler(
                log_file or "recombinex_errors.log", encoding="utf-8"
            )
            self._file_handler.setFormatter(
                logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s")
            )

    def register_handler(self, handler: Callable[[RecombinexError], None]) -> None:
        """
        註冊一個錯誤回呼，每次 handle 時都會被呼叫。

        Args:
            handler: 接收 RecombinexError 的函式
        """
        self.handlers.append(handler)

    def unregister_handler(self, handler: Callable[[RecombinexError], None]) -> None:
        """移除先前註冊的錯誤回呼。"""
        if handler in self.handlers:
            self.handlers.remove(handler)

    def handle(self, error: Union[RecombinexError, Exception]) -> None:
        """
        處理一個錯誤：記錄日誌並通知所有回呼。

        一般例外會先包裝成 RecombinexError。

        Args:
            error: 要處理的錯誤
        """
        if not isinstance(error, RecombinexError):
            error = RecombinexError(str(error), {"original_type": type(error).__name__})

        args = (error.__class__.__name__, error)
        if self.log_to_console:
            logger.error("%s: %s", *args)
        if self._file_handler is not None:
            record = logger.makeRecord(
                logger.name, logging.ERROR, __file__, 0, "%s: %s", args, None
            )
            self._file_handler.handle(record)

        for handler in list(self.handlers):
            handler(error)

    def close(self) -> None:
        """關閉此處理器開啟的日誌檔。"""
        if self._file_handler is not None:
            self._file_handler.close()
            self._file_handler = None


# 單例錯誤處理器
global_error_handler = ErrorHandler()
