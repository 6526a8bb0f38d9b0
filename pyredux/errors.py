"""
PyRedux 錯誤處理模組。

定義 Store、Reducer 組合與 Action 驗證時可能拋出的所有異常。
所有異常皆為同步拋出，核心不做任何重試。
"""
import traceback
from typing import Any, Dict, Optional


class PyReduxError(Exception):
    """所有 PyRedux 異常的基礎類。"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.traceback = "".join(traceback.format_stack(limit=8)[:-1])

    def to_dict(self) -> Dict[str, Any]:
        """
        將異常轉換為可序列化的字典。

        Returns:
            包含錯誤類型、訊息與細節的字典。
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": dict(self.details),
            "traceback": self.traceback,
        }

    def __str__(self) -> str:
        return self.message


class ArgumentError(PyReduxError, TypeError):
    """必須為函數的參數不可調用，或建構參數有歧義。"""

    def __init__(self, message: str, argument: Optional[str] = None, value: Any = None, **kwargs: Any):
        details = {"argument": argument, "value_type": type(value).__name__}
        details.update(kwargs)
        super().__init__(message, details)
        self.argument = argument


class ActionShapeError(PyReduxError, TypeError):
    """dispatch 收到非映射的 action，或 action 缺少 type。"""

    def __init__(self, message: str, action: Any = None, **kwargs: Any):
        details = {"action_repr": repr(action)[:200], "value_type": type(action).__name__}
        details.update(kwargs)
        super().__init__(message, details)


class ReentrancyError(PyReduxError, RuntimeError):
    """在 reducer 執行期間呼叫了 get_state / subscribe / unsubscribe / dispatch。"""

    def __init__(self, message: str, operation: str, **kwargs: Any):
        details = {"operation": operation}
        details.update(kwargs)
        super().__init__(message, details)
        self.operation = operation


class ReducerContractError(PyReduxError):
    """Reducer 違反約定，例如返回 None。"""

    def __init__(
        self,
        message: str,
        reducer_key: Optional[str] = None,
        action_type: Any = None,
        **kwargs: Any
    ):
        details = {"reducer_key": reducer_key, "action_type": action_type}
        details.update(kwargs)
        super().__init__(message, details)
        self.reducer_key = reducer_key
        self.action_type = action_type


class ObserverError(PyReduxError, TypeError):
    """observable().subscribe 收到的 observer 不是物件。"""

    def __init__(self, message: str, observer: Any = None, **kwargs: Any):
        details = {"value_type": type(observer).__name__}
        details.update(kwargs)
        super().__init__(message, details)
