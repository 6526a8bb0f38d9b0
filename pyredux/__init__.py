"""
PyRedux：可預測的單一狀態容器。

狀態只能透過 dispatch 以純函數 reducer 更新，並通知已註冊的監聽器。
"""
from .errors import (
    PyReduxError, ArgumentError, ActionShapeError, ReentrancyError,
    ReducerContractError, ObserverError,
)
from .config import StoreConfig
from .actions import (
    Action, ActionTypes, create_action, bind_action_creators,
    is_plain_action,
)
from .reducers import create_reducer, on, combine_reducers
from .store import Store, StateObservable, Subscription, create_store
from .middleware import (
    BaseMiddleware, LoggerMiddleware, ThunkMiddleware,
    apply_middleware, compose,
)

__version__ = "0.1.0"

# 匯出所有公開 API
__all__ = [
    # Errors
    "PyReduxError", "ArgumentError", "ActionShapeError", "ReentrancyError",
    "ReducerContractError", "ObserverError",

    # Config
    "StoreConfig",

    # Actions
    "Action", "ActionTypes", "create_action", "bind_action_creators",
    "is_plain_action",

    # Reducers
    "create_reducer", "on", "combine_reducers",

    # Store
    "Store", "StateObservable", "Subscription", "create_store",

    # Middleware
    "BaseMiddleware", "LoggerMiddleware", "ThunkMiddleware",
    "apply_middleware", "compose",
]
