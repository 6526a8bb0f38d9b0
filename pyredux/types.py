"""
PyRedux 共用類型定義。

集中定義 Reducer、Listener、Dispatch、Enhancer 與 Middleware 等協議，
供各模組與類型存根引用。
"""
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar

from typing_extensions import Protocol, TypedDict, runtime_checkable

S = TypeVar("S")
T = TypeVar("T")
P = TypeVar("P")

# Action 是帶有 "type" 鍵的映射
ActionLike = Mapping[str, Any]

Reducer = Callable[[Optional[S], ActionLike], S]
ReducersMap = Mapping[str, Reducer[Any]]
Listener = Callable[[], None]
Unsubscribe = Callable[[], None]
DispatchFunction = Callable[[Any], Any]
NextDispatch = Callable[[Any], Any]
GetState = Callable[[], Any]
StateSelector = Callable[[Any], Any]
ThunkFunction = Callable[[DispatchFunction, GetState], Any]

# create_store(reducer, preloaded_state) -> store
StoreCreator = Callable[..., Any]
# (create_store) -> create_store
StoreEnhancer = Callable[[StoreCreator], StoreCreator]

MiddlewareFunction = Callable[[NextDispatch], DispatchFunction]


class StoreAPI(Protocol):
    """中介軟體工廠收到的受限 Store 介面。"""

    def dispatch(self, action: Any) -> Any: ...

    def get_state(self) -> Any: ...


MiddlewareFactory = Callable[[StoreAPI], MiddlewareFunction]


class ActionContext(TypedDict, total=False):
    """BaseMiddleware.action_context 在上下文內外傳遞的數據。"""

    action: Any
    prev_state: Any
    next_state: Any
    result: Any
    error: Optional[BaseException]
    timestamp: Any


@runtime_checkable
class Middleware(Protocol):
    """物件型中介軟體需要實現的鉤子。"""

    def on_next(self, action: Any, prev_state: Any) -> None: ...

    def on_complete(self, next_state: Any, action: Any) -> None: ...

    def on_error(self, error: Exception, action: Any) -> None: ...


class Observer(Protocol[T]):
    """observable().subscribe 接受的觀察者，next 為可選。"""

    def next(self, value: T) -> None: ...


ActionCreatorsMap = Dict[str, Callable[..., Any]]
