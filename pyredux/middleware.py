"""
基於 PyRedux 的中介軟體定義模組。

中介軟體只透過 Store 增強器（enhancer）的擴充點接入：
apply_middleware 返回一個增強器，用未修改的 create_store 建立 Store，
再把 dispatch 包裹在中介軟體鏈中。
"""
import contextlib
import datetime
import functools
import inspect
import logging
from collections import abc
from typing import Any, Callable, Generator, Optional

from .errors import ArgumentError, ReentrancyError
from .types import (
    ActionContext, DispatchFunction, Middleware, MiddlewareFunction, NextDispatch,
    StoreCreator, StoreEnhancer,
)

logger = logging.getLogger(__name__)


def compose(*funcs: Callable[..., Any]) -> Callable[..., Any]:
    """
    由右至左組合單參數函數，``compose(f, g, h)(x)`` 等同 ``f(g(h(x)))``。

    沒有參數時返回恆等函數。
    """
    if not funcs:
        return lambda arg: arg
    if len(funcs) == 1:
        return funcs[0]
    return functools.reduce(lambda f, g: lambda *args, **kwargs: f(g(*args, **kwargs)), funcs)


def _action_type(action: Any) -> Any:
    if isinstance(action, abc.Mapping):
        return action.get("type")
    return getattr(action, "__name__", type(action).__name__)


# ———— Base Middleware ————
class BaseMiddleware:
    """
    基礎中介類，定義所有中介可能實現的鉤子。

    中介軟體可以介入動作分發的流程，在動作到達 Reducer 前、
    動作處理完成後或出現錯誤時執行自定義邏輯。
    """

    def on_next(self, action: Any, prev_state: Any) -> None:
        """
        在 action 發送給 reducer 之前調用。

        Args:
            action: 正在 dispatch 的 Action
            prev_state: dispatch 之前的 store 狀態
        """

    def on_complete(self, next_state: Any, action: Any) -> None:
        """
        在 reducer 與監聽器處理完 action 之後調用。

        Args:
            next_state: dispatch 之後的最新 store 狀態
            action: 剛剛 dispatch 的 Action
        """

    def on_error(self, error: Exception, action: Any) -> None:
        """
        如果 dispatch 過程中拋出異常，則調用此鉤子。

        Args:
            error: 拋出的異常
            action: 導致異常的 Action
        """

    @contextlib.contextmanager
    def action_context(self, action: Any, prev_state: Any) -> Generator[ActionContext, None, None]:
        """
        以上下文管理器的形式驅動 on_next、on_complete 和 on_error 鉤子。

        Args:
            action: 要分發的 Action
            prev_state: 分發前的狀態

        Yields:
            上下文數據字典；在上下文內設定 ``next_state`` 後才會呼叫 on_complete。
        """
        context: ActionContext = {
            'action': action,
            'prev_state': prev_state,
            'next_state': None,
            'result': None,
            'error': None,
        }

        self.on_next(action, prev_state)

        try:
            yield context
            if context['next_state'] is not None:
                self.on_complete(context['next_state'], action)
        except Exception as err:
            context['error'] = err
            self.on_error(err, action)
            raise


# ———— LoggerMiddleware ————
class LoggerMiddleware(BaseMiddleware):
    """
    日誌中介，記錄每個 action 發送前和發送後的 state。

    使用場景:
    - 偵錯時需要觀察每次 state 的變化。
    - 確保 action 的執行順序正確。
    """

    def __init__(self, level: int = logging.INFO, log: Optional[logging.Logger] = None):
        self.level = level
        self.log = log or logger
        self._timestamp: Optional[datetime.datetime] = None

    @contextlib.contextmanager
    def action_context(self, action: Any, prev_state: Any) -> Generator[ActionContext, None, None]:
        # 巢狀 dispatch 結束後恢復外層的時間戳
        outer_timestamp = self._timestamp
        self._timestamp = datetime.datetime.now()
        try:
            with super().action_context(action, prev_state) as context:
                context['timestamp'] = self._timestamp
                yield context
        finally:
            self._timestamp = outer_timestamp

    def _prefix(self) -> str:
        if self._timestamp:
            return f"[{self._timestamp}] "
        return ""

    def on_next(self, action: Any, prev_state: Any) -> None:
        action_type = _action_type(action)
        self.log.log(self.level, "%s▶️ dispatching %s", self._prefix(), action_type)
        self.log.log(self.level, "%s🔄 state before %s: %r", self._prefix(), action_type, prev_state)

    def on_complete(self, next_state: Any, action: Any) -> None:
        self.log.log(self.level, "%s✅ state after %s: %r", self._prefix(), _action_type(action), next_state)

    def on_error(self, error: Exception, action: Any) -> None:
        self.log.error("%s❌ error in %s: %s", self._prefix(), _action_type(action), error)


# ———— ThunkMiddleware ————
class ThunkMiddleware:
    """
    支援 dispatch 函數 (thunk)，thunk 以 (dispatch, get_state) 呼叫，可在其中多次 dispatch。

    thunk 同步執行，其返回值即為 dispatch 的返回值。

    範例:
        ```python
        def increment_if_odd(dispatch, get_state):
            if get_state()["count"] % 2:
                dispatch({"type": "INC"})

        store.dispatch(increment_if_odd)
        ```
    """

    def __call__(self, store: Any) -> MiddlewareFunction:
        def middleware(next_dispatch: NextDispatch) -> DispatchFunction:
            def dispatch(action: Any) -> Any:
                if callable(action) and not isinstance(action, abc.Mapping):
                    return action(store.dispatch, store.get_state)
                return next_dispatch(action)
            return dispatch
        return middleware


class MiddlewareAPI:
    """
    傳給中介軟體工廠的受限 Store 介面。

    dispatch 永遠指向包裹完成後的 dispatch，因此中介軟體內的 dispatch 會再走一次完整的鏈。
    """

    def __init__(self, get_state: Callable[[], Any]):
        self._get_state = get_state
        self._dispatch: DispatchFunction = self._dispatch_while_constructing

    @staticmethod
    def _dispatch_while_constructing(*args: Any, **kwargs: Any) -> Any:
        raise ReentrancyError(
            "Dispatching while constructing your middleware is not allowed. "
            "Other middleware would not be applied to this dispatch.",
            operation="dispatch",
        )

    def dispatch(self, action: Any) -> Any:
        return self._dispatch(action)

    def get_state(self) -> Any:
        return self._get_state()

    @property
    def state(self) -> Any:
        return self._get_state()


def _wrap_obj_middleware(mw: Any, api: MiddlewareAPI) -> MiddlewareFunction:
    """
    把帶有 on_next / on_complete / on_error 鉤子的物件包裝為中介軟體函數。
    """
    def middleware(next_dispatch: NextDispatch) -> DispatchFunction:
        if hasattr(mw, "action_context"):
            def dispatch(action: Any) -> Any:
                with mw.action_context(action, api.get_state()) as context:
                    result = next_dispatch(action)
                    context['result'] = result
                    context['next_state'] = api.get_state()
                    return result
            return dispatch

        def dispatch(action: Any) -> Any:
            mw.on_next(action, api.get_state())
            try:
                result = next_dispatch(action)
            except Exception as err:
                mw.on_error(err, action)
                raise
            mw.on_complete(api.get_state(), action)
            return result
        return dispatch
    return middleware


def _as_middleware_function(mw: Any, api: MiddlewareAPI) -> MiddlewareFunction:
    if callable(mw):
        return mw(api)
    if isinstance(mw, Middleware):
        return _wrap_obj_middleware(mw, api)
    raise ArgumentError(
        "Expected each middleware to be a factory or an object with "
        "on_next / on_complete / on_error hooks.",
        argument="middleware",
        value=mw,
    )


def apply_middleware(*middlewares: Any) -> StoreEnhancer:
    """
    建立一個把中介軟體套用到 dispatch 的 Store 增強器。

    每個中介軟體可以是：
    - 工廠函數 ``store_api -> next_dispatch -> dispatch``；
    - 帶有 on_next / on_complete / on_error 鉤子的物件（例如 BaseMiddleware 子類實例）；
    - 上述任一的類別，會先被實例化。

    第一個中介軟體在最外層。類別在每次建立 Store 時各自實例化。

    Returns:
        形如 ``(create_store) -> (reducer, preloaded_state) -> store`` 的增強器。
    """
    def enhancer(create_store: StoreCreator) -> StoreCreator:
        def enhanced_create_store(reducer: Any, preloaded_state: Any = None) -> Any:
            store = create_store(reducer, preloaded_state)
            api = MiddlewareAPI(store.get_state)
            instances = [m() if inspect.isclass(m) else m for m in middlewares]
            chain = [_as_middleware_function(mw, api) for mw in instances]
            dispatch = compose(*chain)(store.dispatch)
            api._dispatch = dispatch
            store.dispatch = dispatch
            logger.debug("Applied %d middleware(s) to store", len(chain))
            return store
        return enhanced_create_store
    return enhancer
