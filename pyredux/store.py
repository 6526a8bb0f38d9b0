import contextlib
import inspect
import logging
from typing import Any, Callable, Generic, List, Optional

import reactivex
from reactivex import Observable, operators as ops
from reactivex.disposable import Disposable

from .actions import Action, ActionTypes, assert_action_shape
from .errors import ArgumentError, ObserverError, ReducerContractError, ReentrancyError
from .types import S, Listener, Reducer, StateSelector, StoreEnhancer, Unsubscribe

logger = logging.getLogger(__name__)


class Subscription:
    """
    observable().subscribe 返回的訂閱物件。
    """

    def __init__(self, unsubscribe: Unsubscribe):
        self._unsubscribe = unsubscribe

    def unsubscribe(self) -> None:
        """取消訂閱，重複呼叫沒有效果。"""
        self._unsubscribe()

    # reactivex 的命名
    dispose = unsubscribe


class StateObservable:
    """
    Store 狀態的最小可觀察對象，用於與 observable / reactive 函式庫互通。

    訂閱時會立即以當前狀態呼叫一次 observer.next，之後每次 dispatch 都再呼叫一次，
    直到取消訂閱為止。
    """

    def __init__(self, store: "Store[Any]"):
        self._store = store

    def subscribe(self, observer: Any) -> Subscription:
        """
        訂閱狀態變化。

        Args:
            observer: 任何物件；若有可調用的 ``next``（或 reactivex 的 ``on_next``）
                屬性，會以最新狀態呼叫。

        Returns:
            帶有 unsubscribe 方法的 Subscription。

        Raises:
            ObserverError: observer 為 None、純量值或普通函數。
        """
        if (
            observer is None
            or isinstance(observer, (str, bytes, int, float, complex))
            or inspect.isroutine(observer)
        ):
            raise ObserverError("Expected the observer to be an object.", observer=observer)

        store = self._store

        def observe_state() -> None:
            next_fn = getattr(observer, "next", None)
            if not callable(next_fn):
                next_fn = getattr(observer, "on_next", None)
            if callable(next_fn):
                next_fn(store.get_state())

        observe_state()
        return Subscription(store.subscribe(observe_state))

    def to_rx(self) -> Observable:
        """
        轉換為 reactivex.Observable，依序發送每次 dispatch 後的狀態。
        """
        def subscribe(observer, scheduler=None):
            subscription = self.subscribe(observer)
            return Disposable(subscription.unsubscribe)

        return reactivex.create(subscribe)


class Store(Generic[S]):
    """
    狀態容器，持有單一狀態值，只能透過 dispatch 更新並通知訂閱者。

    建立時會立即 dispatch 一次保留的 INIT action，讓 reducer 填入初始狀態。
    Store 為單執行緒設計：reducer 執行期間不允許讀取狀態、變更訂閱或巢狀 dispatch。

    None 表示「尚無狀態」：reducer 收到 None 時應返回初始狀態，返回 None 則拋出
    ReducerContractError。因此狀態本身不能是 None，需要「空值」時請使用哨兵物件或空容器。
    """

    def __init__(self, reducer: Reducer[S], preloaded_state: Optional[S] = None):
        """
        建立 Store 並以 INIT action 初始化狀態。

        Args:
            reducer: 計算下一個狀態的純函數。
            preloaded_state: 可選的初始狀態。

        Raises:
            ArgumentError: reducer 不可調用。
            ReducerContractError: reducer 在 INIT 時返回 None。
        """
        if not callable(reducer):
            raise ArgumentError(
                "Expected the reducer to be a function.", argument="reducer", value=reducer
            )

        self._current_reducer = reducer
        self._current_state = preloaded_state
        # 兩者在第一次變更訂閱前指向同一個列表
        self._current_listeners: Optional[List[Listener]] = []
        self._next_listeners: List[Listener] = self._current_listeners
        self._is_dispatching = False
        # 未經中介軟體包裹的 dispatch
        self._raw_dispatch = self._dispatch_core

        self._dispatch_core(Action(ActionTypes.INIT))
        logger.debug("Store initialized with reducer %r", getattr(reducer, "__name__", reducer))

    @contextlib.contextmanager
    def _dispatching(self):
        self._is_dispatching = True
        try:
            yield
        finally:
            self._is_dispatching = False

    def _ensure_can_mutate_next_listeners(self) -> None:
        """
        在變更訂閱前淺拷貝當前的 listener 列表，
        使進行中的 dispatch 所迭代的快照不受影響。
        """
        if self._next_listeners is self._current_listeners:
            self._next_listeners = list(self._current_listeners)

    @property
    def is_dispatching(self) -> bool:
        return self._is_dispatching

    def get_state(self) -> S:
        """
        讀取 Store 管理的當前狀態。

        Raises:
            ReentrancyError: reducer 正在執行。
        """
        if self._is_dispatching:
            raise ReentrancyError(
                "You may not call store.get_state() while the reducer is executing. "
                "The reducer has already received the state as an argument. "
                "Pass it down from the top reducer instead of reading it from the store.",
                operation="get_state",
            )
        return self._current_state

    @property
    def state(self) -> S:
        """get_state() 的屬性形式。"""
        return self.get_state()

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """
        新增一個變更監聽器，每次 dispatch 完成後以無參數呼叫。

        訂閱列表在每次 dispatch 前被快照。在監聽器被呼叫期間訂閱或取消訂閱，
        不會影響進行中的 dispatch，只會作用於下一次 dispatch。

        Args:
            listener: 無參數的回調函數。

        Returns:
            取消訂閱的函數，可重複呼叫。

        Raises:
            ArgumentError: listener 不可調用。
            ReentrancyError: reducer 正在執行。
        """
        if not callable(listener):
            raise ArgumentError(
                "Expected the listener to be a function.", argument="listener", value=listener
            )

        if self._is_dispatching:
            raise ReentrancyError(
                "You may not call store.subscribe() while the reducer is executing. "
                "If you would like to be notified after the store has been updated, "
                "subscribe from outside the reducer and call store.get_state() in the callback.",
                operation="subscribe",
            )

        is_subscribed = True

        self._ensure_can_mutate_next_listeners()
        self._next_listeners.append(listener)

        def unsubscribe() -> None:
            nonlocal is_subscribed
            if not is_subscribed:
                return

            if self._is_dispatching:
                raise ReentrancyError(
                    "You may not unsubscribe from a store listener while the reducer is executing.",
                    operation="unsubscribe",
                )

            is_subscribed = False

            self._ensure_can_mutate_next_listeners()
            self._next_listeners.remove(listener)
            # 下一次 dispatch 會重新凍結 next 列表
            self._current_listeners = None

        return unsubscribe

    def _dispatch_core(self, action: Any) -> Any:
        """
        核心的 dispatch：驗證 action、呼叫 reducer、替換狀態並通知監聽器。

        Returns:
            傳入的 action 本身。
        """
        assert_action_shape(action)

        if self._is_dispatching:
            raise ReentrancyError("Reducers may not dispatch actions.", operation="dispatch")

        with self._dispatching():
            next_state = self._current_reducer(self._current_state, action)

        if next_state is None:
            raise ReducerContractError(
                f'Given action "{action["type"]}", the reducer returned None. '
                "To ignore an action, you must explicitly return the previous state.",
                action_type=action["type"],
            )

        self._current_state = next_state

        listeners = self._current_listeners = self._next_listeners
        for listener in listeners:
            listener()

        return action

    def dispatch(self, action: Any) -> Any:
        """
        分發一個動作，這是觸發狀態變更的唯一方式。

        Args:
            action: 帶有 ``type`` 鍵的映射，例如 ``{"type": "INC"}`` 或 ``Action("INC")``。

        Returns:
            傳入的 Action，方便中介軟體組合。

        Raises:
            ActionShapeError: action 不是映射或缺少 type。
            ReentrancyError: 在 reducer 內呼叫 dispatch。
            ReducerContractError: reducer 返回 None。
        """
        return self._dispatch_core(action)

    def replace_reducer(self, next_reducer: Reducer[Any]) -> "Store[Any]":
        """
        替換 Store 使用的 reducer，用於動態載入或熱重載。

        替換後會 dispatch 保留的 REPLACE action；新舊 reducer 共有的分片
        會收到先前的狀態，只存在於舊狀態中的分片會被丟棄。

        Returns:
            同一個 Store 實例。

        Raises:
            ArgumentError: next_reducer 不可調用。
        """
        if not callable(next_reducer):
            raise ArgumentError(
                "Expected the next_reducer to be a function.",
                argument="next_reducer",
                value=next_reducer,
            )

        self._current_reducer = next_reducer
        logger.debug("Reducer replaced with %r", getattr(next_reducer, "__name__", next_reducer))
        self._raw_dispatch(Action(ActionTypes.REPLACE))
        return self

    def observable(self) -> StateObservable:
        """返回與 observable 函式庫互通的最小可觀察對象。"""
        return StateObservable(self)

    def select(self, selector: Optional[StateSelector] = None) -> Observable:
        """
        選擇狀態的一部分進行觀察。

        Args:
            selector: 一個函數，接收整個狀態並返回希望觀察的部分；省略時觀察整個狀態。

        Returns:
            一個 reactivex.Observable，在選定部分變化時發送 (舊值, 新值) 元組。
        """
        if selector is None:
            selector = _identity

        return self.observable().to_rx().pipe(
            ops.map(selector),
            # 只有當選定的值變化時才發出
            ops.distinct_until_changed(),
            ops.pairwise(),
        )


def _identity(value: Any) -> Any:
    return value


def create_store(
    reducer: Reducer[S],
    preloaded_state: Any = None,
    enhancer: Optional[StoreEnhancer] = None,
) -> Store[S]:
    """
    創建一個新的 Store 實例。

    支援的呼叫形式::

        create_store(reducer)
        create_store(reducer, preloaded_state)
        create_store(reducer, preloaded_state, enhancer)
        create_store(reducer, enhancer)

    Args:
        reducer: 計算下一個狀態的純函數。
        preloaded_state: 可選的初始狀態。
        enhancer: 可選的 Store 增強器，形如 ``(create_store) -> (reducer, preloaded_state) -> store``。
            多個增強器請先用 ``compose`` 合併。

    Returns:
        Store: 新創建的 Store 實例（或增強器返回的 Store）。

    Raises:
        ArgumentError: reducer 或 enhancer 不可調用，或同時傳入了多個增強器。
    """
    if callable(preloaded_state) and callable(enhancer):
        raise ArgumentError(
            "It looks like you are passing several store enhancers to "
            "create_store(). This is not supported. Instead, compose them "
            "together to a single function.",
            argument="enhancer",
            value=enhancer,
        )

    if callable(preloaded_state) and enhancer is None:
        enhancer = preloaded_state
        preloaded_state = None

    if not callable(reducer):
        raise ArgumentError("Expected the reducer to be a function.", argument="reducer", value=reducer)

    if enhancer is not None:
        if not callable(enhancer):
            raise ArgumentError(
                "Expected the enhancer to be a function.", argument="enhancer", value=enhancer
            )
        return enhancer(create_store)(reducer, preloaded_state)

    return Store(reducer, preloaded_state)
