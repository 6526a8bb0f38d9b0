"""
基於 PyRedux 的 Reducer 定義模組。

提供 create_reducer / on 兩個建立 reducer 的工具，
以及把多個分片 reducer 合併為單一 reducer 的 combine_reducers。
"""
import logging
from collections import abc
from typing import Any, Callable, Dict, Mapping, Optional

from .config import StoreConfig
from .errors import ReducerContractError
from .types import S, Reducer, ActionLike
from .validation import (
    assert_reducer_shape,
    undefined_state_message,
    unexpected_state_shape_warning,
)

logger = logging.getLogger(__name__)


def create_reducer(initial_state: S, *handlers) -> Reducer[S]:
    """
    創建一個 reducer 函式，用於處理狀態變更。

    Args:
        initial_state: 初始狀態，state 為 None 時使用。
        *handlers: 一系列 (action_type, handler_fn) 元組或使用 on 函式創建的處理器。

    Returns:
        一個 reducer 函式，根據 action 的類型執行對應的處理邏輯。
    """
    action_handlers = {}  # 儲存 action 類型與處理函式的對應關係

    for handler in handlers:
        if isinstance(handler, tuple) and len(handler) == 2:
            action_type, handler_fn = handler
            action_handlers[action_type] = handler_fn
        else:
            action_handlers.update(handler)

    def reducer(state: Optional[S] = None, action: Optional[ActionLike] = None) -> S:
        if state is None:
            state = initial_state
        if action is None:
            return state

        handler = action_handlers.get(action.get("type"))
        if handler:
            return handler(state, action)
        return state  # 沒有對應處理函式，返回原狀態

    reducer.initial_state = initial_state
    reducer.handlers = action_handlers

    return reducer


def on(action_creator_or_type, handler):
    """
    創建一個 action 類型與處理函式的映射。

    Args:
        action_creator_or_type: 帶有 ``type`` 屬性的 Action 創建器，或 Action 類型本身。
        handler: 處理該 Action 的函式，接收 (state, action) 並返回新狀態。

    Returns:
        一個包含 {action_type: handler} 的字典。
    """
    if callable(action_creator_or_type) and hasattr(action_creator_or_type, 'type'):
        action_type = action_creator_or_type.type
    else:
        action_type = action_creator_or_type

    return {action_type: handler}


def combine_reducers(
    reducers: Mapping[str, Any],
    config: Optional[StoreConfig] = None,
) -> Callable[[Optional[Mapping[str, Any]], ActionLike], Mapping[str, Any]]:
    """
    把值為 reducer 的映射合併為單一 reducer。

    合併後的 reducer 會以相同的鍵呼叫每個分片 reducer，並把結果收集為一個字典。
    若沒有任何分片改變，則原樣返回傳入的 state 物件。

    組合時會以保留的 INIT 與隨機探測 action 檢查每個 reducer 一次；
    檢查失敗的錯誤不會立即拋出，而是在之後每次呼叫合併後的 reducer 時重新拋出。

    Args:
        reducers: 分片鍵到 reducer 的映射。值為 None 的項目會記錄警告後忽略，
            其他不可調用的值直接忽略。
        config: 執行配置，預設從環境變數解析。

    Returns:
        合併後的 reducer，帶有 ``reducer_keys`` 屬性。
    """
    if config is None:
        config = StoreConfig.from_env()

    final_reducers: Dict[str, Reducer[Any]] = {}
    for key, reducer in reducers.items():
        if reducer is None and not config.is_production:
            logger.warning('No reducer provided for key "%s"', key)
        if callable(reducer):
            final_reducers[key] = reducer

    # 每個多餘的鍵只警告一次
    unexpected_key_cache: Dict[str, bool] = {}

    # 組合時不拋出，錯誤延遲到每次呼叫 combination
    shape_assertion_error: Optional[Exception] = None
    try:
        assert_reducer_shape(final_reducers)
    except Exception as err:
        shape_assertion_error = err
        logger.debug(
            "Reducer shape assertion failed for %r: %s",
            getattr(err, "reducer_key", None), err,
        )

    def combination(state: Optional[Mapping[str, Any]] = None, action: Optional[ActionLike] = None) -> Mapping[str, Any]:
        if shape_assertion_error is not None:
            # 清空 traceback，重複拋出時不會累積
            raise shape_assertion_error.with_traceback(None)

        if state is None:
            state = {}

        if config.diagnostics_enabled:
            warning_message = unexpected_state_shape_warning(
                state, final_reducers, action, unexpected_key_cache
            )
            if warning_message:
                logger.warning(warning_message)

        is_mapping = isinstance(state, abc.Mapping)
        has_changed = False
        next_state: Dict[str, Any] = {}
        for key, reducer in final_reducers.items():
            previous_state_for_key = state.get(key) if is_mapping else None
            next_state_for_key = reducer(previous_state_for_key, action)
            if next_state_for_key is None:
                raise ReducerContractError(
                    undefined_state_message(key, action),
                    reducer_key=key,
                    action_type=action.get("type") if isinstance(action, abc.Mapping) else None,
                )
            next_state[key] = next_state_for_key
            has_changed = has_changed or next_state_for_key is not previous_state_for_key

        # 分片增減（例如 replace_reducer 之後）也算變更
        has_changed = has_changed or len(final_reducers) != (len(state) if is_mapping else 0)

        return next_state if has_changed else state

    combination.reducer_keys = tuple(final_reducers)
    return combination
