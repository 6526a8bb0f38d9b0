"""
Reducer 映射的結構檢查。

combine_reducers 在組合時執行一次 assert_reducer_shape，
並在開發模式下用 unexpected_state_shape_warning 提示 state 結構異常。
"""
from collections import abc
from typing import Any, Dict, Mapping, Optional

from .actions import Action, ActionTypes
from .errors import ReducerContractError
from .types import Reducer


def undefined_state_message(key: str, action: Any) -> str:
    action_type = action.get("type") if isinstance(action, abc.Mapping) else None
    action_description = f'action "{action_type}"' if action_type is not None else "an action"
    return (
        f'Given {action_description}, reducer "{key}" returned None. '
        "To ignore an action, you must explicitly return the previous state. "
        "A reducer may never return None."
    )


def assert_reducer_shape(reducers: Mapping[str, Reducer[Any]]) -> None:
    """
    以保留的 INIT 與隨機探測 action 呼叫每個 reducer，確認都不會返回 None。

    Args:
        reducers: 已過濾為可調用值的 reducer 映射。

    Raises:
        ReducerContractError: 某個 reducer 在初始化或探測時返回 None。
    """
    for key, reducer in reducers.items():
        initial_state = reducer(None, Action(ActionTypes.INIT))
        if initial_state is None:
            raise ReducerContractError(
                f'Reducer "{key}" returned None during initialization. '
                "If the state passed to the reducer is None, you must "
                "explicitly return the initial state. The initial state may "
                "not be None.",
                reducer_key=key,
                action_type=ActionTypes.INIT,
            )

        probe_type = ActionTypes.probe_unknown_action()
        if reducer(None, Action(probe_type)) is None:
            raise ReducerContractError(
                f'Reducer "{key}" returned None when probed with a random type. '
                f'Don\'t try to handle {ActionTypes.INIT} or other actions in the '
                f'"{ActionTypes.PREFIX}" namespace. They are considered private. '
                "Instead, you must return the current state for any unknown actions, "
                "unless it is None, in which case you must return the initial state, "
                "regardless of the action type.",
                reducer_key=key,
                action_type=probe_type,
            )


def unexpected_state_shape_warning(
    input_state: Any,
    reducers: Mapping[str, Reducer[Any]],
    action: Any,
    unexpected_key_cache: Dict[str, bool],
) -> Optional[str]:
    """
    檢查傳入 combination 的 state 是否與 reducer 鍵相符。

    已報告過的多餘鍵記錄在 unexpected_key_cache 中，每個鍵只報告一次。

    Returns:
        警告訊息，沒有問題時返回 None。
    """
    reducer_keys = list(reducers)
    action_type = action.get("type") if isinstance(action, abc.Mapping) else None
    if action_type == ActionTypes.INIT:
        argument_name = "preloaded_state argument passed to create_store"
    else:
        argument_name = "previous state received by the reducer"

    if not reducer_keys:
        return (
            "Store does not have a valid reducer. Make sure the argument passed "
            "to combine_reducers is a mapping whose values are reducers."
        )

    if not isinstance(input_state, abc.Mapping):
        return (
            f'The {argument_name} has unexpected type of "{type(input_state).__name__}". '
            "Expected argument to be a mapping with the following "
            f'keys: "{", ".join(map(str, reducer_keys))}"'
        )

    unexpected_keys = [
        key for key in input_state
        if key not in reducers and not unexpected_key_cache.get(key)
    ]
    for key in unexpected_keys:
        unexpected_key_cache[key] = True

    if action_type == ActionTypes.REPLACE:
        return None

    if unexpected_keys:
        noun = "keys" if len(unexpected_keys) > 1 else "key"
        return (
            f'Unexpected {noun} "{", ".join(map(str, unexpected_keys))}" found in {argument_name}. '
            "Expected to find one of the known reducer keys instead: "
            f'"{", ".join(map(str, reducer_keys))}". Unexpected keys will be ignored.'
        )
    return None
