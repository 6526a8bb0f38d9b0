"""
基於 PyRedux 的 Action 定義模組。

此模組提供 Action 類別、創建 Action 的功能、保留的 action 類型，
以及將 action 創建器綁定到 dispatch 的工具。
Actions 是描述狀態變更意圖的不可變映射。
"""
import functools
import uuid
from collections import abc
from typing import Any, Callable, Dict, Generic, Iterator, Mapping, Optional, Union

from immutables import Map

from .errors import ActionShapeError, ArgumentError
from .types import P, DispatchFunction


class Action(abc.Mapping, Generic[P]):
    """
    表示一個有類型和可選負載的動作。

    Action 同時是一個唯讀映射（鍵為 ``type`` 與 ``payload``），
    因此可以直接交給 ``Store.dispatch``，也可以用屬性讀取。

    泛型參數:
        P: 負載的類型

    屬性:
        type: 動作的類型
        payload: 動作的負載數據（可選）
    """
    __slots__ = ('type', 'payload')

    _keys = ('type', 'payload')

    def __init__(self, type: Any, payload: Optional[P] = None):
        super().__setattr__('type', type)
        super().__setattr__('payload', payload)

    def __setattr__(self, name, value):
        if name not in self.__slots__:
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")
        if hasattr(self, name):
            raise AttributeError(f"Cannot modify immutable instance attribute '{name}'")
        super().__setattr__(name, value)

    def __getitem__(self, key: str) -> Any:
        if key == 'type':
            return self.type
        if key == 'payload':
            return self.payload
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __hash__(self):
        return hash((self.type, self.payload))

    def __repr__(self):
        return f"Action(type={self.type!r}, payload={self.payload!r})"


def _random_string() -> str:
    # 與使用者自訂的類型碰撞的機率可以忽略
    return ".".join(uuid.uuid4().hex[:6])


class ActionTypes:
    """
    Store 私有的保留 action 類型。

    INIT 與 REPLACE 在模組載入時產生一次；probe_unknown_action 每次呼叫都產生新的類型，
    用於檢查 reducer 是否正確處理未知的 action。
    應用程式的 reducer 絕不應該處理這些類型。
    """
    PREFIX = "@@pyredux/"
    INIT = f"{PREFIX}INIT{_random_string()}"
    REPLACE = f"{PREFIX}REPLACE{_random_string()}"

    @staticmethod
    def probe_unknown_action() -> str:
        return f"{ActionTypes.PREFIX}PROBE_UNKNOWN_ACTION{_random_string()}"


def is_plain_action(obj: Any) -> bool:
    """判斷 obj 是否為帶有 type 的映射型 action。"""
    return isinstance(obj, abc.Mapping) and obj.get('type') is not None


def assert_action_shape(action: Any) -> None:
    """
    在 dispatch 邊界驗證 action 的結構。

    Raises:
        ActionShapeError: action 不是映射，或 type 缺失 / 為 None。
    """
    if not isinstance(action, abc.Mapping):
        raise ActionShapeError(
            f"Actions must be mappings with a 'type' key, got {type(action).__name__}. "
            "Use custom middleware for functions or other dispatchable values.",
            action=action,
        )
    if action.get('type') is None:
        raise ActionShapeError(
            "Actions may not have a missing or None 'type'. "
            "Have you misspelled a constant?",
            action=action,
        )


def _process_payload(payload: Any) -> Any:
    """將字典 payload 轉為不可變的 immutables.Map。"""
    if isinstance(payload, dict):
        return Map(payload)
    return payload


def create_action(action_type: Any, prepare_fn: Optional[Callable[..., Any]] = None) -> Callable[..., Action[Any]]:
    """
    創建一個 Action 生成器函數。

    Args:
        action_type: Action 的類型標識符
        prepare_fn: 可選的預處理函數，用於在創建 Action 前處理輸入參數

    Returns:
        一個可調用的函數，用於生成指定類型的 Action，並帶有 ``type`` 屬性

    範例:
        >>> increment = create_action("[Counter] Increment")
        >>> increment()
        Action(type='[Counter] Increment', payload=None)
        >>> add = create_action("[Counter] Add", lambda amount: amount)
        >>> add(5)
        Action(type='[Counter] Add', payload=5)
    """
    def action_creator(*args: Any, **kwargs: Any) -> Action[Any]:
        if prepare_fn:
            return Action(action_type, _process_payload(prepare_fn(*args, **kwargs)))
        if len(args) == 1 and not kwargs:
            return Action(action_type, _process_payload(args[0]))
        if args or kwargs:
            payload: Dict[Union[int, str], Any] = dict(zip(range(len(args)), args))
            payload.update(kwargs)
            return Action(action_type, _process_payload(payload))
        # 無參數，無負載
        return Action(action_type)

    action_creator.type = action_type  # type: ignore
    return action_creator


def _bind_action_creator(action_creator: Callable[..., Any], dispatch: DispatchFunction) -> Callable[..., Any]:
    @functools.wraps(action_creator)
    def bound(*args: Any, **kwargs: Any) -> Any:
        return dispatch(action_creator(*args, **kwargs))
    return bound


def bind_action_creators(
    action_creators: Union[Callable[..., Any], Mapping[str, Any]],
    dispatch: DispatchFunction,
) -> Union[Callable[..., Any], Dict[str, Callable[..., Any]]]:
    """
    把 action 創建器包裝成直接 dispatch 的函數。

    Args:
        action_creators: 單個創建器，或值為創建器的映射。映射中不可調用的值會被忽略。
        dispatch: Store 的 dispatch 函數。

    Returns:
        傳入單個函數時返回單個綁定函數；傳入映射時返回同鍵的字典。

    Raises:
        ArgumentError: action_creators 既不是函數也不是映射。
    """
    if callable(action_creators):
        return _bind_action_creator(action_creators, dispatch)

    if not isinstance(action_creators, abc.Mapping):
        raise ArgumentError(
            "bind_action_creators expected a mapping or a function, "
            f"instead received {type(action_creators).__name__}.",
            argument="action_creators",
            value=action_creators,
        )

    return {
        key: _bind_action_creator(creator, dispatch)
        for key, creator in action_creators.items()
        if callable(creator)
    }
