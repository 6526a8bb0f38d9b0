import time
from typing import Optional

from pydantic import BaseModel
from pyredux import create_reducer, on
from counter_actions import (
    increment,
    decrement,
    reset,
    increment_by,
    load_count_request,
    load_count_success,
    load_count_failure,
)


# ====== Model Definition ======
class CounterState(BaseModel):
    count: int = 0
    loading: bool = False
    error: Optional[str] = None
    last_updated: Optional[float] = None


# ====== Handlers ======
def increment_handler(state: CounterState, action) -> CounterState:
    return state.model_copy(update={"count": state.count + 1, "last_updated": time.time()})


def decrement_handler(state: CounterState, action) -> CounterState:
    return state.model_copy(update={"count": state.count - 1, "last_updated": time.time()})


def reset_handler(state: CounterState, action) -> CounterState:
    return state.model_copy(update={"count": action.payload or 0, "last_updated": time.time()})


def increment_by_handler(state: CounterState, action) -> CounterState:
    return state.model_copy(update={"count": state.count + action.payload, "last_updated": time.time()})


def load_count_request_handler(state: CounterState, action) -> CounterState:
    return state.model_copy(update={"loading": True, "error": None})


def load_count_success_handler(state: CounterState, action) -> CounterState:
    return state.model_copy(
        update={"loading": False, "count": action.payload, "last_updated": time.time()}
    )


def load_count_failure_handler(state: CounterState, action) -> CounterState:
    return state.model_copy(update={"loading": False, "error": action.payload})


# ====== Reducer ======
counter_reducer = create_reducer(
    CounterState(),
    on(increment, increment_handler),
    on(decrement, decrement_handler),
    on(reset, reset_handler),
    on(increment_by, increment_by_handler),
    on(load_count_request, load_count_request_handler),
    on(load_count_success, load_count_success_handler),
    on(load_count_failure, load_count_failure_handler),
)
