import pytest

from pyredux import combine_reducers, create_reducer, on
from pyredux.config import StoreConfig


def counter(state=None, action=None):
    if state is None:
        state = 0
    if action["type"] == "INC":
        return state + 1
    if action["type"] == "DEC":
        return state - 1
    return state


def todos(state=None, action=None):
    if state is None:
        state = ()
    if action["type"] == "ADD_TODO":
        return state + (action["payload"],)
    return state


@pytest.fixture
def dev_config():
    return StoreConfig(env="development", warn_unexpected_keys=True)


@pytest.fixture
def prod_config():
    return StoreConfig(env="production")


@pytest.fixture
def counter_reducer():
    return counter


@pytest.fixture
def todos_reducer():
    return todos


@pytest.fixture
def root_reducer(dev_config):
    return combine_reducers({"count": counter, "todos": todos}, config=dev_config)


@pytest.fixture
def built_counter():
    return create_reducer(
        0,
        on("INC", lambda state, action: state + 1),
        on("ADD", lambda state, action: state + action["payload"]),
    )


