"""Store construction, dispatch, subscription and reducer replacement."""

import pytest

from pyredux import (
    Action,
    ActionShapeError,
    ActionTypes,
    ArgumentError,
    ReducerContractError,
    ReentrancyError,
    Store,
    combine_reducers,
    create_store,
)


class TestCreateStore:
    def test_seeds_state_with_init_action(self, counter_reducer):
        seen = []

        def reducer(state=None, action=None):
            seen.append(action["type"])
            return counter_reducer(state, action)

        store = create_store(reducer)

        assert store.get_state() == 0
        assert seen == [ActionTypes.INIT]

    def test_uses_preloaded_state(self, counter_reducer):
        store = create_store(counter_reducer, 41)
        store.dispatch({"type": "INC"})
        assert store.state == 42

    def test_rejects_non_callable_reducer(self):
        with pytest.raises(ArgumentError):
            create_store("not a reducer")

    def test_store_class_rejects_non_callable_reducer(self):
        with pytest.raises(ArgumentError):
            Store(None)

    def test_rejects_non_callable_enhancer(self, counter_reducer):
        with pytest.raises(ArgumentError, match="enhancer"):
            create_store(counter_reducer, 0, "not an enhancer")

    def test_rejects_several_enhancers(self, counter_reducer):
        def enhancer(create):
            return create

        with pytest.raises(ArgumentError, match="several store enhancers"):
            create_store(counter_reducer, enhancer, enhancer)

    def test_second_argument_callable_is_enhancer(self, counter_reducer):
        calls = []

        def enhancer(create):
            def enhanced(reducer, preloaded_state=None):
                calls.append(preloaded_state)
                return create(reducer, preloaded_state)
            return enhanced

        store = create_store(counter_reducer, enhancer)

        assert calls == [None]
        assert store.get_state() == 0

    def test_enhancer_receives_create_store(self, counter_reducer):
        def enhancer(create):
            assert create is create_store

            def enhanced(reducer, preloaded_state=None):
                store = create(reducer, preloaded_state)
                store.enhanced = True
                return store
            return enhanced

        store = create_store(counter_reducer, 5, enhancer)

        assert store.enhanced is True
        assert store.get_state() == 5

    def test_independent_stores(self, counter_reducer):
        first = create_store(counter_reducer)
        second = create_store(counter_reducer)

        first.dispatch({"type": "INC"})

        assert first.get_state() == 1
        assert second.get_state() == 0

    def test_reducer_returning_none_on_init_fails_construction(self):
        with pytest.raises(ReducerContractError):
            create_store(lambda state, action: None)


class TestDispatch:
    def test_returns_the_same_action_object(self, counter_reducer):
        store = create_store(counter_reducer)
        action = {"type": "INC"}
        assert store.dispatch(action) is action

        typed = Action("DEC")
        assert store.dispatch(typed) is typed

    @pytest.mark.parametrize("action", [["INC"], "INC", 1, None, object()])
    def test_rejects_non_mapping_actions(self, counter_reducer, action):
        store = create_store(counter_reducer)
        with pytest.raises(ActionShapeError):
            store.dispatch(action)

    @pytest.mark.parametrize("action", [{}, {"type": None}, {"payload": 1}])
    def test_rejects_actions_without_type(self, counter_reducer, action):
        store = create_store(counter_reducer)
        with pytest.raises(ActionShapeError, match="type"):
            store.dispatch(action)

    def test_accepts_falsy_but_defined_types(self):
        store = create_store(lambda state, action: action["type"] if state is not None else 0)
        store.dispatch({"type": ""})
        assert store.get_state() == ""

    def test_nested_dispatch_from_reducer_is_rejected(self):
        holder = {}

        def reducer(state=None, action=None):
            if action["type"] == "NESTED":
                holder["store"].dispatch({"type": "OTHER"})
            return state if state is not None else 0

        store = holder["store"] = create_store(reducer)

        with pytest.raises(ReentrancyError, match="may not dispatch"):
            store.dispatch({"type": "NESTED"})
        assert store.is_dispatching is False

    def test_get_state_inside_reducer_is_rejected(self):
        holder = {}

        def reducer(state=None, action=None):
            if action["type"] == "PEEK":
                holder["store"].get_state()
            return state if state is not None else 0

        store = holder["store"] = create_store(reducer)

        with pytest.raises(ReentrancyError, match="get_state"):
            store.dispatch({"type": "PEEK"})

    def test_reducer_error_leaves_state_and_skips_listeners(self):
        def reducer(state=None, action=None):
            if action["type"] == "BOOM":
                raise ValueError("boom")
            return {"value": 1} if state is None else state

        store = create_store(reducer)
        before = store.get_state()
        calls = []
        store.subscribe(lambda: calls.append(1))

        with pytest.raises(ValueError, match="boom"):
            store.dispatch({"type": "BOOM"})

        assert store.get_state() is before
        assert calls == []
        # the in-progress flag is released
        store.dispatch({"type": "OK"})
        assert calls == [1]

    def test_reducer_returning_none_leaves_state(self):
        def reducer(state=None, action=None):
            if action["type"] == "FORGET":
                return None
            return 3 if state is None else state

        store = create_store(reducer)
        calls = []
        store.subscribe(lambda: calls.append(1))

        with pytest.raises(ReducerContractError, match="FORGET"):
            store.dispatch({"type": "FORGET"})

        assert store.get_state() == 3
        assert calls == []
        assert store.is_dispatching is False

    def test_dispatch_from_listener_is_allowed(self, counter_reducer):
        store = create_store(counter_reducer)

        def listener():
            if store.get_state() < 3:
                store.dispatch({"type": "INC"})

        store.subscribe(listener)
        store.dispatch({"type": "INC"})

        assert store.get_state() == 3


class TestSubscribe:
    def test_listeners_called_in_registration_order(self, counter_reducer):
        store = create_store(counter_reducer)
        calls = []
        store.subscribe(lambda: calls.append("a"))
        store.subscribe(lambda: calls.append("b"))

        store.dispatch({"type": "INC"})

        assert calls == ["a", "b"]

    def test_listener_called_even_if_state_unchanged(self, counter_reducer):
        store = create_store(counter_reducer)
        calls = []
        store.subscribe(lambda: calls.append(store.get_state()))

        store.dispatch({"type": "NOOP"})

        assert calls == [0]

    def test_rejects_non_callable_listener(self, counter_reducer):
        store = create_store(counter_reducer)
        with pytest.raises(ArgumentError, match="listener"):
            store.subscribe("nope")

    def test_subscribe_inside_reducer_is_rejected(self):
        holder = {}

        def reducer(state=None, action=None):
            if action["type"] == "SUB":
                holder["store"].subscribe(lambda: None)
            return state if state is not None else 0

        store = holder["store"] = create_store(reducer)

        with pytest.raises(ReentrancyError, match="subscribe"):
            store.dispatch({"type": "SUB"})

    def test_unsubscribe_inside_reducer_is_rejected(self):
        holder = {}

        def reducer(state=None, action=None):
            if action["type"] == "UNSUB":
                holder["unsubscribe"]()
            return state if state is not None else 0

        store = holder["store"] = create_store(reducer)
        calls = []
        holder["unsubscribe"] = store.subscribe(lambda: calls.append(1))

        with pytest.raises(ReentrancyError, match="unsubscribe"):
            store.dispatch({"type": "UNSUB"})

        # still subscribed after the rejected attempt
        store.dispatch({"type": "NOOP"})
        assert calls == [1]

    def test_unsubscribe_is_idempotent(self, counter_reducer):
        store = create_store(counter_reducer)
        calls = []
        unsubscribe = store.subscribe(lambda: calls.append(1))

        unsubscribe()
        unsubscribe()
        store.dispatch({"type": "INC"})

        assert calls == []

    def test_unsubscribe_removes_only_its_own_registration(self, counter_reducer):
        store = create_store(counter_reducer)
        calls = []

        def listener():
            calls.append(1)

        first = store.subscribe(listener)
        store.subscribe(listener)

        first()
        first()
        store.dispatch({"type": "INC"})

        assert calls == [1]

    def test_subscribe_in_listener_applies_to_next_dispatch(self, counter_reducer):
        store = create_store(counter_reducer)
        calls = []

        def late():
            calls.append("late")

        def early():
            calls.append("early")
            if len(calls) == 1:
                store.subscribe(late)

        store.subscribe(early)

        store.dispatch({"type": "INC"})
        assert calls == ["early"]

        store.dispatch({"type": "INC"})
        assert calls == ["early", "early", "late"]

    def test_unsubscribe_in_listener_does_not_affect_current_pass(self, counter_reducer):
        store = create_store(counter_reducer)
        calls = []
        unsubscribers = {}

        def first():
            calls.append("first")
            unsubscribers["second"]()

        def second():
            calls.append("second")

        store.subscribe(first)
        unsubscribers["second"] = store.subscribe(second)

        store.dispatch({"type": "INC"})
        assert calls == ["first", "second"]

        store.dispatch({"type": "INC"})
        assert calls == ["first", "second", "first"]

    def test_nested_dispatch_uses_latest_snapshot(self, counter_reducer):
        store = create_store(counter_reducer)
        calls = []

        def late():
            calls.append(("late", store.get_state()))

        def trigger():
            calls.append(("trigger", store.get_state()))
            if store.get_state() == 1:
                store.subscribe(late)
                store.dispatch({"type": "INC"})

        store.subscribe(trigger)
        store.dispatch({"type": "INC"})

        assert calls == [("trigger", 1), ("trigger", 2), ("late", 2)]

    def test_listeners_see_latest_state_after_nested_dispatch(self, counter_reducer):
        store = create_store(counter_reducer)
        seen = []

        def bump():
            if store.get_state() == 1:
                store.dispatch({"type": "INC"})

        store.subscribe(bump)
        store.subscribe(lambda: seen.append(store.get_state()))

        store.dispatch({"type": "INC"})

        # every listener registered before the outer dispatch ends with the newest state
        assert seen[-1] == 2


class TestReplaceReducer:
    def test_rejects_non_callable(self, counter_reducer):
        store = create_store(counter_reducer)
        with pytest.raises(ArgumentError):
            store.replace_reducer(42)

    def test_returns_same_store_and_dispatches_replace(self, counter_reducer):
        store = create_store(counter_reducer)
        seen = []

        def next_reducer(state=None, action=None):
            seen.append(action["type"])
            return counter_reducer(state, action)

        assert store.replace_reducer(next_reducer) is store
        assert seen == [ActionTypes.REPLACE]

    def test_replace_notifies_listeners(self, counter_reducer):
        store = create_store(counter_reducer)
        calls = []
        store.subscribe(lambda: calls.append(store.get_state()))

        store.replace_reducer(counter_reducer)

        assert calls == [0]

    def test_shared_keys_keep_previous_state(self, counter_reducer, todos_reducer, dev_config):
        store = create_store(combine_reducers({"count": counter_reducer}, config=dev_config))
        store.dispatch({"type": "INC"})
        store.dispatch({"type": "INC"})

        received = []

        def next_count(state=None, action=None):
            if action["type"] == ActionTypes.REPLACE:
                received.append(state)
            return counter_reducer(state, action)

        store.replace_reducer(
            combine_reducers({"count": next_count, "todos": todos_reducer}, config=dev_config)
        )

        assert received == [2]
        assert store.get_state() == {"count": 2, "todos": ()}

    def test_keys_only_in_old_state_are_dropped(self, counter_reducer, todos_reducer, dev_config):
        store = create_store(
            combine_reducers({"count": counter_reducer, "todos": todos_reducer}, config=dev_config)
        )
        store.dispatch({"type": "INC"})

        store.replace_reducer(combine_reducers({"count": counter_reducer}, config=dev_config))

        assert store.get_state() == {"count": 1}


class TestEndToEnd:
    def test_counter_store(self, counter_reducer, dev_config):
        store = create_store(combine_reducers({"count": counter_reducer}, config=dev_config))

        store.dispatch({"type": "INC"})
        store.dispatch({"type": "INC"})
        assert store.get_state() == {"count": 2}

        before = store.get_state()
        store.dispatch({"type": "NOOP"})
        assert store.get_state() is before

    def test_composed_reducer_broken_on_init_fails_at_construction(self, dev_config):
        def broken(state=None, action=None):
            if action["type"] == ActionTypes.INIT:
                return None
            return state if state is not None else 0

        reducer = combine_reducers({"broken": broken}, config=dev_config)

        with pytest.raises(ReducerContractError, match='"broken"'):
            create_store(reducer)
