from pyredux import create_action

# ====== Actions ======
increment = create_action("[Counter] Increment")
decrement = create_action("[Counter] Decrement")
reset = create_action("[Counter] Reset")
increment_by = create_action("[Counter] Increment By")

load_count_request = create_action("[Counter] Load Count Request")
load_count_success = create_action("[Counter] Load Count Success")
load_count_failure = create_action("[Counter] Load Count Failure")


def load_count(source):
    """
    thunk：從 source 讀取計數值，依結果 dispatch 成功或失敗的 action。

    Args:
        source: 無參數的函數，返回新的計數值。
    """
    def thunk(dispatch, get_state):
        dispatch(load_count_request())
        try:
            value = source()
        except Exception as err:
            return dispatch(load_count_failure(str(err)))
        return dispatch(load_count_success(value))
    return thunk
