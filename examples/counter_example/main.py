import json

from counter_store import store
from counter_actions import increment, increment_by, decrement, reset, load_count


def get_count(state):
    return state["counter"].count


def get_counter_info(state):
    counter = state["counter"]
    return {"count": counter.count, "last_updated": counter.last_updated}


if __name__ == "__main__":
    # 訂閱狀態變化
    store.select(get_count).subscribe(
        on_next=lambda t: print(f"計數變化: {t[0]} -> {t[1]}")
    )

    store.select(get_counter_info).subscribe(
        on_next=lambda info_tuple: print(
            f"計數器信息更新: {json.dumps(info_tuple[1], ensure_ascii=False, indent=2)}"
        )
    )

    # 分發actions
    print("\n==== 開始測試基本操作 ====")
    store.dispatch(increment())
    store.dispatch(increment_by(5))
    store.dispatch(decrement())
    store.dispatch(reset(10))
    store.dispatch(increment_by(99))

    # thunk
    print("\n==== 開始測試 thunk ====")
    store.dispatch(load_count(lambda: 42))
    store.dispatch(load_count(lambda: 1 / 0))

    print("\n==== 最終狀態 ====")
    print(store.state)
