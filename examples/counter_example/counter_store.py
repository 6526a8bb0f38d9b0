import logging

from pyredux import LoggerMiddleware, ThunkMiddleware, apply_middleware, combine_reducers, create_store
from counter_reducers import counter_reducer

logging.basicConfig(level=logging.INFO, format="%(name)s %(levelname)s %(message)s")

# 創建Store
store = create_store(
    combine_reducers({"counter": counter_reducer}),
    apply_middleware(ThunkMiddleware, LoggerMiddleware),
)
