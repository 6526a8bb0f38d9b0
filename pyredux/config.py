"""
PyRedux 配置模組。

以 pydantic 模型描述執行模式，並可從環境變數解析：

- ``PYREDUX_ENV``: ``development``（預設）或 ``production``
- ``PYREDUX_WARN_UNEXPECTED_KEYS``: 是否在開發模式下警告多餘的 state 鍵
"""
import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict
from typing_extensions import Literal

ENV_VAR = "PYREDUX_ENV"
WARN_UNEXPECTED_KEYS_VAR = "PYREDUX_WARN_UNEXPECTED_KEYS"

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "no", "n", "off"}


def _env_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return default


class StoreConfig(BaseModel):
    """
    Store 與 reducer 組合的執行配置。

    Attributes:
        env: 執行模式，production 會關閉所有開發期診斷。
        warn_unexpected_keys: 開發模式下，是否警告 state 中沒有對應 reducer 的鍵。
    """

    model_config = ConfigDict(frozen=True)

    env: Literal["development", "production"] = "development"
    warn_unexpected_keys: bool = True

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def diagnostics_enabled(self) -> bool:
        """開發模式且允許警告時才輸出診斷日誌。"""
        return not self.is_production and self.warn_unexpected_keys

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StoreConfig":
        """
        從環境變數建立配置。

        Args:
            environ: 環境變數映射，預設為 os.environ。

        Returns:
            解析後的 StoreConfig。無法識別的 env 值視為 development。
        """
        if environ is None:
            environ = os.environ
        env = environ.get(ENV_VAR, "development").strip().lower()
        if env not in ("development", "production"):
            env = "development"
        return cls(
            env=env,
            warn_unexpected_keys=_env_bool(environ.get(WARN_UNEXPECTED_KEYS_VAR), True),
        )
