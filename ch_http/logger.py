"""
ch_http.logger
--------------

统一日志入口：所有模块通过 get_logger(__name__) 获取 logger。

说明：
- 仅在 "ch_http" 根 logger 上挂一个 StreamHandler，避免重复输出；
- 日志级别默认 INFO，可通过环境变量 CH_HTTP_LOG_LEVEL 覆盖（如 DEBUG）。
"""

from __future__ import annotations

import logging
import os

_ROOT_NAME = "ch_http"
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(_ROOT_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
        root.setLevel(os.getenv("CH_HTTP_LOG_LEVEL", "INFO").upper())
    return root


def get_logger(name: str) -> logging.Logger:
    """
    获取挂在 ch_http 命名空间下的 logger。

    输入：
        name: 一般传入模块的 __name__；不以 "ch_http" 开头时自动挂到其下。
    输出：
        logging.Logger 实例。
    """
    _configure_root()
    if name != _ROOT_NAME and not name.startswith(_ROOT_NAME + "."):
        name = f"{_ROOT_NAME}.{name}"
    return logging.getLogger(name)
