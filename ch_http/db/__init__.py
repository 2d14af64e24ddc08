"""
ch_http.db: ClickHouse HTTP 查询接口客户端。

当前实现：
- ClickHouseConfig：只读配置；
- ClickHouseClient：query / insert / ping 等公开方法，返回 (结果, 错误) 二元组；
- composer / decoder / transport：请求构造、响应解析与基于 requests 的传输层。

注意：
- 不直接读取 YAML / .env，由 ch_http.utils 负责配置注入。
"""

from __future__ import annotations

from .client import ClickHouseClient
from .config import ClickHouseConfig
from .errors import ClientError
from .transport import TransportResponse, http_transport

__all__ = [
    "ClickHouseClient",
    "ClickHouseConfig",
    "ClientError",
    "http_transport",
    "TransportResponse",
]
