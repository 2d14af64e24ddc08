"""
ch_http: ClickHouse HTTP 查询接口的轻量客户端。

对外提供：
- ClickHouseClient / ClickHouseConfig / ClientError；
- load_client_config: 从 YAML（+ .env）构造配置。
"""

from __future__ import annotations

from ch_http.db import ClickHouseClient, ClickHouseConfig, ClientError
from ch_http.utils import load_client_config

__all__ = ["ClickHouseClient", "ClickHouseConfig", "ClientError", "load_client_config"]
__version__ = "0.1.0"
