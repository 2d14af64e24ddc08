"""
ch_http.db.client
-----------------

ClickHouse HTTP 查询接口客户端。

设计原则：
- 单次请求 / 单次响应，同步阻塞，不做重试、连接池与缓存；
- 配置对象只读，同一个客户端可在多线程中共享；
- 公开方法不抛出预期内的错误，统一返回 (结果, 错误) 二元组，
  调用方根据错误是否为 None 分支处理。
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from ch_http.db.composer import ComposedRequest, compose, compose_insert
from ch_http.db.config import ClickHouseConfig
from ch_http.db.decoder import decode, rows_to_frame
from ch_http.db.errors import ClientError
from ch_http.db.transport import Transport, build_headers, check_response, http_transport
from ch_http.logger import get_logger
from ch_http.utils.sql_loader import read_sql_file

_logger = get_logger(__name__)

Params = Optional[Mapping[str, Any]]


class ClickHouseClient:
    """
    ClickHouse HTTP 客户端。

    输入：
        config: ClickHouseConfig；为 None 时按 overrides 构造（未给出的字段使用默认值）。
        transport: 可选的传输函数，签名 (method, url, headers, body, timeout)；
                   缺省使用基于 requests 的 http_transport。
        **overrides: 直接传入的配置字段，如 host="ch.example.com", port=8123。
    输出：
        无（构造器）。通过 query / insert / ping 等方法访问服务端。
    """

    def __init__(
        self,
        config: Optional[ClickHouseConfig] = None,
        transport: Optional[Transport] = None,
        **overrides: Any,
    ) -> None:
        if config is None:
            config = ClickHouseConfig.from_mapping(overrides)
        elif overrides:
            raise ValueError("config 与关键字配置参数不能同时传入。")
        self.config = config
        self._transport = transport or http_transport

    @property
    def base_url(self) -> str:
        return self.config.base_url

    def _send(self, request: ComposedRequest) -> str:
        response = self._transport(
            request.method,
            request.url(self.config.base_url),
            build_headers(self.config),
            request.body,
            self.config.timeout,
        )
        return check_response(response)

    def query(self, sql: str, params: Params = None) -> Tuple[Any, Optional[ClientError]]:
        """
        执行一条 SQL。

        输入：
            sql: SQL 文本；
            params: 可选参数：
                - format: 本次查询的输出格式（默认取配置中的 format）；
                - method: 强制使用的 HTTP 方法（"GET" / "POST"）；
                - 其余键值对作为 URL 参数转发（如 max_result_rows）。
        输出：
            (result, None)：成功时 result 为行列表、JSON 值或原始文本；
            (None, ClientError)：传输失败、服务端报错或解析失败。
        """
        request = compose(sql, params, self.config)
        try:
            text = self._send(request)
            return decode(text, request.decode_format is not None, request.decode_format), None
        except ClientError as err:
            return None, err

    def insert(
        self,
        table_name: str,
        rows: Sequence[Any],
        params: Params = None,
    ) -> Tuple[bool, Optional[ClientError]]:
        """
        批量插入数据。

        输入：
            table_name: 目标表名；
            rows: 行数据序列（一般为字典列表）；
            params: 可选参数，仅识别 format（默认 JSONEachRow）。
                    JSONEachRow / JSON 之外的格式会退化为字符串表示，服务端不一定接受。
        输出：
            (True, None) 成功；(False, ClientError) 失败。
        """
        request = compose_insert(table_name, rows, params)
        try:
            self._send(request)
        except ClientError as err:
            return False, err
        _logger.info("已插入 %d 行到 %s（%s）。", len(rows), table_name, request.format)
        return True, None

    def ping(self) -> Tuple[bool, Optional[ClientError]]:
        """执行 SELECT 1 检查连通性；有结果即视为成功，不关心结果内容。"""
        result, err = self.query("SELECT 1", {"format": "TabSeparated"})
        if result is not None:
            return True, None
        return False, err

    def server_info(self) -> Tuple[Any, Optional[ClientError]]:
        return self.query("SELECT version() as version, uptime() as uptime")

    def show_databases(self) -> Tuple[Any, Optional[ClientError]]:
        return self.query("SHOW DATABASES")

    def show_tables(self) -> Tuple[Any, Optional[ClientError]]:
        return self.query("SHOW TABLES")

    def describe_table(self, table_name: str) -> Tuple[Any, Optional[ClientError]]:
        return self.query(f"DESCRIBE TABLE {table_name}")

    def query_df(self, sql: str, params: Params = None) -> Tuple[Optional[pd.DataFrame], Optional[ClientError]]:
        """
        执行查询并返回 DataFrame。

        输出：
            (DataFrame, None)：无数据时为空 DataFrame；
            (None, ClientError)：查询失败或结果为原始文本无法转换。
        """
        result, err = self.query(sql, params)
        if err is not None:
            return None, err
        try:
            return rows_to_frame(result), None
        except ClientError as exc:
            _logger.error(exc.message)
            return None, exc

    def query_file(self, path: Union[str, Path], params: Params = None) -> Tuple[Any, Optional[ClientError]]:
        """读取 .sql 文件并执行；文件不存在等本地问题直接抛出，便于排查。"""
        return self.query(read_sql_file(path), params)
