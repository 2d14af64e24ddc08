"""
ch_http.db.composer
-------------------

请求构造：把 SQL 文本与参数转换为 HTTP 方法、最终 SQL 与 URL 参数。

规则：
- 方法选择：去掉前导空白并转大写后，以 CREATE/INSERT/UPDATE/DELETE/DROP/ALTER/TRUNCATE
  开头则用 POST，否则 GET（只看首个关键字前缀，不做语法解析）；
- FORMAT 子句：有生效格式时追加 " FORMAT <name>"，但 SQL 已含 FORMAT <word>、
  或带有内联 VALUES 数据时不追加；是否真正追加记录在 format_applied 中；
- 解码格式：SQL 自带 FORMAT <word> 时按该格式解码，否则仅在追加了子句时按生效格式解码；
- URL 参数：query 为最终 SQL，其余非保留参数原样转为字符串后一并转发。
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import urlencode

from ch_http.db.config import ClickHouseConfig
from ch_http.logger import get_logger

_logger = get_logger(__name__)

Scalar = Union[str, int, float, bool]

RESERVED_KEYS = ("format", "method")
WRITE_KEYWORDS = ("CREATE", "INSERT", "UPDATE", "DELETE", "DROP", "ALTER", "TRUNCATE")
DEFAULT_INSERT_FORMAT = "JSONEachRow"
_KNOWN_FORMATS = {"JSONEACHROW": "JSONEachRow", "JSON": "JSON"}

_FORMAT_TOKEN_RE = re.compile(r"FORMAT\s+(\w+)")
_INSERT_VALUES_RE = re.compile(
    r"^\s*INSERT\s+INTO\s+(?:`[^`]*`|\"[^\"]*\"|[\w.])+\s*(\([^)]*\))?\s*VALUES\b")


@dataclass
class QueryRequest:
    """
    单次查询请求。

    format / method 是独立字段，其余参数放在 settings 中作为 URL 参数转发，
    因此保留键不会出现在 URL 参数里。
    """

    sql: str
    format: Optional[str] = None
    method: Optional[str] = None
    settings: Dict[str, Scalar] = field(default_factory=dict)

    @classmethod
    def from_params(cls, sql: str, params: Optional[Mapping[str, Any]] = None) -> "QueryRequest":
        params = params or {}
        settings = {k: v for k, v in params.items() if k not in RESERVED_KEYS}
        return cls(
            sql=sql,
            format=params.get("format"),
            method=params.get("method"),
            settings=settings,
        )


@dataclass
class ComposedRequest:
    """构造完成的请求：方法、最终 SQL、URL 参数以及格式信息。"""

    method: str
    sql: str
    url_params: List[Tuple[str, str]]
    format: Optional[str]
    format_applied: bool
    body: Optional[bytes] = None
    decode_format: Optional[str] = None

    @property
    def query_string(self) -> str:
        return urlencode(self.url_params)

    def url(self, base_url: str) -> str:
        return f"{base_url}?{self.query_string}"


def detect_method(sql: str) -> str:
    """按首个关键字前缀判断 HTTP 方法：写操作 / DDL 用 POST，其余用 GET。"""
    head = sql.lstrip().upper()
    if head.startswith(WRITE_KEYWORDS):
        return "POST"
    return "GET"


def has_format_clause(sql: str) -> bool:
    return _FORMAT_TOKEN_RE.search(sql.upper()) is not None


def existing_format(sql: str) -> Optional[str]:
    """返回 SQL 中最后一个 FORMAT <word> 的格式名（按原文大小写），没有则返回 None。"""
    matches = list(_FORMAT_TOKEN_RE.finditer(sql.upper()))
    if not matches:
        return None
    last = matches[-1]
    return _KNOWN_FORMATS.get(last.group(1), sql[last.start(1):last.end(1)])


def has_inline_values(sql: str) -> bool:
    """
    判断 SQL 是否带内联 VALUES 数据（此时在末尾追加 FORMAT 会破坏语法）。

    命中任一即可：
    1) 任意位置出现 "VALUES("；
    2) 形如 "INSERT INTO <table> [(cols)] VALUES ..." 的前缀。
    """
    upper = sql.upper()
    return "VALUES(" in upper or _INSERT_VALUES_RE.match(upper) is not None


def _to_param_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_url_params(
    final_sql: str,
    settings: Mapping[str, Any],
    sorted_params: bool = False,
) -> List[Tuple[str, str]]:
    """
    组装 URL 参数列表：query 在前，其余参数按插入顺序（或按键名排序）。

    保留键 format / method 即使出现在 settings 中也会被跳过。
    """
    extra = [(str(k), _to_param_str(v)) for k, v in settings.items() if k not in RESERVED_KEYS]
    if sorted_params:
        extra.sort(key=lambda kv: kv[0])
    return [("query", final_sql)] + extra


def compose(
    sql: str,
    params: Optional[Mapping[str, Any]],
    config: ClickHouseConfig,
) -> ComposedRequest:
    """
    根据 SQL 与参数构造请求。

    输入：
        sql: 原始 SQL 文本；
        params: 可选参数字典，format / method 为保留键，其余作为 URL 参数；
        config: 客户端配置（提供默认格式、兼容模式、参数排序选项）。
    输出：
        ComposedRequest。
    逻辑：
        1. 生效格式 = params.format（未给出或为 None 时取 config.format，空字符串表示不追加）；
        2. 方法 = params.method，否则按关键字前缀推断（兼容模式固定 GET）；
        3. 满足条件时追加 FORMAT 子句，并记录 format_applied；
        4. 确定解码格式：SQL 自带 FORMAT 时取该格式，否则取追加的格式；
        5. 组装 URL 参数。
    """
    request = QueryRequest.from_params(sql, params)
    effective_format = config.format if request.format is None else request.format

    if request.method:
        method = request.method.upper()
    elif config.legacy_compose:
        method = "GET"
    else:
        method = detect_method(sql)

    final_sql = sql
    format_applied = False
    decode_format = existing_format(sql)
    if effective_format and decode_format is None:
        if config.legacy_compose or not has_inline_values(sql):
            final_sql = f"{sql} FORMAT {effective_format}"
            format_applied = True
            decode_format = effective_format

    composed = ComposedRequest(
        method=method,
        sql=final_sql,
        url_params=build_url_params(final_sql, request.settings, config.sorted_params),
        format=effective_format or None,
        format_applied=format_applied,
        body=b"" if method == "POST" else None,
        decode_format=decode_format,
    )
    _logger.debug("构造请求：method=%s format_applied=%s sql=%s", method, format_applied, final_sql)
    return composed


def serialize_rows(rows: Sequence[Any], fmt: str) -> str:
    """
    按插入格式序列化行数据。

    - JSONEachRow：每行单独编码为紧凑 JSON，以 "\\n" 连接；
    - JSON：整体包装为 {"data": rows} 后编码一次；
    - 其他格式：退化为 str(rows)，不保证服务端可解析。
    """
    if fmt == "JSONEachRow":
        return "\n".join(
            json.dumps(row, ensure_ascii=False, separators=(",", ":")) for row in rows
        )
    if fmt == "JSON":
        return json.dumps({"data": list(rows)}, ensure_ascii=False, separators=(",", ":"))
    _logger.warning("插入格式 %s 无专门序列化规则，已退化为字符串表示，服务端可能无法解析。", fmt)
    return str(rows)


def compose_insert(
    table_name: str,
    rows: Sequence[Any],
    params: Optional[Mapping[str, Any]] = None,
) -> ComposedRequest:
    """
    构造 INSERT 请求：固定 POST，URL 仅携带 query，行数据放在请求体。

    插入格式只取 params.format（默认 JSONEachRow），与客户端默认格式无关；
    FORMAT 子句总是显式追加，不经过 VALUES 保护。
    """
    fmt = (params or {}).get("format") or DEFAULT_INSERT_FORMAT
    sql = f"INSERT INTO {table_name} FORMAT {fmt}"
    body = serialize_rows(rows, fmt).encode("utf-8")
    return ComposedRequest(
        method="POST",
        sql=sql,
        url_params=[("query", sql)],
        format=fmt,
        format_applied=True,
        body=body,
    )
