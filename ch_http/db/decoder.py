"""
ch_http.db.decoder
------------------

按生效格式解析 ClickHouse 响应文本。

- 未追加 FORMAT 子句：原样返回文本（空文本返回空字典，表示成功但无结构化数据）；
- JSONEachRow：逐行解析为 list；
- JSON：整体解析，若为含 data 字段的字典则取 data；
- 其他格式：原样返回文本。
"""

from __future__ import annotations

import json
import re
from typing import Any, List, Optional

import pandas as pd

from ch_http.db.errors import ClientError
from ch_http.logger import get_logger

_logger = get_logger(__name__)

_LINE_SPLIT_RE = re.compile(r"[\r\n]+")


def _parse_json_each_row(text: str) -> List[Any]:
    rows: List[Any] = []
    for line in _LINE_SPLIT_RE.split(text):
        if not line.strip():
            continue
        try:
            rows.append(json.loads(line))
        except ValueError as exc:
            msg = f"JSON 解析失败：{line}"
            _logger.error(msg)
            raise ClientError(msg) from exc
    return rows


def _parse_json(text: str) -> Any:
    try:
        payload = json.loads(text)
    except ValueError as exc:
        msg = f"JSON 响应解析失败：{exc!s}"
        _logger.error(msg)
        raise ClientError(msg) from exc
    # JSON 格式的响应是 {meta, data, rows, ...} 包装，兼容裸数据
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


def decode(text: str, format_applied: bool, fmt: Optional[str]) -> Any:
    """
    解析响应文本。

    输入：
        text: 响应体文本；
        format_applied: 响应是否受 FORMAT 子句约束（追加的或 SQL 自带的）；
        fmt: 解码格式。
    输出：
        list（JSONEachRow）、任意 JSON 值（JSON）或原始字符串。
    异常：
        ClientError: JSON 解析失败时抛出。
    """
    if not format_applied:
        return text if text else {}
    if fmt == "JSONEachRow":
        return _parse_json_each_row(text) if text.strip() else []
    if fmt == "JSON":
        return _parse_json(text) if text.strip() else {}
    return text


def rows_to_frame(result: Any) -> pd.DataFrame:
    """
    将解析结果转换为 DataFrame。

    - 空结果（空 list / 空 dict）返回空 DataFrame；
    - 行序列或单个字典正常转换；
    - 原始文本无法转换，抛出 ClientError。
    """
    if not result:
        return pd.DataFrame()
    if isinstance(result, str):
        raise ClientError("查询结果为原始文本，无法转换为 DataFrame，请使用 JSONEachRow 或 JSON 格式。")
    if isinstance(result, dict):
        result = [result]
    try:
        return pd.DataFrame(result)
    except (ValueError, TypeError) as exc:
        raise ClientError(f"无法将查询结果转换为 DataFrame，结果类型为：{type(result)!r}。") from exc
