"""
ch_http.utils.sql_loader
------------------------

读取单个 .sql 文件，供 ClickHouseClient.query_file 使用。

注意：
- 去掉首尾空白与末尾分号：HTTP 接口一次只执行一条语句，
  且末尾分号之后无法再追加 FORMAT 子句。
"""

from __future__ import annotations

from pathlib import Path
from typing import Union


def read_sql_file(path: Union[str, Path], encoding: str = "utf-8") -> str:
    """
    读取 .sql 文件内容并返回可直接执行的 SQL 文本。

    输入：
        path: .sql 文件路径（字符串或 Path）；
        encoding: 文本编码，默认 utf-8。
    输出：
        str: 去掉首尾空白与末尾分号后的 SQL。
    异常：
        FileNotFoundError: 文件不存在时抛出；
        IsADirectoryError: 传入路径为目录时抛出；
        ValueError: 文件内容为空时抛出。
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"SQL 文件不存在：{file_path.absolute()}")
    if file_path.is_dir():
        raise IsADirectoryError(f"期望为文件但得到目录：{file_path.absolute()}")

    sql = file_path.read_text(encoding=encoding).strip().rstrip(";").rstrip()
    if not sql:
        raise ValueError(f"SQL 文件内容为空：{file_path.absolute()}")
    return sql
