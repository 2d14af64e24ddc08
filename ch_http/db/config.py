"""
ch_http.db.config
-----------------

ClickHouse HTTP 客户端配置对象。

设计原则：
- 构造后不可变（frozen dataclass），可在多线程间共享；
- 不直接读取 YAML / .env，由 ch_http.utils.config_loader 负责注入；
- base_url 由 host / port 实时推导，不单独存储。
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

DEFAULT_FORMAT = "JSONEachRow"


@dataclass(frozen=True)
class ClickHouseConfig:
    """
    ClickHouse HTTP 接口配置。

    输入：
        host: 服务端主机名，默认 "localhost"。
        port: HTTP 端口（1-65535），默认 8123。
        username: 用户名，默认 "default"。
        password: 密码；为空字符串时不发送 X-ClickHouse-Key（匿名）。
        database: 默认数据库，默认 "default"。
        timeout: 请求超时时间（秒），原样交给传输层。
        format: 默认输出格式，如 "JSONEachRow" / "JSON" / "TabSeparated"；
                为 None 或空字符串时不追加 FORMAT 子句，直接返回原始文本。
        legacy_compose: 兼容旧版行为：总是 GET，且不做 VALUES 保护。
        sorted_params: URL 附加参数按键名排序（便于结果可复现）。

    输出：
        无，作为 ClickHouseClient 的参数对象使用。
    """

    host: str = "localhost"
    port: int = 8123
    username: str = "default"
    password: str = ""
    database: str = "default"
    timeout: float = 30
    format: Optional[str] = DEFAULT_FORMAT
    legacy_compose: bool = False
    sorted_params: bool = False

    def __post_init__(self) -> None:
        if not self.host:
            raise ValueError("ClickHouse 配置错误：host 不能为空。")
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ValueError(f"ClickHouse 配置错误：port 必须为整数，当前为 {self.port!r}。")
        if not 1 <= self.port <= 65535:
            raise ValueError(f"ClickHouse 配置错误：port 超出范围 1-65535：{self.port}。")
        if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)) or self.timeout <= 0:
            raise ValueError(f"ClickHouse 配置错误：timeout 必须为正数，当前为 {self.timeout!r}。")

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}/"

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ClickHouseConfig":
        """
        从字典（如 YAML 解析结果）构造配置。

        说明：
        - 兼容 "user" 作为 "username" 的别名；
        - 值为 None 的字段视为未配置，使用默认值；
        - port / timeout 可为数字字符串（如来自 YAML 或环境变量）；
        - 未知字段忽略。
        """
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in raw.items():
            if value is None:
                continue
            if key == "user":
                values.setdefault("username", value)
            elif key in known:
                values[key] = value
        if "port" in values and isinstance(values["port"], str) and values["port"].isdigit():
            values["port"] = int(values["port"])
        if "timeout" in values and isinstance(values["timeout"], str):
            try:
                values["timeout"] = float(values["timeout"])
            except ValueError as exc:
                raise ValueError(f"ClickHouse 配置错误：timeout 不是数字：{values['timeout']!r}。") from exc
        return cls(**values)
