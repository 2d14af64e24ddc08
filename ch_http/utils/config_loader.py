"""
ch_http.utils.config_loader: 配置文件读取（YAML + .env）。

YAML 示例：

    clickhouse:
      host: ch.example.com
      port: 8123
      user: analyst
      password_env_var: CH_PASSWORD
      database: events
      format: JSONEachRow
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv

from ch_http.db.config import ClickHouseConfig
from ch_http.logger import get_logger

_logger = get_logger(__name__)


def load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    """
    读取 YAML 文件并返回字典。

    输入：
    - path: 文件路径，可为 str 或 Path。

    输出：
    - 解析得到的字典；若文件为空或顶层不是映射，返回空字典。

    异常：
    - FileNotFoundError: 路径不存在；
    - yaml.YAMLError: 解析失败时由 PyYAML 抛出。
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML 文件不存在：{path.absolute()}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


def load_client_config(
    path: Union[str, Path],
    env_file: Optional[Union[str, Path]] = None,
) -> ClickHouseConfig:
    """
    从 YAML 文件构造 ClickHouseConfig。

    输入：
        path: YAML 路径；优先读取 clickhouse 段，没有则使用顶层键。
        env_file: 可选 .env 路径；为 None 时尝试 YAML 同目录下的 .env。
    输出：
        ClickHouseConfig。
    逻辑：
        1. 读取 YAML；
        2. 若存在 .env 则加载到环境变量（不覆盖已有值）；
        3. 配置了 password_env_var 且未直接给出 password 时，从环境变量读取密码；
        4. 交给 ClickHouseConfig.from_mapping 做别名处理与校验。
    异常：
        FileNotFoundError: YAML 不存在；
        KeyError: password_env_var 指向的环境变量未设置；
        ValueError: 配置值非法（如端口越界）。
    """
    path = Path(path)
    raw = load_yaml(path)
    section = raw.get("clickhouse")
    cfg: Dict[str, Any] = dict(section if isinstance(section, dict) else raw)

    env_path = Path(env_file) if env_file is not None else path.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=False)

    env_var = cfg.pop("password_env_var", None)
    if env_var and not cfg.get("password"):
        password = os.getenv(env_var)
        if password is None:
            msg = (
                f"未在环境变量中找到 ClickHouse 密码：{env_var}。"
                f"请在终端中设置，例如：export {env_var}='你的密码'，或写入 .env 文件。"
            )
            _logger.error(msg)
            raise KeyError(msg)
        cfg["password"] = password

    return ClickHouseConfig.from_mapping(cfg)
