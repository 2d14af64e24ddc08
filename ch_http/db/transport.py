"""
ch_http.db.transport
--------------------

基于 requests 的 HTTP 传输层，是唯一接触网络的部分。

约定：
- 传输函数签名：(method, url, headers, body, timeout) -> TransportResponse；
- 网络层异常统一转换为 ClientError；
- 状态码检查由 check_response 完成，非 200 时携带状态码与完整响应体。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

import requests

from ch_http.db.config import ClickHouseConfig
from ch_http.db.errors import ClientError
from ch_http.logger import get_logger

_logger = get_logger(__name__)


@dataclass
class TransportResponse:
    status_code: int
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


Transport = Callable[[str, str, Dict[str, str], Optional[bytes], float], TransportResponse]


def build_headers(config: ClickHouseConfig) -> Dict[str, str]:
    """构造请求头；仅在密码非空时携带 X-ClickHouse-Key。"""
    headers = {
        "Content-Type": "text/plain",
        "X-ClickHouse-User": config.username,
        "X-ClickHouse-Database": config.database,
    }
    if config.password:
        headers["X-ClickHouse-Key"] = config.password
    return headers


def http_transport(
    method: str,
    url: str,
    headers: Dict[str, str],
    body: Optional[bytes],
    timeout: float,
) -> TransportResponse:
    """
    发送一次 HTTP 请求。

    每次调用独立发起 requests.request，不复用连接、不保留 cookie，
    调用之间没有共享状态，可在多线程中直接使用。

    异常：
        ClientError: 网络层异常（连接失败、DNS、超时等）时抛出。
    """
    try:
        resp = requests.request(method, url, headers=headers, data=body, timeout=timeout)
    except requests.RequestException as exc:
        msg = f"HTTP 请求失败：{url}，错误：{exc!s}"
        _logger.error(msg)
        raise ClientError(msg) from exc
    return TransportResponse(status_code=resp.status_code, body=resp.content or b"")


def check_response(response: TransportResponse) -> str:
    """
    检查状态码并返回响应文本。

    异常：
        ClientError: 状态码非 200 时抛出，消息中包含状态码与完整响应体。
    """
    text = response.text
    if response.status_code != 200:
        msg = f"ClickHouse 错误（HTTP {response.status_code}）：{text}"
        _logger.error(msg)
        raise ClientError(msg)
    return text
