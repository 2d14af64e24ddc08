"""
ch_http.db.errors: 客户端唯一的错误载体。

ClientError 只携带一条文本消息，不区分错误码；三类来源仅靠消息内容区分：
- 传输失败（网络 / DNS / 连接）；
- 服务端失败（HTTP 状态码非 200，响应体为服务端诊断文本）；
- 本地解码失败（期望 JSON 却无法解析）。
"""

from __future__ import annotations


class ClientError(Exception):
    """ClickHouse HTTP 客户端错误，message 为完整错误描述。"""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message
