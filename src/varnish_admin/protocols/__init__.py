# src/varnish_admin/protocols/__init__.py
"""
Varnish CLI 协议层 (Protocol Layer)

本包负责协议文本的纯粹构建 (Build) 与解析 (Parse)。

- 不包含任何 socket 操作或网络 I/O。
- 不包含任何状态管理 (State)。
- 不依赖于 core 或 network 层。
"""

from . import constants
from .auth import build_auth_command, compute_auth_response, extract_challenge
from .framing import (
    ResponseFrame,
    build_command_line,
    decode_body,
    parse_status_line,
)
from .status import is_running, parse_child_state
from .versions import CommandSet, ProtocolVersion, resolve_version

# 公共 API
__all__ = [
    "constants",
    "ResponseFrame",
    "build_command_line",
    "parse_status_line",
    "decode_body",
    "extract_challenge",
    "compute_auth_response",
    "build_auth_command",
    "parse_child_state",
    "is_running",
    "CommandSet",
    "ProtocolVersion",
    "resolve_version",
]
