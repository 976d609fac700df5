# src/varnish_admin/protocols/framing.py
"""
Varnish CLI 帧的构建 (Build) 与解析 (Parse)。

请求: 单行 ASCII 文本，以 "\\n" 结尾。
响应: 13 字节状态行 "SSS LLLLLLLL\\n" + LLLLLLLL 字节的 body + "\\n"。
"""

import logging
from dataclasses import dataclass
from typing import Tuple

from ..exceptions import ProtocolError
from .constants import FrameConst

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResponseFrame:
    """一次命令往返的结果。

    Attributes:
        status: 3 位状态码。
        body: 响应正文 (可能为多行)。
    """

    status: int
    body: str


def build_command_line(command: str) -> str:
    """构建请求行 (命令 + 换行)。

    命令中不允许出现换行符，否则会被服务器当作多条命令，破坏请求/响应的一一对应。
    """
    if "\n" in command:
        raise ProtocolError(f"命令中不能包含换行符: {command!r}")
    return command + FrameConst.LINE_TERMINATOR


def parse_status_line(header: bytes) -> Tuple[int, int]:
    """解析 13 字节的状态行。

    Returns:
        (status, body_length)

    Raises:
        ProtocolError: 长度不足、缺少换行或数字字段非法。
    """
    if len(header) != FrameConst.HEADER_LEN:
        raise ProtocolError(f"状态行长度不足: {header!r}")

    if not header.endswith(b"\n"):
        raise ProtocolError(f"状态行缺少换行: {header!r}")

    status_part = header[: FrameConst.STATUS_LEN]
    length_part = header[FrameConst.LENGTH_START : FrameConst.LENGTH_END]

    try:
        status = int(status_part)
        length = int(length_part)
    except ValueError:
        raise ProtocolError(f"状态行格式无效: {header!r}") from None

    if length < 0:
        raise ProtocolError(f"响应长度非法: {length}")

    return status, length


def decode_body(raw: bytes) -> str:
    """将响应体字节解码为文本 (无法解码的字节以替换字符显示)。"""
    return raw.decode(FrameConst.ENCODING, errors="replace")
