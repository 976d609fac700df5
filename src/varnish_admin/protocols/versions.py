# src/varnish_admin/protocols/versions.py
"""
Varnish CLI 协议层 - 版本与命令表 (Command Vocabulary)

不同主版本之间只有 purge-url 命令不同：
- Varnish 3: ``ban.url <regex>``
- Varnish 4: ``ban.url`` 已被移除，改用 ``ban req.url ~ <regex>``
"""

from dataclasses import dataclass
from enum import Enum

from ..exceptions import UnsupportedVersionError
from .constants import DEFAULT_VERSION


@dataclass(frozen=True)
class CommandSet:
    """某一协议版本下的命令字面量表 (只读)。"""

    purge: str
    purge_url: str
    start: str = "start"
    status: str = "status"
    stop: str = "stop"
    quit: str = "quit"
    auth: str = "auth"


class ProtocolVersion(Enum):
    """受支持的 Varnish 主版本。"""

    V3 = 3
    V4 = 4

    @property
    def number(self) -> int:
        return self.value

    @property
    def commands(self) -> CommandSet:
        return _COMMAND_TABLE[self]


_COMMAND_TABLE = {
    ProtocolVersion.V3: CommandSet(purge="ban", purge_url="ban.url"),
    ProtocolVersion.V4: CommandSet(purge="ban", purge_url="ban req.url ~"),
}


def resolve_version(version: str | int | None) -> ProtocolVersion:
    """根据版本字符串选择协议版本。

    只看主版本号 (第一个 "." 之前的部分)。空值或 None 视为默认版本 3。

    Args:
        version: 如 "3", "4.1.10", 4 或 None。

    Returns:
        ProtocolVersion: 对应的版本枚举。

    Raises:
        UnsupportedVersionError: 主版本号无法解析，或不是 3/4。
    """
    raw = DEFAULT_VERSION if version is None or version == "" else str(version)
    major = raw.split(".", 1)[0].strip()

    try:
        return ProtocolVersion(int(major))
    except ValueError:
        raise UnsupportedVersionError(raw) from None
