# File: src/varnish_admin/state.py
"""
Varnish 管理客户端 - 状态模块

负责定义服务器地址与连接会话的数据结构。
本模块不包含业务逻辑，仅作为数据容器供引擎读写。
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .network import Transport


class SessionStatus(Enum):
    """会话的生命周期状态枚举。

    状态流转示意:
    CONNECTING -> AUTHENTICATING -> CONNECTED -> CLOSED
        |               |
        v               v
      CLOSED          CLOSED
    """

    CONNECTING = auto()
    """已打开 TCP 连接，正在读取 Banner。"""

    AUTHENTICATING = auto()
    """收到 107 Challenge，正在发送认证应答。"""

    CONNECTED = auto()
    """握手完成，可以发送命令。"""

    CLOSED = auto()
    """已关闭 (主动 close/quit，或 connect 失败)。"""


@dataclass(frozen=True)
class ServerAddress:
    """管理端口地址 (只读)。"""

    host: Optional[str]
    port: Optional[int]

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass
class Session:
    """一次连接的易变状态。

    由 connect 创建，close/quit 之后失效。重新 connect 会生成新的 Session。

    Attributes:
        transport: 独占的传输层对象。
        status: 当前生命周期状态。
        banner: 握手完成后得到的 Banner 文本。
        authenticated: 是否经过了 Challenge 认证。
    """

    transport: "Transport"
    status: SessionStatus = SessionStatus.CONNECTING
    banner: str = ""
    authenticated: bool = False

    @property
    def is_connected(self) -> bool:
        return self.status == SessionStatus.CONNECTED
