# src/varnish_admin/network.py
"""
Varnish 管理客户端 - 网络模块 (Network)

封装 TCP Socket 的连接、发送、按帧接收和关闭逻辑。
该模块屏蔽了底层 Socket 的复杂性，向引擎层提供 "写一行 / 读一帧" 的接口。
"""

import logging
import socket
from typing import Optional, Protocol, Tuple

from .exceptions import NetworkError, ProtocolError
from .protocols.constants import MAX_RECV, FrameConst
from .protocols.framing import decode_body, parse_status_line

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """引擎所依赖的传输层接口。

    任何实现了这 4 个方法的对象都可以注入到 VarnishAdmin 中 (例如测试替身)。
    """

    def open(self, host: str, port: int, timeout: float) -> None: ...

    def write(self, text: str) -> None: ...

    def read(self) -> Tuple[str, int]: ...

    def close(self) -> None: ...


class CliSocket:
    """
    阻塞式 TCP 客户端，实现 Varnish CLI 的帧读取。
    """

    def __init__(self) -> None:
        self.sock: Optional[socket.socket] = None
        self.timeout: Optional[float] = None
        self._buffer = b""

    @property
    def is_open(self) -> bool:
        return self.sock is not None

    def open(self, host: str, port: int, timeout: float) -> None:
        """
        建立 TCP 连接。connect 与之后的每次读写都使用同一个超时。
        """
        self.close()
        try:
            self.sock = socket.create_connection((host, port), timeout=timeout)
        except TimeoutError:
            raise NetworkError(f"连接超时 {host}:{port} ({timeout}s)") from None
        except OSError as e:
            raise NetworkError(f"无法连接 {host}:{port}: {e}") from e

        self.timeout = timeout
        self._buffer = b""
        logger.debug(f"TCP 连接已建立: {host}:{port}")

    def write(self, text: str) -> None:
        """
        发送文本 (按 UTF-8 编码)。
        """
        if self.sock is None:
            raise NetworkError("Socket 未连接")

        try:
            self.sock.sendall(text.encode(FrameConst.ENCODING))
        except TimeoutError:
            raise NetworkError(f"发送超时 ({self.timeout}s)") from None
        except OSError as e:
            raise NetworkError(f"发送失败: {e}") from e

    def read(self) -> Tuple[str, int]:
        """
        读取一个完整的响应帧。

        Returns:
            (body, status)

        Raises:
            NetworkError: 超时或连接中断。
            ProtocolError: 状态行非法或帧尾缺少换行。
        """
        header = self._recv_exact(FrameConst.HEADER_LEN)
        status, length = parse_status_line(header)

        body = self._recv_exact(length)
        trailer = self._recv_exact(1)
        if trailer != b"\n":
            raise ProtocolError(f"响应帧结尾缺少换行: {trailer!r}")

        logger.debug(f"收到响应帧: status={status}, length={length}")
        return decode_body(body), status

    def close(self) -> None:
        """关闭 Socket (可重复调用)"""
        if self.sock is not None:
            try:
                self.sock.close()
            except OSError:
                pass
            self.sock = None
            logger.debug("TCP 连接已关闭")
        self._buffer = b""

    def _recv_exact(self, size: int) -> bytes:
        if self.sock is None:
            raise NetworkError("Socket 未连接")

        while len(self._buffer) < size:
            try:
                chunk = self.sock.recv(MAX_RECV)
            except TimeoutError:
                raise NetworkError(f"接收超时 ({self.timeout}s)") from None
            except OSError as e:
                raise NetworkError(f"接收错误: {e}") from e

            if not chunk:
                raise NetworkError("连接已被服务器关闭")
            self._buffer += chunk

        data, self._buffer = self._buffer[:size], self._buffer[size:]
        return data

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
