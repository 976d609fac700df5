# File: src/varnish_admin/core.py
"""
Varnish 管理客户端核心引擎 (Core Engine)

职责：
1. 资源组装：ServerAddress + 命令表 + Transport。
2. 握手：Banner -> (Challenge 认证) -> 200。
3. 命令往返：写一行，读一帧，校验状态码。
4. 生命周期：connect -> 命令... -> quit/close。

协议是严格的一问一答，同一个连接上同一时刻只有一条命令在途。
"""

import logging
from collections.abc import Callable
from enum import Enum, auto
from typing import Any, Optional

from .config import VarnishAdminConfig
from .exceptions import (
    AuthFailedError,
    AuthRequiredError,
    BadBannerError,
    CommandError,
    ConfigError,
    NetworkError,
    NotConnectedError,
    ProtocolError,
    StateError,
)
from .network import CliSocket, Transport
from .protocols.auth import (
    build_auth_command,
    compute_auth_response,
    extract_challenge,
)
from .protocols.constants import DEFAULT_PORT, DEFAULT_TIMEOUT, StatusCode
from .protocols.framing import ResponseFrame, build_command_line
from .protocols.status import CHILD_RUNNING, parse_child_state
from .protocols.versions import ProtocolVersion, resolve_version
from .state import ServerAddress, Session, SessionStatus

logger = logging.getLogger(__name__)


class AdminEvent(Enum):
    """引擎向监听器发出的事件。"""

    CONNECTED = auto()
    ALREADY_RUNNING = auto()
    """start() 时 Child 已在运行，命令未发送。"""
    ALREADY_STOPPED = auto()
    """stop() 时 Child 已停止，命令未发送。"""
    QUIT_FAILED = auto()
    """quit 命令未得到 500，连接仍被强制关闭。"""
    CLOSED = auto()


# 事件回调：callback(event, message)
EventCallback = Callable[[AdminEvent, str], Any]


class VarnishAdmin:
    """Varnish 管理端口客户端。

    用法::

        admin = VarnishAdmin("127.0.0.1", 6082, "4")
        admin.set_secret(open("/etc/varnish/secret", "rb").read())
        admin.connect()
        admin.purge_url("^/news/")
        admin.quit()

    已知限制: start()/stop() 先查询 status 再决定是否发送命令，
    两次往返之间 Child 的状态可能被他人改变，服务端没有原子的 check-and-set。
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        version: str | int | None = None,
        secret: str | bytes | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport_factory: Optional[Callable[[], Transport]] = None,
        event_callback: Optional[EventCallback] = None,
    ) -> None:
        """初始化引擎。

        Args:
            host: 管理端口主机。为 None 时引擎处于占位模式，所有命令直接返回 None。
            port: 管理端口，缺省为 6082。
            version: Varnish 版本字符串，缺省为 "3"。
            secret: 共享密钥，也可以稍后通过 set_secret 设置。
            timeout: connect 未指定超时时使用的默认值。
            transport_factory: 创建 Transport 的工厂，缺省为 CliSocket。
            event_callback: 初始事件回调。也可以使用 add_listener。

        Raises:
            UnsupportedVersionError: 版本不是 3 或 4。
        """
        if port is None and host is not None:
            port = DEFAULT_PORT
        self._server_address = ServerAddress(host, port)

        self.version: ProtocolVersion = resolve_version(version)
        self.commands = self.version.commands

        self._secret = secret
        self.default_timeout = timeout

        self._transport_factory = transport_factory or CliSocket
        self._transport: Transport = self._transport_factory()
        self._session: Optional[Session] = None

        self._listeners: list[EventCallback] = []
        if event_callback:
            self.add_listener(event_callback)

        logger.debug(
            f"VarnishAdmin 已就绪: {self._server_address} (Varnish {self.version.number})"
        )

    @classmethod
    def from_config(cls, config: VarnishAdminConfig, **kwargs: Any) -> "VarnishAdmin":
        """从配置对象构造引擎。"""
        return cls(
            host=config.host,
            port=config.port,
            version=config.version,
            secret=config.secret,
            timeout=config.timeout,
            **kwargs,
        )

    # --- 属性 ---

    @property
    def server_address(self) -> ServerAddress:
        return self._server_address

    def get_server_address(self) -> ServerAddress:
        return self._server_address

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def is_connected(self) -> bool:
        return self._session is not None and self._session.is_connected

    @property
    def transport(self) -> Transport:
        return self._transport

    def set_transport(self, transport: Transport) -> None:
        """替换传输层。会话进行中不允许替换。"""
        if self._session is not None:
            raise StateError("会话进行中，无法替换传输层; 请先 close()")
        self._transport = transport

    def set_secret(self, secret: str | bytes) -> None:
        """设置认证密钥。

        注意: 如果 varnishadm 使用的 secret 文件带有结尾换行，这里也需要带上。
        """
        self._secret = secret

    # --- 事件 ---

    def add_listener(self, callback: EventCallback) -> None:
        """注册事件监听器。"""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: EventCallback) -> None:
        """移除事件监听器。"""
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _emit(self, event: AdminEvent, msg: str) -> None:
        for callback in list(self._listeners):
            try:
                callback(event, msg)
            except Exception as e:
                logger.error(f"事件回调执行异常: {e}")

    # --- 连接生命周期 ---

    def connect(self, timeout: Optional[float] = None) -> str:
        """连接管理端口并完成握手。

        Args:
            timeout: 连接与读写超时 (秒)。为 0 或 None 时使用默认值 (5 秒)。

        Returns:
            str: Banner 文本。

        Raises:
            AuthRequiredError: 服务器要求认证但未设置 secret。
            AuthFailedError: 认证应答过程中出现任何错误 (原因见 __cause__)。
            BadBannerError: 握手后的状态码不是 200。
            NetworkError: 连接失败或超时。
        """
        if not timeout:
            timeout = self.default_timeout or DEFAULT_TIMEOUT

        host = self._server_address.host
        port = self._server_address.port
        if not host:
            raise ConfigError("未配置 host，无法连接")

        if self._session is not None:
            logger.info("已存在会话，重新连接前先关闭")
            self.close()

        session = Session(transport=self._transport)
        self._session = session

        try:
            session.transport.open(host, port, timeout)
            # 连接后应收到 200 的 Banner，或 107 的认证 Challenge
            banner, status = session.transport.read()

            if status == StatusCode.AUTH:
                banner, status = self._authenticate(session, banner)

            if status != StatusCode.OK:
                raise BadBannerError(host, port, status)

        except Exception:
            self._release()
            raise

        session.status = SessionStatus.CONNECTED
        session.banner = banner
        logger.info(f"已连接 varnishadm: {self._server_address}")
        self._emit(AdminEvent.CONNECTED, banner)
        return banner

    def _authenticate(self, session: Session, banner: str) -> tuple[str, int]:
        if not self._secret:
            raise AuthRequiredError()

        session.status = SessionStatus.AUTHENTICATING
        logger.debug("收到认证 Challenge (107)，发送应答")

        try:
            challenge = extract_challenge(banner)
            response = compute_auth_response(challenge, self._secret)
            body = self._command(build_auth_command(self.commands.auth, response))
        except Exception as ex:
            raise AuthFailedError() from ex

        session.authenticated = True
        return body, StatusCode.OK

    def quit(self) -> None:
        """优雅关闭: 发送 quit (期望 500)，无论成功与否都关闭连接。"""
        try:
            self._command(self.commands.quit, StatusCode.CLOSE)
        except Exception as e:
            logger.warning(f"quit 未正常完成，强制关闭连接: {e}")
            self._emit(AdminEvent.QUIT_FAILED, str(e))
        finally:
            self.close()

    def close(self) -> None:
        """强制关闭: 不发送 quit，直接释放传输层。"""
        had_session = self._session is not None
        self._release()
        if had_session:
            logger.info(f"已断开 varnishadm: {self._server_address}")
            self._emit(AdminEvent.CLOSED, str(self._server_address))

    def _release(self) -> None:
        try:
            self._transport.close()
        finally:
            if self._session is not None:
                self._session.status = SessionStatus.CLOSED
                self._session = None

    def __enter__(self) -> "VarnishAdmin":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.quit()

    # --- 命令往返 ---

    def _exchange(self, text: str) -> ResponseFrame:
        if self._session is None:
            raise NotConnectedError()

        transport = self._session.transport
        line = build_command_line(text)
        logger.debug(f"发送命令: {_redact(text)}")
        try:
            transport.write(line)
            body, status = transport.read()
        except (NetworkError, ProtocolError) as e:
            # 帧同步已无法保证，丢弃会话，后续命令得到 NotConnectedError
            logger.warning(f"命令往返中断，关闭连接: {e}")
            self._release()
            self._emit(AdminEvent.CLOSED, str(self._server_address))
            raise
        return ResponseFrame(status=status, body=body)

    def _command(self, text: str, expected: int = StatusCode.OK) -> Optional[str]:
        """写入一条命令并立即读取响应。

        Args:
            text: 命令文本 (不含换行)。
            expected: 期望的状态码。

        Returns:
            响应正文；未配置 host 时返回 None 且不做任何 I/O。

        Raises:
            NotConnectedError: 没有活动会话。
            CommandError: 状态码与期望不符 (会话仍可继续使用)。
            NetworkError / ProtocolError: 往返中断，会话已被关闭。
        """
        if not self._server_address.host:
            return None

        frame = self._exchange(text)
        if frame.status != expected:
            raise CommandError(_redact(text), frame.status, frame.body)

        return frame.body

    # --- 管理命令 ---

    def purge(self, expr: str) -> Optional[str]:
        """按表达式 ban 缓存对象。

        Args:
            expr: 形如 "<field> <operator> <arg> [&& <field> <oper> <arg>]..." 的表达式，原样透传。
        """
        return self._command(f"{self.commands.purge} {expr}")

    def purge_url(self, url: str) -> Optional[str]:
        """按 URL (正则) ban 缓存对象。"""
        return self._command(f"{self.commands.purge_url} {url}")

    def child_state(self) -> Optional[str]:
        """返回 Child 进程的状态词 (如 "running")，无法解析时返回 None。"""
        return parse_child_state(self._command(self.commands.status))

    def status(self) -> bool:
        """Child 是否处于 running 状态。任何错误都视为 False，不会抛出。"""
        try:
            return self.child_state() == CHILD_RUNNING
        except Exception as e:
            logger.debug(f"status 查询失败，视为未运行: {e}")
            return False

    def start(self) -> bool:
        if self.status():
            msg = f"varnish 已在 {self._server_address} 上启动"
            logger.warning(msg)
            self._emit(AdminEvent.ALREADY_RUNNING, msg)
            return True

        self._command(self.commands.start)
        return True

    def stop(self) -> bool:
        if not self.status():
            msg = f"varnish 已在 {self._server_address} 上停止"
            logger.warning(msg)
            self._emit(AdminEvent.ALREADY_STOPPED, msg)
            return True

        self._command(self.commands.stop)
        return True


def _redact(text: str) -> str:
    """隐藏 auth 命令中的摘要，避免写入日志或异常消息。"""
    if text.startswith("auth "):
        return "auth ******"
    return text
