# File: src/varnish_admin/exceptions.py
"""
Varnish 管理客户端 - 异常体系 (Exceptions)

定义库内统一使用的异常类，以便上层应用（如 CLI/监控脚本）能进行精细的错误处理。
"""

from enum import IntEnum


class VarnishAdminError(Exception):
    """varnish-admin 所有内部异常的基类。

    上层应用可以通过捕获此异常来处理所有由本库抛出的已知错误。
    """

    pass


class ConfigError(VarnishAdminError):
    """配置加载或校验失败。

    触发场景:
    1. 缺少必要字段 (如 host)。
    2. 字段格式错误 (如端口不是整数、超时为负数)。
    3. 找不到配置文件或 secret 文件。
    """

    pass


class UnsupportedVersionError(ConfigError):
    """协议版本不受支持 (仅支持 Varnish 3 与 4)。

    构造阶段抛出，不可恢复。
    """

    def __init__(self, version: str) -> None:
        super().__init__(f"仅支持 Varnish 3 与 4，收到版本: {version!r}")
        self.version = version


class NetworkError(VarnishAdminError):
    """网络层面的错误 (I/O 级别)。

    触发场景:
    1. 连接被拒绝或 DNS 解析失败。
    2. 发送 (write) 或 接收 (read) 超时。
    3. 连接被对端重置或提前关闭。

    注意: 本库不做任何重试，是否重试由上层决定。
    """

    pass


class ProtocolError(VarnishAdminError):
    """协议交互错误 (逻辑级别)。

    触发场景:
    1. 状态行格式错误 (不是 "SSS LLLLLLLL")。
    2. 响应体长度与声明不符，或缺少结尾换行。
    3. 收到非预期的状态码。
    """

    pass


class BadBannerError(ProtocolError):
    """连接 (及可能的认证) 之后，服务器的状态码不是 200。"""

    def __init__(self, host: str | None, port: int | None, status: int) -> None:
        super().__init__(f"varnishadm 在 {host}:{port} 上返回了异常响应 ({status})")
        self.host = host
        self.port = port
        self.status = status


class CommandError(ProtocolError):
    """命令的响应状态码与预期不一致。

    会话本身仍然可用，帧同步不受影响，可以继续发送后续命令。
    """

    def __init__(self, command: str, status: int, body: str) -> None:
        quoted = "\n > ".join(body.strip().split("\n"))
        super().__init__(f"{command} command responded {status}:\n > {quoted}")
        self.command = command
        self.status = status
        self.body = body

    @property
    def status_enum(self) -> "ResponseStatus | None":
        try:
            return ResponseStatus(self.status)
        except ValueError:
            return None


class AuthError(VarnishAdminError):
    """认证阶段失败的基类。"""

    pass


class AuthRequiredError(AuthError):
    """服务器要求认证 (107)，但尚未设置 secret。"""

    def __init__(self) -> None:
        super().__init__("需要认证; 请先调用 VarnishAdmin.set_secret")


class AuthFailedError(AuthError):
    """计算或发送认证应答的过程中出现任何错误。

    消息固定为通用描述，原始异常通过 ``__cause__`` 保留。
    """

    def __init__(self) -> None:
        super().__init__("认证失败")


class StateError(VarnishAdminError):
    """状态机错误 (FSM Violation)。"""

    pass


class NotConnectedError(StateError):
    """在未连接 (或已关闭) 的引擎上执行命令。"""

    def __init__(self) -> None:
        super().__init__("未连接到 varnishadm; 请先调用 connect()")


class ResponseStatus(IntEnum):
    """Varnish CLI 响应状态码枚举。

    这些代码直接来自每个响应帧状态行的前 3 位。
    """

    SYNTAX = 100  # 命令语法错误
    UNKNOWN = 101  # 未知命令
    UNIMPL = 102  # 命令未实现
    TOO_FEW = 104  # 参数过少
    TOO_MANY = 105  # 参数过多
    PARAM = 106  # 参数值非法
    AUTH = 107  # 需要认证 (Challenge)
    OK = 200
    TRUNCATED = 201  # 响应被截断
    CANT = 300  # 当前无法执行
    COMMS = 400  # 通信错误
    CLOSE = 500  # 连接即将关闭 (quit 的正常返回)

    @property
    def description(self) -> str:
        """获取状态码对应的人类可读中文描述。"""
        _DESC_MAP = {
            100: "命令语法错误",
            101: "未知命令",
            102: "命令未实现",
            104: "参数过少",
            105: "参数过多",
            106: "参数值非法",
            107: "需要认证",
            200: "成功",
            201: "响应被截断",
            300: "当前状态下无法执行",
            400: "通信错误",
            500: "连接关闭",
        }
        return _DESC_MAP.get(self.value, f"未知状态码 ({self.value})")
