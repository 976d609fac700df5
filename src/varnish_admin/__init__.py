"""
varnish-admin v1.0.0
Varnish Cache 管理端口 (CLI 协议) 客户端库。
"""

# 暴露核心配置
from .config import (
    VarnishAdminConfig,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
)

# 暴露引擎与状态
from .core import AdminEvent, VarnishAdmin

# 暴露异常体系 (方便上层 try-except)
from .exceptions import (
    AuthError,
    AuthFailedError,
    AuthRequiredError,
    BadBannerError,
    CommandError,
    ConfigError,
    NetworkError,
    NotConnectedError,
    ProtocolError,
    ResponseStatus,
    StateError,
    UnsupportedVersionError,
    VarnishAdminError,
)
from .network import CliSocket, Transport
from .protocols.versions import ProtocolVersion
from .state import ServerAddress, Session, SessionStatus

__version__ = "1.0.0"

__all__ = [
    "VarnishAdmin",
    "AdminEvent",
    "VarnishAdminConfig",
    "ServerAddress",
    "Session",
    "SessionStatus",
    "ProtocolVersion",
    "CliSocket",
    "Transport",
    "create_config_from_dict",
    "load_config_from_env",
    "load_config_from_toml",
    "VarnishAdminError",
    "ConfigError",
    "UnsupportedVersionError",
    "NetworkError",
    "ProtocolError",
    "BadBannerError",
    "CommandError",
    "ResponseStatus",
    "AuthError",
    "AuthRequiredError",
    "AuthFailedError",
    "StateError",
    "NotConnectedError",
]
