# src/varnish_admin/protocols/constants.py
"""
Varnish CLI 协议层 - 常量定义

本模块定义了所有协议相关的魔法数字、长度和固定值。
采用命名空间 (Class Namespace) 组织。
"""

# =========================================================================
# 1. 状态码 (Status Codes)
# =========================================================================


class StatusCode:
    """协议交互中被引擎直接判断的状态码"""

    AUTH = 107  # 认证 Challenge，只会出现在第一个帧
    OK = 200
    CLOSE = 500  # quit 的约定返回码


# =========================================================================
# 2. 帧结构 (Framing)
# =========================================================================


class FrameConst:
    # 状态行: "%-3d %-8d\n"，固定 13 字节
    HEADER_LEN = 13
    STATUS_LEN = 3
    LENGTH_START = 4
    LENGTH_END = 12

    LINE_TERMINATOR = "\n"
    ENCODING = "utf-8"


# =========================================================================
# 3. 认证 (Auth)
# =========================================================================


class AuthConst:
    # Banner 中 challenge 的长度
    CHALLENGE_LEN = 32


# =========================================================================
# 4. 连接默认值
# =========================================================================

DEFAULT_PORT = 6082
DEFAULT_TIMEOUT = 5
DEFAULT_VERSION = "3"

# 每次 recv 的最大字节数
MAX_RECV = 4096
