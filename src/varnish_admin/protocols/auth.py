# src/varnish_admin/protocols/auth.py
import hashlib
import logging

from .constants import AuthConst

logger = logging.getLogger(__name__)


def _to_bytes(value: str | bytes) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode("utf-8")


def extract_challenge(banner: str) -> str:
    """从 107 Banner 中提取 Challenge (前 32 个字符)。"""
    challenge = banner[: AuthConst.CHALLENGE_LEN]
    if len(challenge) < AuthConst.CHALLENGE_LEN:
        logger.debug(f"Challenge 长度不足 ({len(challenge)})，仍按原样参与计算。")
    return challenge


def compute_auth_response(challenge: str | bytes, secret: str | bytes) -> str:
    """计算认证应答。

    算法: SHA-256(challenge + "\\n" + secret + challenge + "\\n")，小写十六进制。

    secret 按原样参与计算；从文件读取的 secret 通常带结尾换行，
    varnishd 侧同样会把它算进去，因此不做 strip。

    Args:
        challenge: Banner 中的 32 字节随机串。
        secret: 共享密钥。

    Returns:
        str: 64 位小写十六进制摘要。
    """
    c = _to_bytes(challenge)
    digest = hashlib.sha256(c + b"\n" + _to_bytes(secret) + c + b"\n")
    return digest.hexdigest()


def build_auth_command(auth_keyword: str, response: str) -> str:
    """构建 "auth <hex>" 命令文本。"""
    return f"{auth_keyword} {response}"
