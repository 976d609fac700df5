"""
Varnish 管理客户端 - 配置模块

负责配置的加载、解析与强类型转换。
支持从 TOML 文件、环境变量 (可选 .env) 或字典中加载配置。
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .exceptions import ConfigError
from .protocols.constants import DEFAULT_PORT, DEFAULT_TIMEOUT, DEFAULT_VERSION
from .protocols.versions import resolve_version

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VarnishAdminConfig:
    """VarnishAdmin 的强类型配置对象。

    所有字段均为只读 (frozen=True)，确保配置在运行时不可变。

    Attributes:
        host: 管理端口所在主机。
        port: 管理端口 (varnishd -T，通常为 6082)。
        version: Varnish 版本字符串，如 "3" 或 "4.1"。
        secret: 共享密钥 (varnishd -S 文件的内容)。
        timeout: 连接与读写超时 (秒)。
    """

    host: str
    port: int = DEFAULT_PORT
    version: str = DEFAULT_VERSION
    secret: str | bytes | None = None
    timeout: float = DEFAULT_TIMEOUT

    def __repr__(self) -> str:
        """
        覆盖默认的 repr，隐藏 secret 字段，防止日志泄露敏感信息。
        """
        return (
            f"<{self.__class__.__name__} "
            f"server={self.host}:{self.port}, "
            f"version='{self.version}', "
            f"secret={'******' if self.secret else None}, "
            f"timeout={self.timeout}>"
        )


def create_config_from_dict(raw_data: dict[str, Any]) -> VarnishAdminConfig:
    """通用工厂：将字典转换为强类型配置对象。

    负责字段的清洗、默认值注入和类型转换。

    Args:
        raw_data: 原始配置字典 (来自 TOML 或 Env)。

    Returns:
        VarnishAdminConfig: 验证并转换后的配置对象。

    Raises:
        ConfigError: 当必要字段缺失或格式错误时抛出。
    """
    try:
        if not raw_data.get("host"):
            raise ConfigError("配置缺失: 缺少必要字段 'host'")

        try:
            port = int(raw_data.get("port", DEFAULT_PORT))
        except (TypeError, ValueError):
            raise ConfigError(f"端口格式无效: {raw_data.get('port')}")
        if not 0 < port < 65536:
            raise ConfigError(f"端口超出范围: {port}")

        try:
            timeout = float(raw_data.get("timeout", DEFAULT_TIMEOUT))
        except (TypeError, ValueError):
            raise ConfigError(f"超时格式无效: {raw_data.get('timeout')}")
        if timeout <= 0:
            raise ConfigError(f"超时必须为正数: {timeout}")

        version = str(raw_data.get("version") or DEFAULT_VERSION)
        # 提前校验，避免到构造引擎时才失败
        resolve_version(version)

        return VarnishAdminConfig(
            host=str(raw_data["host"]),
            port=port,
            version=version,
            secret=_load_secret(raw_data),
            timeout=timeout,
        )

    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(f"配置生成失败: {e}") from e


def _load_secret(raw_data: dict[str, Any]) -> str | bytes | None:
    """secret 优先；否则读取 secret_file 的原始字节 (保留结尾换行)。"""
    if raw_data.get("secret"):
        return raw_data["secret"]

    secret_file = raw_data.get("secret_file")
    if not secret_file:
        return None

    path = Path(secret_file)
    if not path.exists():
        raise ConfigError(f"Secret 文件未找到: {path}")
    try:
        return path.read_bytes()
    except OSError as e:
        raise ConfigError(f"读取 Secret 文件失败: {e}") from e


def load_config_from_toml(
    file_path: Path, profile: str = "default"
) -> VarnishAdminConfig:
    """从 TOML 文件加载配置。

    支持多层级查找策略:
    1. [profile.xxx]: 优先查找指定的 profile 块。
    2. [varnish]: 单实例配置块。
    3. Root: 兼容根目录直接配置。

    Args:
        file_path: TOML 文件路径。
        profile: 配置预设名。默认为 "default"。

    Returns:
        VarnishAdminConfig: 配置对象。

    Raises:
        ConfigError: 文件读取失败或 Profile 不存在。
    """
    if not file_path.exists():
        raise ConfigError(f"配置文件未找到: {file_path}")

    try:
        with open(file_path, "rb") as f:
            data = tomllib.load(f)
    except Exception as e:
        raise ConfigError(f"读取 TOML 失败: {e}") from e

    raw_config = {}

    if "profile" in data:
        if profile not in data["profile"]:
            raise ConfigError(f"未找到预设: [profile.{profile}]")
        raw_config = data["profile"][profile]

    elif "varnish" in data:
        if profile != "default":
            logger.warning(f"配置仅包含 [varnish] 节，忽略 profile='{profile}'。")
        raw_config = data["varnish"]
    else:
        raw_config = data

    return create_config_from_dict(raw_config)


def load_config_from_env(dotenv_path: Path | None = None) -> VarnishAdminConfig:
    """从环境变量加载配置 (Docker/Cloud Friendly)。

    如果给定 dotenv_path 且文件存在，先将其载入环境变量。
    随后读取所有以 `VARNISH_` 开头的环境变量，并映射到配置字段。
    例如: `VARNISH_HOST` -> `host`。

    Returns:
        VarnishAdminConfig: 配置对象。

    Raises:
        ConfigError: 未检测到任何相关环境变量。
    """
    if dotenv_path is not None:
        if dotenv_path.exists():
            load_dotenv(dotenv_path=dotenv_path, override=True)
            logger.debug(f"已加载 .env 文件: {dotenv_path}")
        else:
            logger.warning(f".env 文件不存在: {dotenv_path}")

    # 字段映射表 (Config Field -> Env Suffix)
    env_map = {
        "host": "HOST",
        "port": "PORT",
        "version": "VERSION",
        "secret": "SECRET",
        "secret_file": "SECRET_FILE",
        "timeout": "TIMEOUT",
    }

    raw_data = {}

    for cfg_key, env_suffix in env_map.items():
        env_key = f"VARNISH_{env_suffix}"
        val = os.environ.get(env_key)
        if val is not None:
            raw_data[cfg_key] = val

    if not raw_data:
        raise ConfigError("未检测到 VARNISH_ 前缀的环境变量")

    return create_config_from_dict(raw_data)
