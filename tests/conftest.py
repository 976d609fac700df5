# tests/conftest.py
import sys
from pathlib import Path

import pytest

# 确保 src 目录在 sys.path 中
src_path = Path(__file__).resolve().parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from varnish_admin.config import VarnishAdminConfig
from varnish_admin.exceptions import NetworkError


class FakeTransport:
    """
    [Test Double] 按脚本返回响应帧，并记录所有调用。

    responses 中的元素可以是 (body, status)，也可以是异常实例 (读取时抛出)。
    """

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []
        self.writes = []
        self.opened = None
        self.close_count = 0

    def open(self, host, port, timeout):
        self.calls.append("open")
        self.opened = (host, port, timeout)

    def write(self, text):
        self.calls.append("write")
        self.writes.append(text)

    def read(self):
        self.calls.append("read")
        if not self.responses:
            raise NetworkError("接收超时 (脚本已耗尽)")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.calls.append("close")
        self.close_count += 1


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def make_admin(fake_transport):
    """
    [Fixture] 返回一个工厂：创建注入了 FakeTransport 的 VarnishAdmin。
    """
    from varnish_admin import VarnishAdmin

    def _make(version="3", host="127.0.0.1", port=6082, **kwargs):
        return VarnishAdmin(
            host, port, version, transport_factory=lambda: fake_transport, **kwargs
        )

    return _make


@pytest.fixture
def connected_admin(make_admin, fake_transport):
    """
    [Fixture] 一个已完成握手 (无认证) 的 V3 引擎，脚本中的 Banner 已被消费。
    """
    fake_transport.responses.append(("Varnish Cache CLI 1.0", 200))
    admin = make_admin()
    admin.connect()
    fake_transport.calls.clear()
    return admin


@pytest.fixture
def valid_config():
    return VarnishAdminConfig(
        host="127.0.0.1",
        port=6082,
        version="4",
        secret="s3cr3t",
        timeout=3.0,
    )
