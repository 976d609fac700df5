# tests/test_exceptions.py
"""
测试异常层级与状态码的中文映射。
"""

import pytest

from varnish_admin.exceptions import (
    AuthError,
    AuthFailedError,
    AuthRequiredError,
    BadBannerError,
    CommandError,
    ConfigError,
    NotConnectedError,
    ProtocolError,
    ResponseStatus,
    StateError,
    UnsupportedVersionError,
    VarnishAdminError,
)

TEST_CASES = [
    (ResponseStatus.SYNTAX, "语法错误"),
    (ResponseStatus.UNKNOWN, "未知命令"),
    (ResponseStatus.PARAM, "参数值非法"),
    (ResponseStatus.AUTH, "需要认证"),
    (ResponseStatus.CANT, "无法执行"),
    (ResponseStatus.CLOSE, "连接关闭"),
]


@pytest.mark.parametrize("status, expected_msg", TEST_CASES)
def test_response_status_description(status, expected_msg):
    assert expected_msg in status.description


@pytest.mark.parametrize(
    "exc, parent",
    [
        (UnsupportedVersionError("9"), ConfigError),
        (BadBannerError("h", 1, 101), ProtocolError),
        (CommandError("status", 300, ""), ProtocolError),
        (AuthRequiredError(), AuthError),
        (AuthFailedError(), AuthError),
        (NotConnectedError(), StateError),
    ],
)
def test_hierarchy(exc, parent):
    assert isinstance(exc, parent)
    assert isinstance(exc, VarnishAdminError)


def test_command_error_unknown_status():
    err = CommandError("status", 999, "weird")
    assert err.status_enum is None
    assert str(err) == "status command responded 999:\n > weird"
