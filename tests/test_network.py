# tests/test_network.py
import socket
from unittest.mock import MagicMock, patch

import pytest

from varnish_admin.exceptions import NetworkError, ProtocolError
from varnish_admin.network import CliSocket


def _frame(status: int, body: bytes) -> bytes:
    """辅助函数：按 varnishd 的格式构造一个响应帧"""
    return b"%-3d %-8d\n" % (status, len(body)) + body + b"\n"


@pytest.fixture
def mock_sock():
    sock = MagicMock(spec=socket.socket)
    with patch("socket.create_connection", return_value=sock) as create:
        client = CliSocket()
        client.open("127.0.0.1", 6082, 5)
        create.assert_called_once_with(("127.0.0.1", 6082), timeout=5)
        yield client, sock


def test_open_failure_maps_to_network_error():
    with patch("socket.create_connection", side_effect=ConnectionRefusedError("refused")):
        client = CliSocket()
        with pytest.raises(NetworkError, match="无法连接"):
            client.open("127.0.0.1", 6082, 5)
        assert client.is_open is False


def test_open_timeout():
    with patch("socket.create_connection", side_effect=socket.timeout):
        with pytest.raises(NetworkError, match="连接超时"):
            CliSocket().open("127.0.0.1", 6082, 1)


def test_write_encodes_text(mock_sock):
    client, sock = mock_sock
    client.write("status\n")
    sock.sendall.assert_called_once_with(b"status\n")


def test_write_not_connected():
    with pytest.raises(NetworkError, match="未连接"):
        CliSocket().write("status\n")


def test_write_error(mock_sock):
    client, sock = mock_sock
    sock.sendall.side_effect = OSError("Broken pipe")
    with pytest.raises(NetworkError, match="发送失败"):
        client.write("status\n")


def test_read_single_frame(mock_sock):
    client, sock = mock_sock
    sock.recv.side_effect = [_frame(200, b"Child in state running")]

    body, status = client.read()

    assert status == 200
    assert body == "Child in state running"


def test_read_frame_split_across_chunks(mock_sock):
    """测试帧被拆成多个 TCP 分片时仍能完整读取"""
    client, sock = mock_sock
    raw = _frame(107, b"a" * 32 + b"\n\nAuthentication required.\n")
    sock.recv.side_effect = [raw[:5], raw[5:20], raw[20:]]

    body, status = client.read()

    assert status == 107
    assert body.startswith("a" * 32)
    assert body.endswith("Authentication required.\n")


def test_read_two_frames_in_one_chunk(mock_sock):
    """测试一次 recv 收到两个帧时，剩余数据留给下一次 read"""
    client, sock = mock_sock
    sock.recv.side_effect = [_frame(200, b"first") + _frame(500, b"Closing CLI connection")]

    assert client.read() == ("first", 200)
    assert client.read() == ("Closing CLI connection", 500)
    assert sock.recv.call_count == 1


def test_read_empty_body(mock_sock):
    client, sock = mock_sock
    sock.recv.side_effect = [_frame(200, b"")]
    assert client.read() == ("", 200)


def test_read_timeout(mock_sock):
    client, sock = mock_sock
    sock.recv.side_effect = socket.timeout

    with pytest.raises(NetworkError, match="超时"):
        client.read()


def test_read_connection_closed(mock_sock):
    client, sock = mock_sock
    sock.recv.side_effect = [b"200 ", b""]

    with pytest.raises(NetworkError, match="关闭"):
        client.read()


def test_read_bad_trailer(mock_sock):
    client, sock = mock_sock
    sock.recv.side_effect = [b"200 2       \nokX"]

    with pytest.raises(ProtocolError, match="结尾"):
        client.read()


def test_close_is_idempotent(mock_sock):
    client, sock = mock_sock
    client.close()
    client.close()

    sock.close.assert_called_once()
    assert client.is_open is False
