# src/varnish_admin/protocols/status.py
import re
from typing import Optional

_CHILD_STATE_RE = re.compile(r"Child in state (\w+)")

CHILD_RUNNING = "running"


def parse_child_state(body: Optional[str]) -> Optional[str]:
    """从 status 命令的响应中提取 Child 进程状态 (如 running / stopped)。"""
    if not body:
        return None

    match = _CHILD_STATE_RE.search(body)
    if not match:
        return None
    return match.group(1)


def is_running(body: Optional[str]) -> bool:
    return parse_child_state(body) == CHILD_RUNNING
