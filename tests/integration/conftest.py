"""Integration fixtures: a scripted modem standing in for pyserial."""

from collections import deque
from typing import Dict, List

import pytest


class FakeModem:
    """Minimal stand-in for serial.Serial answering scripted AT commands.

    Unknown commands get ERROR. Written commands are echoed back, as a
    modem with ATE1 does.
    """

    def __init__(self, replies: Dict[str, str], echo: bool = True):
        self.replies = replies
        self.echo = echo
        self.is_open = True
        self.sent: List[str] = []
        self._pending: deque = deque()

    def write(self, data: bytes) -> int:
        command = data.decode('utf-8').strip()
        self.sent.append(command)
        if self.echo:
            self._pending.append(f"{command}\r\n".encode())
        reply = self.replies.get(command, "\r\nERROR\r\n")
        for line in reply.split("\r\n"):
            self._pending.append(f"{line}\r\n".encode())
        return len(data)

    def readline(self) -> bytes:
        return self._pending.popleft() if self._pending else b""

    def flush(self):
        pass

    def reset_input_buffer(self):
        self._pending.clear()

    def reset_output_buffer(self):
        pass

    def close(self):
        self.is_open = False


@pytest.fixture
def fake_modem():
    """Factory: fake_modem({"AT+...": "reply"}) -> FakeModem."""
    return FakeModem
