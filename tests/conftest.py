"""Shared fixtures: sample AT+SPENGMD replies and config singleton reset."""

from typing import List

import pytest

from cellband.config.config_manager import ConfigManager

FILLER_ROW = ["0", "1", "2", "3", "4", "5"]


def render_reply(rows: List[List[str]]) -> str:
    """Render rows the way the modem prints them: rows joined by '-'.

    A row whose first value is negative therefore starts with '--'.
    """
    body = "-".join(",".join(row) for row in rows)
    # Modem wraps long replies; line breaks inside the body are not significant
    wrapped = "\r\n".join(body[i:i + 64] for i in range(0, len(body), 64))
    return f"{wrapped}\r\n\r\nOK\r\n"


def lte_rows() -> List[List[str]]:
    rows = [["3"], ["1300"], ["238"], ["-8453"], ["-1080"]]
    rows += [list(FILLER_ROW) for _ in range(5, 33)]
    rows += [["1250"], ["7"]]
    return rows


def nr_rows() -> List[List[str]]:
    rows = [["78"], ["627264"], ["501"], ["-9012"], ["-1150"]]
    rows += [list(FILLER_ROW) for _ in range(5, 15)]
    rows += [["2030"], ["0"]]
    return rows


@pytest.fixture
def lte_reply() -> str:
    """LTE serving-cell reply with 35 rows (SINR at row 33)."""
    return render_reply(lte_rows())


@pytest.fixture
def nr_reply() -> str:
    """NR serving-cell reply with 17 rows (SINR at row 15)."""
    return render_reply(nr_rows())


@pytest.fixture
def reply_renderer():
    return render_reply


@pytest.fixture(autouse=True)
def reset_config_manager():
    """Every test starts without a ConfigManager singleton."""
    ConfigManager.reset()
    yield
    ConfigManager.reset()
