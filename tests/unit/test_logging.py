"""
Log line rendering.
"""

from inkmatch.config.logging import Colors, format_log


def test_plain_line():
    line = format_log(
        None,
        "info",
        {
            "event": "Session created",
            "logger": "inkmatch.mcp.sessions",
            "timestamp": "2026-10-19 10:30:45",
            "session_id": "inkmatch-1-abcdef",
            "_colors": False,
        },
    )
    assert line == (
        "2026-10-19 10:30:45 [INFO    ] inkmatch.mcp.sessions: Session created "
        "session_id=inkmatch-1-abcdef"
    )


def test_colored_line():
    line = format_log(
        None,
        "warning",
        {"event": "Widget missing", "timestamp": "t", "_colors": True},
    )
    assert f"{Colors.YELLOW}[WARNING ]{Colors.RESET}" in line
    assert line.endswith("Widget missing")


def test_timestamp_filled_in():
    line = format_log(None, "debug", {"event": "x", "_colors": False})
    assert line.endswith("[DEBUG   ] x")
