import json

import pytest

from core.config import Config
from ui import dashboard as dashboard_module
from ui.dashboard import Dashboard
from ui.log_utils import clear_logs, redact_headers, write_cli_log, write_incoming_log


def test_redact_headers_masks_credentials():
    redacted = redact_headers(
        {
            "authorization": "Bearer abcdefghijklmnop",
            "x-api-key": "short",
            "accept": "*/*",
        }
    )

    assert redacted["authorization"] == "Bearer...mnop"
    assert redacted["x-api-key"] == "***"
    assert redacted["accept"] == "*/*"


def test_write_incoming_log(tmp_path):
    path = write_incoming_log(
        "GET",
        "/iip/foo",
        {"authorization": "Bearer abcdefghijklmnop"},
        log_root=tmp_path,
    )

    payload = json.loads(path.read_text())
    assert path.parent == tmp_path / "incoming"
    assert payload["method"] == "GET"
    assert payload["path"] == "/iip/foo"
    assert payload["headers"]["authorization"] == "Bearer...mnop"


def test_write_cli_log_appends(tmp_path):
    log_file = tmp_path / "proxy.log"

    write_cli_log("STARTUP", "listening on 4010", log_file=log_file)
    write_cli_log("ERROR", "boom", log_file=log_file, status=502)

    lines = log_file.read_text().splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("STARTUP: listening on 4010")
    assert lines[1].endswith("ERROR: boom status=502")


def test_clear_logs(tmp_path):
    root = tmp_path / "logs"
    (root / "incoming").mkdir(parents=True)
    (root / "proxy.log").write_text("x")

    clear_logs(root)

    assert not root.exists()


@pytest.fixture
def cli_lines(monkeypatch):
    lines = []
    monkeypatch.setattr(
        dashboard_module,
        "write_cli_log",
        lambda level, message, **extra: lines.append((level, message, extra)),
    )
    return lines


def test_dashboard_counts_and_logs(cli_lines):
    dashboard = Dashboard(Config())

    dashboard.log_forward("GET", "/iip/foo", "http://localhost/foo")
    dashboard.log_rejected("POST", "/iip/bar")
    dashboard.log_error("GET /iip/foo", 502, "Upstream connection error: refused")

    assert dashboard._request_count == {"forwarded": 1, "rejected": 1, "errors": 1}
    assert [line[0] for line in cli_lines] == ["FORWARD", "REJECT", "ERROR"]
    assert cli_lines[0][2] == {"target": "http://localhost/foo"}
    # Layout can be built without a running Live display
    assert dashboard._build_layout() is not None
