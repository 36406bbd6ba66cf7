import json

import pytest

from ephany_tools import __main__ as cli
from ephany_tools.api import EphanyClient
from ephany_tools.models import Asset

from conftest import FakeResponse, FakeSession, asset_json, file_json, page_json

ENV = {"EPHANY_BASE_URL": "https://ephany.test/api", "EPHANY_API_KEY": "k"}


@pytest.fixture
def fake_session(monkeypatch):
    session = FakeSession()
    for key, value in ENV.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv("EPHANY_AUTH_SCHEME", raising=False)
    # Patch the client used by the CLI so it talks to our fake session
    monkeypatch.setattr(cli, "EphanyClient", lambda options: EphanyClient(options, session=session))
    return session


def test_render_table_truncates_and_flags_rfa():
    assets = [
        Asset.from_dict(asset_json(1, name="A" * 50, files=[file_json(1, "RFA")])),
        Asset.from_dict(asset_json(2, manufacturer_name=None)),
    ]
    table = cli.render_table(assets, show_row_numbers=True)
    assert "A" * 32 + "..." in table
    assert "A" * 33 not in table
    assert "[YES]" in table and "[NO]" in table
    assert "N/A" in table


def test_render_table_empty():
    assert cli.render_table([]) == "No assets found."


def test_page_command_prints_json(fake_session, capsys):
    fake_session.queue(FakeResponse(200, page_json([asset_json(1)], count=1)))
    assert cli.main(["page", "--page", "2", "--page-size", "5", "--json"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["count"] == 1
    assert out["results"][0]["type_id"] == "AVN-1"
    assert fake_session.calls[0]["params"] == {"page": 2, "pageSize": 5}
    assert fake_session.closed == 1


def test_search_command(fake_session, capsys):
    fake_session.queue(FakeResponse(200, page_json([asset_json(1)], count=12)))
    assert cli.main(["search", "oven"]) == 0
    out = capsys.readouterr().out
    assert "Searching for 'oven'" in out
    assert "Total Assets: 12" in out
    assert fake_session.calls[0]["params"]["search"] == "oven"


def test_user_token_scheme_flag(fake_session):
    fake_session.queue(FakeResponse(200, page_json([])))
    assert cli.main(["--scheme", "user_token", "page"]) == 0
    assert fake_session.calls[0]["headers"]["Authorization"] == "Token k"


def test_all_command_writes_csv(fake_session, tmp_path, capsys):
    fake_session.queue(
        FakeResponse(200, page_json([asset_json(1)], next_url="more")),
        FakeResponse(200, page_json([asset_json(2)])),
    )
    csv_path = tmp_path / "all.csv"
    assert cli.main(["all", "--csv", str(csv_path)]) == 0
    assert csv_path.exists()
    assert "Total Assets retrieved: 2" in capsys.readouterr().out


def test_revit_row_download(fake_session, tmp_path, capsys):
    fake_session.queue(
        FakeResponse(200, page_json([asset_json(1), asset_json(2, files=[file_json(5, "RFA")])])),
        FakeResponse(200, chunks=[b"rfa-bytes"]),
    )
    assert cli.main(["revit", "--row", "1", "--out", str(tmp_path)]) == 0
    assert (tmp_path / "AVN-2.rfa").read_bytes() == b"rfa-bytes"
    assert "Found 1 assets with RFA files." in capsys.readouterr().out


def test_revit_row_out_of_range(fake_session, tmp_path):
    fake_session.queue(FakeResponse(200, page_json([])))
    assert cli.main(["revit", "--row", "3", "--out", str(tmp_path)]) == 2


def test_auth_error_exit_code(fake_session, capsys):
    fake_session.queue(FakeResponse(401, {}))
    assert cli.main(["page"]) == 1
    assert "invalid or expired" in capsys.readouterr().err


def test_missing_environment(monkeypatch, capsys):
    monkeypatch.delenv("EPHANY_BASE_URL", raising=False)
    monkeypatch.delenv("EPHANY_API_KEY", raising=False)
    assert cli.main(["page"]) == 1
    assert "EPHANY_BASE_URL" in capsys.readouterr().err
