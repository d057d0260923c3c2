import pytest

import audit
from app import create_app


@pytest.fixture
def app(store_config):
    app = create_app(store_config)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return app.extensions["secured_store"]


def actions():
    return [row["action"] for row in audit.get_logs()]


def test_read_secured_file(client, store, report):
    urls = store.add(report, "reports/")
    resp = client.get("/" + urls["read"])
    assert resp.status_code == 200
    assert resp.data == report.read_bytes()
    assert resp.headers["Content-Type"] == "application/pdf"
    assert resp.headers["Content-Length"] == str(len(report.read_bytes()))
    assert resp.headers["Cache-Control"] == "must-revalidate"
    assert "Content-Disposition" not in resp.headers
    assert actions() == ["secured_read"]


def test_download_secured_file(client, store, report):
    urls = store.add(report, "reports/")
    resp = client.get("/" + urls["download"])
    assert resp.status_code == 200
    assert resp.data == report.read_bytes()
    assert resp.headers["Content-Disposition"] == 'attachment; filename="report.pdf"'
    assert actions() == ["secured_download"]


@pytest.mark.parametrize("query", ["", "?k=wrongkey", "?k=wrongkey&d=1"])
def test_invalid_access_serves_nothing(client, store, report, query):
    store.add(report, "reports/")
    resp = client.get("/reports/report.pdf" + query)
    assert resp.status_code == 404
    assert report.read_bytes() not in resp.data
    assert actions() == ["secured_denied"]


def test_stored_blob_is_not_served_by_name(client, store, report):
    urls = store.add(report, "reports/")
    blob = store.open("reports/report.pdf", urls["key"]).address_hash
    assert client.get("/" + blob).status_code == 404


def test_cli_init(app, store):
    result = app.test_cli_runner().invoke(args=["secured-init"])
    assert result.exit_code == 0
    assert (store.config.store_path / ".htaccess").exists()
    assert (store.config.store_path / "read.py").exists()


def test_cli_add_and_delete(app, client, report):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["secured-add", str(report), "reports"])
    assert result.exit_code == 0
    read_url = result.output.splitlines()[0].removeprefix("read: ")
    assert read_url.startswith("reports/report.pdf?k=")
    assert client.get("/" + read_url).status_code == 200

    result = runner.invoke(args=["secured-delete", read_url])
    assert result.exit_code == 0
    assert client.get("/" + read_url).status_code == 404

    result = runner.invoke(args=["secured-delete", read_url])
    assert result.exit_code != 0
    assert "Resource not found" in result.output
    assert actions()[:4] == ["secured_denied", "secured_delete", "secured_read", "secured_add"]


def test_access_trail_records_path_and_reason(client, store, report):
    urls = store.add(report, "reports/")
    client.get("/reports/report.pdf?k=wrongkey")
    client.get("/" + urls["read"])
    denied, read = audit.path_history("reports/report.pdf")[::-1]
    assert denied["action"] == "secured_denied"
    assert denied["reason"] == "Resource unavailable"
    assert read["action"] == "secured_read"
    assert read["reason"] is None
    assert audit.path_history("other.pdf") == []


def test_cli_history(app, client, store, report):
    urls = store.add(report, "reports/")
    client.get("/" + urls["read"] + "&d=1")
    result = app.test_cli_runner().invoke(args=["secured-history", "reports/report.pdf"])
    assert result.exit_code == 0
    assert "secured_download" in result.output
