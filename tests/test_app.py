import base64
import logging
from unittest.mock import MagicMock

import app as server
from rendering import PNG_DATA_URL_PREFIX, RenderingFailed


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok", "message": "QR Code API is running"}


def test_generate_wifi(client):
    response = client.post(
        "/api/generate", json={"type": "wifi", "data": {"ssid": "Home"}}
    )
    body = response.get_json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["type"] == "wifi"
    assert body["content"] == "WIFI:T:WPA;S:Home;P:;;"
    assert body["qrCode"].startswith(PNG_DATA_URL_PREFIX)
    base64.b64decode(body["qrCode"][len(PNG_DATA_URL_PREFIX):], validate=True)


def test_generate_url_adds_scheme(client):
    response = client.post(
        "/api/generate", json={"type": "url", "data": {"url": "example.com"}}
    )
    assert response.status_code == 200
    assert response.get_json()["content"] == "https://example.com"


def test_legacy_body_reports_url_type(client):
    response = client.post("/api/generate", json={"url": "example.com"})
    body = response.get_json()
    assert response.status_code == 200
    assert body["type"] == "url"
    assert body["content"] == "https://example.com"


def test_legacy_body_echoes_unknown_type(client):
    response = client.post(
        "/api/generate", json={"type": "custom", "url": "example.com"}
    )
    assert response.get_json()["type"] == "custom"


def test_missing_field_is_400(client):
    response = client.post("/api/generate", json={"type": "sms", "data": {}})
    assert response.status_code == 400
    assert response.get_json() == {
        "success": False,
        "error": "Phone number is required",
    }


def test_missing_data_wrapper_is_400(client):
    response = client.post("/api/generate", json={"type": "email"})
    assert response.status_code == 400
    assert response.get_json()["error"] == "Email address is required"


def test_invalid_url_is_400(client):
    response = client.post(
        "/api/generate", json={"type": "url", "data": {"url": "bad host.com"}}
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "Invalid URL format"


def test_unknown_type_is_400(client):
    response = client.post("/api/generate", json={"type": "vcard", "data": {}})
    assert response.status_code == 400
    assert response.get_json()["error"] == (
        "Invalid QR type. Use: url, text, wifi, phone, sms, email"
    )


def test_non_json_body_is_unsupported_type(client):
    response = client.post("/api/generate", data="url=example.com")
    assert response.status_code == 400
    assert response.get_json()["error"].startswith("Invalid QR type")


def test_json_array_body_is_unsupported_type(client):
    response = client.post("/api/generate", json=["url"])
    assert response.status_code == 400


def test_rendering_failure_is_500(client, monkeypatch, caplog):
    def _fail(content, options):
        raise RenderingFailed("boom")

    monkeypatch.setattr(server, "render_data_url", _fail)
    with caplog.at_level(logging.ERROR, logger="app"):
        response = client.post(
            "/api/generate", json={"type": "text", "data": {"text": "hello"}}
        )
    assert response.status_code == 500
    assert response.get_json() == {
        "success": False,
        "error": "Failed to generate QR code",
    }
    assert "QR generation error" in caplog.text


def test_unexpected_error_is_500_without_details(client, monkeypatch):
    def _fail(content, options):
        raise KeyError("secret detail")

    monkeypatch.setattr(server, "render_data_url", _fail)
    response = client.post(
        "/api/generate", json={"type": "text", "data": {"text": "hello"}}
    )
    assert response.status_code == 500
    assert response.get_json() == {
        "success": False,
        "error": "Failed to generate QR code",
    }


def test_rejected_payload_content_is_not_logged(client, caplog):
    with caplog.at_level(logging.INFO, logger="app"):
        client.post("/api/generate", json={"type": "url", "data": {"url": "a b"}})
    assert "Rejected url request: Invalid URL format" in caplog.text
    assert "a b" not in caplog.text


def test_unknown_route_is_json_404(client):
    response = client.get("/api/missing")
    assert response.status_code == 404
    assert response.get_json()["success"] is False


def test_wrong_method_is_json_405(client):
    response = client.get("/api/generate")
    assert response.status_code == 405
    assert response.get_json()["success"] is False


def test_cors_allows_configured_origin(client):
    response = client.get(
        "/api/health", headers={"Origin": "http://localhost:4200"}
    )
    assert response.headers["Access-Control-Allow-Origin"] == "http://localhost:4200"


def test_cors_ignores_other_origins(client):
    response = client.get("/api/health", headers={"Origin": "http://evil.test"})
    assert "Access-Control-Allow-Origin" not in response.headers


def test_settings_are_attached_to_app(settings):
    flask_app = server.create_app(settings)
    assert flask_app.config["QR_SETTINGS"] is settings


def test_unexpected_error_in_debug_mode_is_still_500(
    settings, monkeypatch, caplog
):
    def _fail(content, options):
        raise KeyError("secret detail")

    monkeypatch.setattr(server, "render_data_url", _fail)
    flask_app = server.create_app(settings)
    flask_app.debug = True
    with caplog.at_level(logging.ERROR, logger="app"):
        response = flask_app.test_client().post(
            "/api/generate", json={"type": "text", "data": {"text": "hello"}}
        )
    assert response.status_code == 500
    assert "secret detail" not in response.get_data(as_text=True)
    assert "Unexpected error for text request" in caplog.text


def test_unencodable_email_subject_is_500(client):
    response = client.post(
        "/api/generate",
        json={"type": "email", "data": {"email": "a@b.com", "subject": "\ud800"}},
    )
    assert response.status_code == 500
    assert response.get_json()["error"] == "Failed to generate QR code"


def test_main_runs_module_app_with_its_settings(monkeypatch, caplog):
    configure = MagicMock()
    run = MagicMock()
    monkeypatch.setattr(server, "configure_logging", configure)
    monkeypatch.setattr(server.app, "run", run)

    settings = server.app.config["QR_SETTINGS"]
    with caplog.at_level(logging.INFO, logger="app"):
        server.main()

    configure.assert_called_once_with(settings.log_level)
    run.assert_called_once_with(host=settings.host, port=settings.port)
    assert f"QR Code API running on http://localhost:{settings.port}" in caplog.text
    assert "Health check:" in caplog.text
    assert "Generate QR: POST" in caplog.text
    assert "Supported types: url, text, wifi, phone, sms, email" in caplog.text
