import logging
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from logging_config import configure_logging
from payloads import SUPPORTED_TYPES, PayloadError, parse_request
from rendering import RenderingFailed, render_data_url
from settings import Settings, load_settings

logger = logging.getLogger(__name__)

GENERATION_FAILED = "Failed to generate QR code"


def _error(message: str, status: int):
    return jsonify({"success": False, "error": message}), status


def create_app(settings: Optional[Settings] = None) -> Flask:
    settings = settings or load_settings()

    app = Flask(__name__)
    app.config["QR_SETTINGS"] = settings

    origins = settings.cors_origins
    CORS(
        app,
        resources={
            r"/api/*": {"origins": origins if origins == "*" else list(origins)}
        },
    )

    @app.route("/api/health", methods=["GET"])
    def health_check():
        return jsonify({"status": "ok", "message": "QR Code API is running"}), 200

    @app.route("/api/generate", methods=["POST"])
    def generate():
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            body = {}
        qr_type = body.get("type")
        response_type = qr_type if isinstance(qr_type, str) and qr_type else "url"

        try:
            content = parse_request(body).content()
            qr_code = render_data_url(content, settings.render)
        except PayloadError as exc:
            logger.info("Rejected %s request: %s", response_type, exc)
            return _error(str(exc), 400)
        except RenderingFailed:
            logger.exception("QR generation error for %s request", response_type)
            return _error(GENERATION_FAILED, 500)
        except Exception:
            logger.exception("Unexpected error for %s request", response_type)
            return _error(GENERATION_FAILED, 500)

        logger.debug(
            "Generated %s QR code (%d characters)", response_type, len(content)
        )
        return (
            jsonify(
                {
                    "success": True,
                    "type": response_type,
                    "content": content,
                    "qrCode": qr_code,
                }
            ),
            200,
        )

    @app.errorhandler(404)
    def not_found(error):
        return _error("Endpoint not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return _error("Method not allowed", 405)

    @app.errorhandler(500)
    def internal_server_error(error):
        return _error(GENERATION_FAILED, 500)

    return app


def main() -> None:
    settings = app.config["QR_SETTINGS"]
    configure_logging(settings.log_level)

    base = f"http://localhost:{settings.port}"
    logger.info("QR Code API running on %s", base)
    logger.info("Health check: %s/api/health", base)
    logger.info("Generate QR: POST %s/api/generate", base)
    logger.info("Supported types: %s", ", ".join(SUPPORTED_TYPES))

    app.run(host=settings.host, port=settings.port)


app = create_app()


if __name__ == "__main__":
    main()
