import logging
from functools import partial

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .api import api_bp
from .config import Settings, get_settings
from .credentials import load_service_account
from .errors import SheetMarkError, UnknownError
from .services.sheets import GoogleSheetsStore


def create_app(settings: Settings | None = None, store_factory=None):
    '''
    Build the Flask app.

    store_factory maps a spreadsheet ID to a store object; when omitted the
    service account is loaded here, so bad credentials stop the process at
    startup rather than on the first request.
    '''
    settings = settings or get_settings()

    if store_factory is None:
        service_account = load_service_account(settings)
        store_factory = partial(
            GoogleSheetsStore.from_config,
            service_account,
            timeout=settings.SHEETS_TIMEOUT,
            num_retries=settings.SHEETS_NUM_RETRIES,
        )

    app = Flask(__name__)
    app.config.update(
        SETTINGS=settings,
        STORE_FACTORY=store_factory,
        MAX_CONTENT_LENGTH=settings.MAX_UPLOAD_BYTES,
    )
    app.json.ensure_ascii = False

    app.logger.setLevel(settings.LOG_LEVEL)
    logging.getLogger("sheetmark").setLevel(settings.LOG_LEVEL)

    # ---- health ----
    @app.get("/healthz")
    def healthz():
        return jsonify(ok=True, env=settings.ENV)

    # ---- errors ----
    def json_error(status: int, kind: str, message: str):
        return jsonify({"error": message, "kind": kind}), status

    @app.errorhandler(SheetMarkError)
    def _sheetmark_error(e):
        app.logger.warning("%s error at stage %s: %s", e.kind, getattr(e.stage, "value", None), e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def _http_error(e):
        return json_error(e.code, "http", e.description)

    @app.errorhandler(Exception)
    def _unknown_error(e):
        app.logger.error("API Handler Error", exc_info=True)
        err = UnknownError(f"API Error: {e}" if str(e) else "An unknown error occurred.")
        return jsonify(err.to_dict()), err.status_code

    # Root helper so hitting / is never confusing
    @app.get("/")
    def root():
        return jsonify(ok=True, message="Use /healthz or /v1/*"), 200

    app.register_blueprint(api_bp, url_prefix="/v1")

    return app


if __name__ == "__main__":
    # Handy for: python -m sheetmark.wsgi
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)
    create_app(settings).run(host="0.0.0.0", port=5000, debug=settings.DEBUG)
