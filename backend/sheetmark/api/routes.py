# routes.py
from flask import current_app, jsonify, request

from ..errors import InvalidRequestError
from ..services.csv_extractor import extract_identifiers
from ..services.reconciler import SheetReconciler
from ..services.sheets import parse_spreadsheet_id
from . import api_bp


def _is_csv(upload) -> bool:
    return upload.mimetype == "text/csv" or upload.filename.lower().endswith(".csv")


def _require_text(data, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequestError(f"Missing required field '{key}'")
    return value


def _grey_out(spreadsheet_id: str, sheet_name: str, identifiers: list[str]):
    settings = current_app.config["SETTINGS"]
    store = current_app.config["STORE_FACTORY"](spreadsheet_id)

    current_app.logger.info(
        "Greying out %d project IDs in spreadsheet %s, sheet %r",
        len(identifiers), spreadsheet_id, sheet_name,
    )

    result = SheetReconciler(
        store,
        label=settings.PROJECT_ID_LABEL,
        color=settings.grey_color,
    ).reconcile(sheet_name, identifiers)

    return jsonify(result.to_dict()), 200


@api_bp.get("/ping")
def ping():
    return jsonify(ok=True, msg="pong")


@api_bp.post("/mark")
def mark_rows():
    settings = current_app.config["SETTINGS"]

    upload = request.files.get("file")
    if upload is None or not upload.filename:
        raise InvalidRequestError("File is not selected.")
    if not _is_csv(upload):
        raise InvalidRequestError(
            "Error: The selected file is not in CSV format. Please select a CSV file."
        )

    spreadsheet_id = parse_spreadsheet_id(request.form.get("spreadsheet"))
    sheet_name = _require_text(request.form, "sheetName")

    identifiers = extract_identifiers(
        upload.read(),
        settings.PROJECT_ID_LABEL,
        encoding=request.form.get("encoding") or settings.CSV_ENCODING,
        fallback_encoding=settings.CSV_FALLBACK_ENCODING,
    )

    return _grey_out(spreadsheet_id, sheet_name, identifiers)


@api_bp.post("/send")
def send_project_ids():
    json_data = request.get_json(silent=True)
    if not json_data:
        raise InvalidRequestError("No JSON data received")

    project_ids = json_data.get("extractedProjectIDs")
    if not isinstance(project_ids, list):
        raise InvalidRequestError("'extractedProjectIDs' must be a list of project IDs")

    identifiers = [str(value).strip() for value in project_ids if value is not None and str(value).strip()]
    spreadsheet_id = parse_spreadsheet_id(json_data.get("googleSpreadSheetID"))
    sheet_name = _require_text(json_data, "sheetName")

    return _grey_out(spreadsheet_id, sheet_name, identifiers)
