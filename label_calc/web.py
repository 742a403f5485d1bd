"""Flask web interface for the label calculator and batch register."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import io
import math
import logging
from typing import Any, Dict, Mapping, Optional

from flask import (
    Blueprint,
    Flask,
    abort,
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    send_file,
    url_for,
)

from .calculator import PackingInput, PackingResult, calculate_packing
from .export import EXPORT_KINDS, export_csv, export_filename, export_pdf, export_xlsx
from .records import PartCatalog, RecordNotFound, RecordStore
from .suggestions import SuggestionCache
from .trace import headline, visible_lines

logger = logging.getLogger(__name__)

bp = Blueprint("label_calc", __name__)

_DEFAULT_FORM = {
    "part_code": "",
    "batch_number": "",
    "total_units": "",
    "units_per_container": "",
    "containers_per_pallet": "",
    "notes": "",
    "show_detailed": "",
    "confirm_catalog_update": "",
}

_DEFAULT_CONFIG = {
    "SECRET_KEY": "dev",
    "SUGGESTION_LIMIT": 10,
    "SUGGESTION_CAPACITY": 100,
    "SHOW_DETAILED_CALC": False,
    "RECORDS_PER_PAGE": 10,
}


@dataclass
class Stores:
    records: RecordStore
    parts: PartCatalog
    suggestions: SuggestionCache


def _stores() -> Stores:
    return current_app.extensions["label_calc"]


def _is_checked(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"on", "y", "yes", "true", "1"}


def _prefill_from_catalog(form_values: Dict[str, str]) -> None:
    defaults = _stores().parts.lookup(form_values.get("part_code", ""))
    if defaults is None:
        return
    if not form_values.get("units_per_container"):
        form_values["units_per_container"] = str(defaults.units_per_container)
    if not form_values.get("containers_per_pallet"):
        form_values["containers_per_pallet"] = str(defaults.containers_per_pallet)


def _calculate(form_values: Mapping[str, str]) -> Optional[PackingResult]:
    """Result to display, or ``None`` while the form is incomplete."""

    if not form_values.get("total_units") or not form_values.get("units_per_container"):
        return None
    raw = {
        "total_units": form_values["total_units"],
        "units_per_container": form_values["units_per_container"],
        "containers_per_pallet": form_values.get("containers_per_pallet") or 1,
    }
    result = calculate_packing(PackingInput.from_mapping(raw))
    if result.total_units == 0:
        return None
    return result


def _render_index(form_values: Dict[str, str], result, error: Optional[str], status: int = 200):
    show_detailed = _is_checked(form_values.get("show_detailed")) or current_app.config[
        "SHOW_DETAILED_CALC"
    ]
    return (
        render_template(
            "index.html",
            form=form_values,
            result=result,
            headline=headline(result) if result else None,
            trace_lines=visible_lines(result) if result and show_detailed else [],
            show_detailed=show_detailed,
            error=error,
        ),
        status,
    )


@bp.route("/", methods=["GET", "POST"])
def index():
    form_values = dict(_DEFAULT_FORM)
    error: str | None = None
    result: PackingResult | None = None

    if request.method == "POST":
        form_values.update(request.form.to_dict())
        _prefill_from_catalog(form_values)
        try:
            result = _calculate(form_values)
        except ValueError as exc:
            error = str(exc)

    return _render_index(form_values, result, error)


@bp.route("/records", methods=["POST"])
def register():
    stores = _stores()
    form_values = dict(_DEFAULT_FORM)
    form_values.update(request.form.to_dict())
    _prefill_from_catalog(form_values)

    part_code = form_values["part_code"].strip()
    batch_number = form_values["batch_number"].strip()
    try:
        result = _calculate(form_values)
    except ValueError as exc:
        return _render_index(form_values, None, str(exc), 400)

    if not part_code or not batch_number or result is None:
        return _render_index(form_values, result, "Please fill in all required fields.", 400)
    if stores.records.has_batch(batch_number):
        return _render_index(
            form_values, result, f"Batch {batch_number} is already registered.", 409
        )

    existing = stores.parts.lookup(part_code)
    if stores.parts.conflicts(part_code, result.units_per_container, result.containers_per_pallet):
        if not _is_checked(form_values.get("confirm_catalog_update")):
            message = (
                f"Part {part_code} is stored with {existing.units_per_container} pieces per"
                f" package and {existing.containers_per_pallet} packages per pallet."
                " Confirm to update the part defaults."
            )
            return _render_index(form_values, result, message, 409)
        logger.info("Updating catalog defaults for part %s", part_code)

    try:
        record = stores.records.add(part_code, batch_number, result, notes=form_values["notes"])
    except ValueError as exc:
        return _render_index(form_values, result, str(exc), 400)
    stores.parts.remember(part_code, result.units_per_container, result.containers_per_pallet)
    for field in ("part_code", "batch_number", "notes"):
        stores.suggestions.record(field, form_values[field])

    flash(f"Record {record.id} registered: {record.total_labels} labels.")
    return redirect(url_for("label_calc.records"))


@bp.route("/records", methods=["GET"])
def records():
    query = request.args.get("q", "")
    matches = _stores().records.search(query)
    per_page = current_app.config["RECORDS_PER_PAGE"]
    page_count = max(1, math.ceil(len(matches) / per_page))
    page = min(max(request.args.get("page", 1, type=int), 1), page_count)
    start = (page - 1) * per_page
    return render_template(
        "records.html",
        records=matches[start:start + per_page],
        query=query,
        page=page,
        page_count=page_count,
        total=len(matches),
    )


@bp.route("/records/<int:record_id>/edit", methods=["POST"])
def edit_record(record_id: int):
    form = request.form
    try:
        record = _stores().records.update(
            record_id,
            part_code=form.get("part_code", ""),
            batch_number=form.get("batch_number", ""),
            total_labels=int(form.get("total_labels", "")),
            extra_pieces=int(form.get("extra_pieces", "0") or 0),
            notes=form.get("notes", ""),
        )
    except RecordNotFound:
        abort(404)
    except ValueError as exc:
        flash(str(exc))
    else:
        flash(f"Record {record.id} updated: {record.total_pieces} pieces.")
    return redirect(url_for("label_calc.records"))


@bp.route("/records/<int:record_id>/used", methods=["POST"])
def update_used(record_id: int):
    try:
        used_labels = int(request.form.get("used_labels", ""))
        _stores().records.update_used_labels(record_id, used_labels)
    except RecordNotFound:
        abort(404)
    except ValueError as exc:
        flash(str(exc))
    return redirect(url_for("label_calc.records"))


@bp.route("/records/<int:record_id>/delete", methods=["POST"])
def delete_record(record_id: int):
    try:
        _stores().records.delete(record_id)
    except RecordNotFound:
        abort(404)
    flash(f"Record {record_id} deleted.")
    return redirect(url_for("label_calc.records"))


@bp.route("/records/export/<kind>")
def export(kind: str):
    if kind not in EXPORT_KINDS:
        abort(404)
    records = _stores().records.search(request.args.get("q", ""))
    today = date.today()
    if kind == "csv":
        text = io.StringIO()
        export_csv(records, text)
        buffer = io.BytesIO(text.getvalue().encode("utf-8"))
    else:
        buffer = io.BytesIO()
        if kind == "pdf":
            export_pdf(records, buffer, today)
        else:
            export_xlsx(records, buffer)
        buffer.seek(0)
    return send_file(
        buffer,
        mimetype=EXPORT_KINDS[kind],
        as_attachment=True,
        download_name=export_filename(kind, today),
    )


@bp.route("/parts", methods=["GET"])
def parts():
    return render_template("parts.html", parts=_stores().parts.all())


@bp.route("/parts", methods=["POST"])
def save_part():
    form = request.form
    code = form.get("code", "")
    try:
        defaults = _stores().parts.remember(
            code,
            int(form.get("units_per_container", "")),
            int(form.get("containers_per_pallet", "") or 1),
        )
    except ValueError as exc:
        flash(str(exc))
        return render_template("parts.html", parts=_stores().parts.all(), form=form), 400
    flash(f"Part {defaults.code} saved.")
    return redirect(url_for("label_calc.parts"))


@bp.route("/parts/<code>/delete", methods=["POST"])
def delete_part(code: str):
    try:
        _stores().parts.delete(code)
    except RecordNotFound:
        abort(404)
    flash(f"Part {code} deleted.")
    return redirect(url_for("label_calc.parts"))


@bp.route("/api/calculate")
def api_calculate():
    try:
        result = calculate_packing(PackingInput.from_mapping(request.args.to_dict()))
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify(result.to_dict())


@bp.route("/api/parts/<code>")
def api_part(code: str):
    defaults = _stores().parts.lookup(code)
    if defaults is None:
        return jsonify({"error": f"Unknown part code '{code}'."}), 404
    return jsonify(
        {
            "code": defaults.code,
            "units_per_container": defaults.units_per_container,
            "containers_per_pallet": defaults.containers_per_pallet,
            "last_used": defaults.last_used.isoformat(),
        }
    )


@bp.route("/api/suggestions/<field>")
def api_suggestions(field: str):
    try:
        matches = _stores().suggestions.suggest(
            field, request.args.get("q", ""), limit=current_app.config["SUGGESTION_LIMIT"]
        )
    except KeyError:
        return jsonify({"error": f"Unknown suggestion field '{field}'."}), 404
    return jsonify([entry.value for entry in matches])


def create_app(test_config: Optional[Mapping[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.config.from_mapping(_DEFAULT_CONFIG)
    if test_config is None:
        app.config.from_prefixed_env("LABEL_CALC")
    else:
        app.config.from_mapping(test_config)

    app.extensions["label_calc"] = Stores(
        records=RecordStore(),
        parts=PartCatalog(),
        suggestions=SuggestionCache(capacity=app.config["SUGGESTION_CAPACITY"]),
    )
    app.register_blueprint(bp)
    logger.debug("Label calculator app created")
    return app


if __name__ == "__main__":
    create_app().run(debug=True)
