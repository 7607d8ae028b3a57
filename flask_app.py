from __future__ import annotations

import hmac
from typing import Any

from flask import Flask, jsonify, request

from auth import (
    DEFAULT_ADMIN_PASSWORD,
    admin_required,
    clear_admin_cookie,
    hash_password,
    set_admin_cookie,
    verify_password,
)
from day_type import (
    DAY_TYPE_LABELS,
    DAY_TYPES,
    ON_SITE,
    REMOTE,
    apply_auto_day_type,
    normalize_day_list,
    normalize_day_type,
    normalize_tuesday_mode,
    serialize_days_field,
)
from db import get_session, init_db
from school_time import get_date_info, now_utc
from settings_service import (
    SchoolSettingsManager,
    normalize_periods,
    normalize_terms,
    period_to_dict,
    settings_to_dict,
    term_to_dict,
)
from terms import compute_term_status

app = Flask(__name__)
init_db()
session_factory = get_session
settings_manager = SchoolSettingsManager(session_factory=session_factory)


def _json_body() -> dict[str, Any]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _requested_day_type(value: Any) -> str | None:
    text = str(value or "").strip().upper()
    return text if text in DAY_TYPES else None


admin_only = admin_required(settings_manager.find_settings)


@app.route("/health")
def health():
    return jsonify({"status": "ok"})


@app.route("/api/periods")
def periods():
    now = now_utc()
    terms = settings_manager.list_terms()
    settings = apply_auto_day_type(
        settings_manager.find_settings(),
        settings_manager,
        now=now,
        terms=terms,
    )
    if not settings:
        return jsonify({"error": "settings have not been initialised"}), 500
    day_type = normalize_day_type(settings.current_day_type)
    term_status = compute_term_status(terms, now)
    return jsonify(
        {
            "day_type": day_type,
            "day_type_label": DAY_TYPE_LABELS[day_type],
            "periods": [period_to_dict(p) for p in settings_manager.list_periods(day_type)],
            "header": {
                "school_name": settings.school_name,
                "manager_name": settings.manager_name,
            },
            "updated_at": settings.updated_at.isoformat() if settings.updated_at else None,
            "date": get_date_info(now),
            "now": now.isoformat(),
            "term_status": term_status.to_dict() if term_status else None,
        }
    )


@app.route("/api/header")
def header():
    settings = settings_manager.find_settings()
    if not settings:
        return jsonify({"error": "settings have not been initialised"}), 500
    return jsonify(
        {
            "school_name": settings.school_name,
            "manager_name": settings.manager_name,
            "date": get_date_info(),
        }
    )


@app.route("/api/admin/login", methods=["POST"])
def admin_login():
    password = _json_body().get("password")
    if not password or not isinstance(password, str):
        return jsonify({"error": "password is required"}), 400

    settings = settings_manager.ensure_settings(hash_password(DEFAULT_ADMIN_PASSWORD))
    matches_stored = verify_password(settings.admin_password_hash, password)
    matches_default = hmac.compare_digest(password.encode("utf-8"), DEFAULT_ADMIN_PASSWORD.encode("utf-8"))

    if not matches_stored and not matches_default:
        app.logger.warning("Rejected admin login attempt")
        return jsonify({"success": False, "error": "incorrect password"}), 401

    # The default password doubles as a recovery password.
    if not matches_stored and matches_default:
        try:
            settings = settings_manager.update_settings(
                settings.id,
                admin_password_hash=hash_password(DEFAULT_ADMIN_PASSWORD),
            )
        except Exception:
            app.logger.exception("Failed to reset admin password")
            return jsonify({"error": "unable to reset password"}), 500
        app.logger.info("Admin password reset to the default recovery password")

    return set_admin_cookie(jsonify({"success": True}), settings)


@app.route("/api/admin/logout", methods=["POST"])
def admin_logout():
    return clear_admin_cookie(jsonify({"success": True}))


@app.route("/api/admin/settings")
@admin_only
def admin_settings(settings):
    return jsonify({"settings": settings_to_dict(settings)})


@app.route("/api/admin/update-header", methods=["POST"])
@admin_only
def update_header(settings):
    body = _json_body()
    school_name = str(body.get("school_name") or "").strip()
    manager_name = str(body.get("manager_name") or "").strip()
    if not school_name or not manager_name:
        return jsonify({"error": "school_name and manager_name are required"}), 400
    try:
        updated = settings_manager.update_settings(
            settings.id,
            school_name=school_name,
            manager_name=manager_name,
        )
    except Exception:
        app.logger.exception("Failed to update header")
        return jsonify({"error": "unable to update header"}), 500
    return jsonify({"success": True, "settings": settings_to_dict(updated)})


@app.route("/api/admin/update-password", methods=["POST"])
@admin_only
def update_password(settings):
    body = _json_body()
    old_password = body.get("old_password")
    new_password = body.get("new_password")
    if not old_password or not new_password:
        return jsonify({"error": "old_password and new_password are required"}), 400
    if not verify_password(settings.admin_password_hash, str(old_password)):
        return jsonify({"error": "current password is incorrect"}), 400
    try:
        updated = settings_manager.update_settings(
            settings.id,
            admin_password_hash=hash_password(str(new_password)),
        )
    except Exception:
        app.logger.exception("Failed to update admin password")
        return jsonify({"error": "unable to update password"}), 500
    app.logger.info("Admin password changed")
    return set_admin_cookie(jsonify({"success": True}), updated)


@app.route("/api/admin/update-day-type", methods=["POST"])
@admin_only
def update_day_type(settings):
    day_type = _requested_day_type(_json_body().get("day_type"))
    if not day_type:
        return jsonify({"error": "invalid day type"}), 400
    try:
        updated = settings_manager.update_settings(settings.id, current_day_type=day_type)
    except Exception:
        app.logger.exception("Failed to update day type")
        return jsonify({"error": "unable to update day type"}), 500
    app.logger.info("Day type set manually to %s", day_type)
    return jsonify({"success": True, "settings": settings_to_dict(updated)})


@app.route("/api/admin/update-auto-day-type", methods=["POST"])
@admin_only
def update_auto_day_type(settings):
    body = _json_body()
    fields = {
        "auto_day_type_enabled": bool(body.get("auto_day_type_enabled")),
        "on_site_days": serialize_days_field(normalize_day_list(body.get("on_site_days"))),
        "remote_days": serialize_days_field(normalize_day_list(body.get("remote_days"))),
    }
    if "tuesday_mode" in body:
        fields["tuesday_mode"] = normalize_tuesday_mode(body.get("tuesday_mode"))
    if "tuesday_odd_week_type" in body:
        fields["tuesday_odd_week_type"] = normalize_day_type(body.get("tuesday_odd_week_type"), ON_SITE)
    if "tuesday_even_week_type" in body:
        fields["tuesday_even_week_type"] = normalize_day_type(body.get("tuesday_even_week_type"), REMOTE)
    try:
        updated = settings_manager.update_settings(settings.id, **fields)
        applied = apply_auto_day_type(updated, settings_manager)
    except Exception:
        app.logger.exception("Failed to update automatic day type")
        return jsonify({"error": "unable to save automatic day type"}), 500
    return jsonify(
        {
            "success": True,
            "settings": settings_to_dict(applied),
            "applied_day_type": normalize_day_type(applied.current_day_type),
        }
    )


@app.route("/api/admin/update-periods", methods=["POST"])
@admin_only
def update_periods(settings):
    body = _json_body()
    day_type = _requested_day_type(body.get("day_type"))
    if not day_type:
        return jsonify({"error": "invalid day type"}), 400
    try:
        normalized = normalize_periods(body.get("periods", []))
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    try:
        saved = settings_manager.replace_periods(day_type, normalized)
    except Exception:
        app.logger.exception("Failed to save %s periods", day_type)
        return jsonify({"error": "unable to save periods"}), 500
    return jsonify({"success": True, "periods": [period_to_dict(p) for p in saved]})


@app.route("/api/admin/terms", methods=["GET"])
@admin_only
def list_terms(settings):
    return jsonify({"terms": [term_to_dict(term) for term in settings_manager.list_terms()]})


@app.route("/api/admin/terms", methods=["POST"])
@admin_only
def save_terms(settings):
    body = _json_body()
    try:
        normalized = normalize_terms(body.get("terms"))
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    try:
        saved = settings_manager.replace_terms(normalized)
    except Exception:
        app.logger.exception("Failed to save terms")
        return jsonify({"error": "unable to save terms"}), 500
    app.logger.info("Saved %d terms", len(saved))
    return jsonify({"success": True, "terms": [term_to_dict(term) for term in saved]})


if __name__ == "__main__":
    app.run(debug=True)
