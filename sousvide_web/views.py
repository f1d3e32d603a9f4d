import json
import logging
import math

from flask import Blueprint, current_app, jsonify, redirect, render_template, request, url_for

from . import sock  # sock is initialized in __init__
from .errors import ConfigError
from .units import TemperatureUnit, format_temperature

logger = logging.getLogger(__name__)

# Create a Blueprint
main_bp = Blueprint('main', __name__)

SETTINGS_TEXT_FIELDS = ("host", "port", "logfile")


def _state():
    return current_app.extensions["sousvide"]


def _manager():
    return _state().manager


def _parse_setpoint(raw):
    """Returns the setpoint as a finite float or raises ValueError."""
    if raw is None or isinstance(raw, bool):
        raise ValueError("A setpoint value is required")
    value = float(raw)
    if not math.isfinite(value):
        raise ValueError(f"Setpoint must be a finite number, got {raw!r}")
    return value


def _settings_payload(web_settings):
    return {
        "host": web_settings.host,
        "port": web_settings.port,
        "logfile": web_settings.logfile,
        "units": web_settings.units.name.lower(),
    }


@main_bp.app_context_processor
def inject_unit_helpers():
    return {"format_temperature": format_temperature}


@main_bp.errorhandler(ConfigError)
def handle_config_error(e):
    """Settings file problems abort the request with the reason."""
    logger.error(f"Settings error while handling {request.path}: {e}")
    if request.path.startswith("/api/"):
        return jsonify({"ok": False, "error": str(e)}), 500
    return render_template("error.html", message=str(e)), 500


# ------------- HTML pages --------------------
@main_bp.route("/")
def index():
    """Serves the temperature control dashboard."""
    manager = _manager()
    return render_template(
        "index.html",
        temperature_kelvin=manager.client.read_temperature(),
        setpoint=manager.get_setpoint(),
        suffix=manager.get_unit_suffix(),
        web_settings=manager.settings,
    )


@main_bp.route("/setpoint", methods=["POST"])
def submit_setpoint():
    """Handles the setpoint form on the dashboard. The value is in display units."""
    manager = _manager()
    raw = request.form.get("setpoint", "").strip()
    try:
        value = _parse_setpoint(raw)
    except ValueError:
        logger.warning(f"Rejected setpoint form value {raw!r}")
        return render_template("error.html", message=f"Invalid setpoint: {raw!r}"), 400

    result = manager.put_setpoint(value)
    if not result.ok:
        return render_template("error.html", message=f"Controller rejected setpoint: {result.error}"), 502
    return redirect(url_for("main.index"))


@main_bp.route("/settings", methods=["GET"])
def settings_page():
    """Serves the web interface settings form."""
    manager = _manager()
    return render_template("settings.html", web_settings=manager.settings, units=list(TemperatureUnit))


@main_bp.route("/settings", methods=["POST"])
def update_settings():
    """Applies the settings form and persists it."""
    manager = _manager()
    fields = {key: request.form[key].strip() for key in SETTINGS_TEXT_FIELDS if key in request.form}
    if "units" in request.form:
        fields["units"] = request.form["units"]

    try:
        manager.settings.update(**fields)
    except ValueError as e:  # InvalidUnit or a mistyped field
        logger.warning(f"Rejected settings form: {e}")
        return render_template("error.html", message=str(e)), 400

    manager.reconnect()
    return redirect(url_for("main.settings_page"))


# ------------- JSON API --------------------
@main_bp.route("/api/status")
def status():
    """Returns the current temperature and setpoint in display units."""
    return jsonify(_manager().get_status())


@main_bp.route("/api/setpoint", methods=["PUT"])
def api_setpoint():
    """Updates the controller setpoint. Expects {"setpoint": <value in display units>}."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"ok": False, "error": "No JSON data received"}), 400

    try:
        value = _parse_setpoint(data.get("setpoint"))
    except (ValueError, TypeError) as e:
        return jsonify({"ok": False, "error": f"Invalid setpoint value: {e}"}), 400

    manager = _manager()
    result = manager.put_setpoint(value)
    if not result.ok:
        return jsonify({"ok": False, "error": result.error}), 502
    return jsonify({"ok": True, "setpoint": value, "kelvin": result.kelvin, "units": manager.settings.units.name.lower()})


@main_bp.route("/api/settings", methods=["GET"])
def api_get_settings():
    return jsonify({"ok": True, "settings": _settings_payload(_manager().settings)})


@main_bp.route("/api/settings", methods=["POST"])
def api_update_settings():
    """Updates any of host, port, logfile and units, then saves."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return jsonify({"ok": False, "error": "No JSON data received"}), 400

    manager = _manager()
    try:
        manager.settings.update(**data)
    except ValueError as e:  # unknown field, InvalidUnit or ValidationError
        return jsonify({"ok": False, "error": str(e)}), 400

    manager.reconnect()
    return jsonify({"ok": True, "settings": _settings_payload(manager.settings)})


# ------------- WebSocket stream ------------------
@sock.route("/stream", bp=main_bp)
def stream(ws):
    """
    Pushes the status every stream_interval seconds. Clients may send
    {"command": "set_setpoint", "value": <display units>} in between.
    """
    interval = _state().config.stream_interval
    manager = _manager()
    logger.info("WebSocket client connected.")
    try:
        while True:
            ws.send(json.dumps(manager.get_status()))
            message_str = ws.receive(timeout=interval)
            if not message_str:
                continue
            try:
                message = json.loads(message_str)
            except json.JSONDecodeError:
                logger.warning(f"Error decoding JSON message: {message_str}")
                continue
            if not isinstance(message, dict) or message.get("command") != "set_setpoint":
                logger.warning(f"Unknown command received: {message_str}")
                continue
            try:
                manager.put_setpoint(_parse_setpoint(message.get("value")))
            except (ValueError, TypeError) as e:
                logger.warning(f"Invalid setpoint over WebSocket: {e}")
    finally:
        logger.info("WebSocket client disconnected.")
