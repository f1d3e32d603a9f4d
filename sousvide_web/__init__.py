import logging
import threading
from typing import Any, Mapping, Optional

from flask import Flask
from flask_sock import Sock

from .controller import ControllerClient, ControllerManager
from .settings import Settings
from .web_settings import WebSettings

# Initialize extensions but don't create the app instance here
sock = Sock()


class AppState:
    """
    Per-application wiring between the web settings and the controller.
    The settings file is read on first use, so a broken file fails the
    request that needs it instead of the whole server.
    """
    def __init__(self, config: Settings,
                 web_settings: Optional[WebSettings] = None,
                 client: Optional[ControllerClient] = None):
        self.config = config
        self._client = client
        self._lock = threading.Lock()
        self._manager = ControllerManager(web_settings, client) if web_settings is not None else None

    @property
    def manager(self) -> ControllerManager:
        if self._manager is None:
            with self._lock:
                if self._manager is None:
                    web_settings = WebSettings.load(self.config.settings_file)
                    self._manager = ControllerManager(web_settings, self._client)
        return self._manager


def create_app(config: Optional[Mapping[str, Any]] = None,
               web_settings: Optional[WebSettings] = None,
               client: Optional[ControllerClient] = None):
    """
    Builds the Flask application.

    Args:
        config: Overrides for the Settings fields (settings_file, log_level, ...).
        web_settings: Already loaded web settings; loaded from config.settings_file on first request if omitted.
        client: Controller client to use instead of the placeholder.
    """
    app_config = Settings(**dict(config or {}))

    app = Flask(__name__, template_folder='../templates', static_folder='../static')
    app.config["DEBUG"] = app_config.debug
    sock.init_app(app)

    # --- Configure Logging ---
    logging.basicConfig(level=app_config.log_level.upper(),
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    app.extensions["sousvide"] = AppState(app_config, web_settings=web_settings, client=client)

    with app.app_context():
        from . import views
        app.register_blueprint(views.main_bp)

    return app
