import pytest

from sousvide_web import create_app
from sousvide_web.controller import ControllerClient, SetpointResult
from sousvide_web.web_settings import WebSettings


class RecordingClient(ControllerClient):
    """Controller client that remembers writes and reports fixed readings."""

    def __init__(self, temperature=290.0, setpoint=310.0, accept=True):
        self.temperature = temperature
        self.setpoint = setpoint
        self.accept = accept
        self.writes = []

    def read_temperature(self):
        return self.temperature

    def read_setpoint(self):
        return self.setpoint

    def write_setpoint(self, kelvin):
        self.writes.append(kelvin)
        if not self.accept:
            return SetpointResult(ok=False, kelvin=kelvin, error="setpoint out of range")
        self.setpoint = kelvin
        return SetpointResult(ok=True, kelvin=kelvin)


@pytest.fixture(autouse=True)
def reset_shared_settings():
    WebSettings.reset_instance()
    yield
    WebSettings.reset_instance()


@pytest.fixture
def settings_path(tmp_path):
    return tmp_path / "settings.json"


@pytest.fixture
def client_stub():
    return RecordingClient()


@pytest.fixture
def app(settings_path, client_stub):
    app = create_app({"settings_file": str(settings_path)}, client=client_stub)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def http(app):
    return app.test_client()
