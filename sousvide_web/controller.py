import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from . import units
from .web_settings import WebSettings

logger = logging.getLogger(__name__)

# Readings returned by the placeholder client [K]
PLACEHOLDER_TEMPERATURE = 290.0
PLACEHOLDER_SETPOINT = 310.0


@dataclass
class SetpointResult:
    """Outcome of a setpoint write."""
    ok: bool
    kelvin: float
    error: Optional[str] = None


class ControllerClient(ABC):
    """
    Abstract access to the C++ temperature controller service.
    All temperatures crossing this interface are in Kelvin.
    """

    @abstractmethod
    def read_temperature(self) -> float:
        """Return the currently measured temperature [K]."""

    @abstractmethod
    def read_setpoint(self) -> float:
        """Return the temperature the controller is holding to [K]."""

    @abstractmethod
    def write_setpoint(self, kelvin: float) -> SetpointResult:
        """Ask the controller to hold a new temperature [K]."""


class PlaceholderControllerClient(ControllerClient):
    """
    Stand-in used until the controller's network interface is wired up.
    Never opens a socket; reads return fixed values and writes always succeed.
    """

    def __init__(self, host: str, port):
        self.host = host
        self.port = port

    def read_temperature(self) -> float:
        # TODO: query the controller at self.host:self.port once its message set is exposed
        return PLACEHOLDER_TEMPERATURE

    def read_setpoint(self) -> float:
        return PLACEHOLDER_SETPOINT

    def write_setpoint(self, kelvin: float) -> SetpointResult:
        logger.info(f"Placeholder setpoint write to {self.host}:{self.port}: {kelvin:.2f} K")
        return SetpointResult(ok=True, kelvin=kelvin)


class ControllerManager:
    """
    Connects the web interface to the controller: reads and writes go through
    the ControllerClient in Kelvin and are converted to the unit system
    selected in the web settings.
    """

    def __init__(self, web_settings: WebSettings, client: Optional[ControllerClient] = None):
        self.settings = web_settings
        self._owns_client = client is None
        self.client = client or PlaceholderControllerClient(web_settings.host, web_settings.port)

    def reconnect(self):
        """Rebuilds the default client after the host or port setting changed."""
        if self._owns_client:
            self.client = PlaceholderControllerClient(self.settings.host, self.settings.port)
            logger.info(f"Controller client now targets {self.settings.host}:{self.settings.port}")

    def get_unit_suffix(self) -> str:
        return units.suffix_for(self.settings.units)

    def get_temperature(self) -> float:
        """Current temperature in display units."""
        return units.from_kelvin(self.client.read_temperature(), self.settings.units)

    def get_setpoint(self) -> float:
        """Current setpoint in display units."""
        return units.from_kelvin(self.client.read_setpoint(), self.settings.units)

    def put_setpoint(self, value: float) -> SetpointResult:
        """
        Sends a new setpoint to the controller.

        Args:
            value: Temperature in the currently selected display units.
        """
        kelvin = units.to_kelvin(float(value), self.settings.units)
        result = self.client.write_setpoint(kelvin)
        if result.ok:
            logger.info(f"Setpoint updated: {value}{self.get_unit_suffix()} ({kelvin:.2f} K)")
        else:
            logger.warning(f"Setpoint update to {kelvin:.2f} K rejected: {result.error}")
        return result

    def get_status(self) -> Dict[str, Any]:
        """Returns the current readings in display units plus the connection settings."""
        return {
            "timestamp": time.time(),
            "temperature": self.get_temperature(),
            "setpoint": self.get_setpoint(),
            "units": self.settings.units.name.lower(),
            "suffix": self.get_unit_suffix().strip(),
            "controller": {
                "host": self.settings.host,
                "port": self.settings.port,
                "logfile": self.settings.logfile,
            },
        }
