import json
import logging
import os
import threading
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr, field_validator

from .errors import ConfigError, ConfigParseError, ConfigWriteError
from .units import TemperatureUnit

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = "settings.json"

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 24601
DEFAULT_LOGFILE = "~/sv-log.txt"
DEFAULT_UNITS = TemperatureUnit.FAHRENHEIT

FIELDS = ("host", "port", "logfile", "units")
RECORD_FIELDS = ("host", "port", "logfile")

# Guards construction of the shared instance
_instance_lock = threading.Lock()


class SettingsRecord(BaseModel):
    """Connection fields of the web settings. Assignments are validated."""
    model_config = ConfigDict(validate_assignment=True)

    host: StrictStr = DEFAULT_HOST
    port: Union[StrictInt, StrictStr] = DEFAULT_PORT
    logfile: StrictStr = DEFAULT_LOGFILE

    @field_validator("port")
    @classmethod
    def _digits_to_int(cls, value):
        # Ports are kept as int when they are all digits
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        return value


class WebSettings:
    """
    User settings for the web interface to the sous vide controller.

    Holds where the controller lives (host, port), the controller's log file
    and the unit system temperatures are displayed in. Values are persisted to
    a JSON file which is read completely on load and rewritten completely on
    every save.
    """

    _instance: Optional["WebSettings"] = None

    def __init__(self,
                 path: str = DEFAULT_SETTINGS_FILE,
                 host: str = DEFAULT_HOST,
                 port=DEFAULT_PORT,
                 logfile: str = DEFAULT_LOGFILE,
                 units=DEFAULT_UNITS):
        """
        Creates a settings object in memory. Nothing is read or written here,
        use load() to attach it to the settings file.

        Args:
            path: Location of the JSON settings file.
            host: Host name of the C++ controller service.
            port: TCP port of the controller service.
            logfile: Log file path used by the controller service.
            units: Display unit system (TemperatureUnit or anything parse() accepts).
        """
        self.path = path
        self._save_lock = threading.Lock()
        self._record = SettingsRecord(host=host, port=port, logfile=logfile)
        self.units = units
        self.dirty = False

    def __setattr__(self, name, value):
        # host/port/logfile live on the validated record; a bad type raises ValidationError (a ValueError)
        if name in RECORD_FIELDS:
            setattr(self._record, name, value)
        else:
            if name == "units":
                value = TemperatureUnit.parse(value)
            super().__setattr__(name, value)
        if name in FIELDS:
            super().__setattr__("dirty", True)

    def __getattr__(self, name):
        if name in RECORD_FIELDS:
            return getattr(self._record, name)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __repr__(self):
        return (f"WebSettings(path={self.path!r}, host={self.host!r}, port={self.port!r}, "
                f"logfile={self.logfile!r}, units={self.units.name})")

    # ------------- Shared instance ------------------
    @classmethod
    def get_instance(cls, path: Optional[str] = None) -> "WebSettings":
        """
        Returns the process-wide settings object, loading it on first use.
        The path is only used by the call that creates the instance.
        """
        if cls._instance is None:
            with _instance_lock:
                if cls._instance is None:
                    cls._instance = cls.load(path or DEFAULT_SETTINGS_FILE)
        return cls._instance

    @classmethod
    def reset_instance(cls):
        with _instance_lock:
            cls._instance = None

    # ------------- Persistence ------------------
    @classmethod
    def load(cls, path: str = DEFAULT_SETTINGS_FILE) -> "WebSettings":
        """
        Builds a settings object from the JSON file at path.

        If no file exists the defaults are used and written out immediately.
        Keys missing from an existing file fall back to their defaults.

        Raises:
            ConfigParseError: The file is not a JSON object or holds an invalid unit.
            ConfigError: The file exists but could not be read.
            ConfigWriteError: The defaults could not be written.
        """
        instance = cls(path=path)

        if not os.path.exists(path):
            logger.info(f"Settings file {path} not found. Writing default settings.")
            instance.save()
            return instance

        try:
            with open(path, "r") as f:
                parameters = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigParseError(f"Malformed settings file {path}: {e}", path=path) from e
        except OSError as e:
            raise ConfigError(f"Could not read settings file {path}: {e}", path=path) from e

        if not isinstance(parameters, dict):
            raise ConfigParseError(
                f"Invalid settings format in {path}: expected a JSON object, got {type(parameters).__name__}",
                path=path)

        instance._apply(parameters)
        instance.dirty = False
        logger.info(f"Loaded settings from {path}: {instance.to_dict()}")
        return instance

    def _apply(self, parameters: Dict[str, Any]):
        """Assigns values from a decoded settings file, keeping defaults for missing keys."""
        missing = [key for key in FIELDS if key not in parameters]
        if missing:
            logger.warning(f"Settings file {self.path} is missing {missing}. Using defaults for them.")

        try:
            if "host" in parameters:
                self.host = parameters["host"]
            if "port" in parameters:
                self.port = parameters["port"]
            if "logfile" in parameters:
                self.logfile = parameters["logfile"]
            if "units" in parameters:
                self.units = parameters["units"]
        except ValueError as e:  # includes InvalidUnit
            raise ConfigParseError(f"Invalid settings in {self.path}: {e}", path=self.path) from e

    def to_dict(self) -> Dict[str, Any]:
        """The settings in their on-disk form."""
        return {
            "host": self.host,
            "port": str(self.port),
            "logfile": self.logfile,
            "units": int(self.units),
        }

    def save(self):
        """
        Writes all fields to the settings file, replacing its contents.

        Raises:
            ConfigWriteError: The file could not be written.
        """
        with self._save_lock:
            state = self.to_dict()
            try:
                with open(self.path, "w") as f:
                    json.dump(state, f, indent=2)
            except OSError as e:
                logger.error(f"Error saving settings to {self.path}: {e}")
                raise ConfigWriteError(f"Could not write settings file {self.path}: {e}", path=self.path) from e
            self.dirty = False
            logger.info(f"Settings saved to {self.path}")

    def update(self, **fields):
        """
        Assigns the given fields and saves. Values are validated before anything
        is assigned, so a bad value of any field leaves the settings untouched.

        Raises:
            InvalidUnit: units is not a supported unit.
            pydantic.ValidationError: host, port or logfile has the wrong type.
            ValueError: An unknown field was given.
        """
        unknown = set(fields) - set(FIELDS)
        if unknown:
            raise ValueError(f"Unknown settings field(s): {sorted(unknown)}")

        units = TemperatureUnit.parse(fields["units"]) if "units" in fields else self.units
        record_update = {name: value for name, value in fields.items() if name in RECORD_FIELDS}
        record = SettingsRecord.model_validate({**self._record.model_dump(), **record_update})

        with self._save_lock:
            self._record = record
            self.units = units
        self.save()
