class SousVideError(Exception):
    """Base class for errors raised by the sous vide web front-end."""


class ConfigError(SousVideError):
    """The web settings file could not be read or written."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class ConfigParseError(ConfigError):
    """The web settings file exists but does not hold valid settings."""


class ConfigWriteError(ConfigError):
    """Saving the web settings file failed."""


class InvalidUnit(SousVideError, ValueError):
    """A value does not name one of the supported temperature units."""
