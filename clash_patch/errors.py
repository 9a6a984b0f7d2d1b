# -*- coding: utf-8 -*-


class ConfigError(Exception):
    """Storage-level failure around the persisted config file."""


class ConfigDirectoryUnavailable(ConfigError):
    def __init__(self, path: object) -> None:
        super().__init__(f"Config directory is not available: {path}")
        self.path = path


class ConfigNotFound(ConfigError):
    def __init__(self, path: object) -> None:
        super().__init__(f"Configuration file not found: {path}")
        self.path = path
