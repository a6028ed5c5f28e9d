"""Custom exceptions for mimmoza.

The scoring engine degrades to sentinels (None / 0 / 50) on incomplete data;
these exceptions only cover programming errors at the API seams.
"""

from __future__ import annotations

from typing import Any



class MimmozaError(Exception):
    """Base exception for all mimmoza errors."""
    pass


# --- Parameter Errors ---

class InvalidParameterError(MimmozaError):
    """Invalid parameter value provided."""

    def __init__(self, param_name: str, value: Any, reason: str = ""):
        self.param_name = param_name
        self.value = value
        self.reason = reason
        msg = f"Invalid parameter '{param_name}': {value}"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg)


class UnknownProjectNatureError(InvalidParameterError):
    """No SmartScore engine is registered for the requested project nature."""

    def __init__(self, value: Any):
        super().__init__("project_nature", value, "no SmartScore engine registered")


# --- Configuration Errors ---

class ConfigurationError(MimmozaError):
    """Error in application configuration."""
    pass
