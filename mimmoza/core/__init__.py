"""Core settings, logging, exceptions and loan maths."""

from .exceptions import (
    ConfigurationError,
    InvalidParameterError,
    MimmozaError,
    UnknownProjectNatureError,
)
from .financial import build_amortization_schedule, compute_mensualite
from .logging import configure_logging, get_logger, review_context
from .settings import AppSettings, get_settings

__all__ = [
    "compute_mensualite",
    "build_amortization_schedule",
    "configure_logging",
    "get_logger",
    "review_context",
    "AppSettings",
    "get_settings",
    # Exceptions
    "MimmozaError",
    "InvalidParameterError",
    "UnknownProjectNatureError",
    "ConfigurationError",
]
