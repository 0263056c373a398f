"""Core types shared by every layer."""

from .config import BotConfig, ConfigurationError, ensure_tools_available, load_config
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # config
    "BotConfig",
    "ConfigurationError",
    "ensure_tools_available",
    "load_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
