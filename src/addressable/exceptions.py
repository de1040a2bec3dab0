"""Exceptions raised while building register maps."""

from typing import Any, Optional


class RegisterMapError(Exception):
    """Base exception for all register map errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(RegisterMapError):
    """Raised when a register map, register or decoder is configured with values that
    cannot produce a sane addressing scheme.

    This includes:
    - A data width which isn't a power-of-two multiple (1, 2, 4 or 8) of the word width
    - A register with a zero or negative width
    - A register map too large for its address space
    - An invalid register map description file
    """

    # `config_key` names the offending setting, e.g. "word_width" or "registers[2].init"
    def __init__(self, config_key: str, reason: str, details: Optional[dict[str, Any]] = None):
        super().__init__(f"Configuration error for '{config_key}': {reason}", details)
        self.config_key = config_key
        self.reason = reason


class RegisterMapFrozenError(RegisterMapError):
    """Raised when registering into a map whose build phase has ended."""

    def __init__(self, register_name: str):
        super().__init__(
            f"Cannot add register '{register_name}' to a frozen register map",
            details={"register": register_name},
        )
        self.register_name = register_name
