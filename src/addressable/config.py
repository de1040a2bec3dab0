"""Helpers for loading register map descriptions from YAML."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import logging

import yaml
from amaranth import *

from .exceptions import ConfigurationError
from .modules.register_map import RegisterMap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisterConfig:
    name: str
    width: int
    init: int = 0
    read_only: bool = False


@dataclass(frozen=True)
class RegisterMapConfig:
    data_width: int
    address_width: int
    word_width: Optional[int] = None
    registers: List[RegisterConfig] = field(default_factory=list)


def _require(data: Dict[str, Any], key: str, kind: type, context: str) -> Any:
    if key not in data:
        raise ConfigurationError(f"{context}{key}", "missing required key")
    return _check_type(data[key], key, kind, context)


def _check_type(value: Any, key: str, kind: type, context: str) -> Any:
    # bool is a subclass of int, but `width: true` is never intended
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ConfigurationError(
            f"{context}{key}",
            f"expected {kind.__name__}, got {type(value).__name__}",
        )
    return value


def _parse_register(data: Any, index: int) -> RegisterConfig:
    context = f"registers[{index}]."
    if not isinstance(data, dict):
        raise ConfigurationError(f"registers[{index}]", "expected a mapping")

    name = _require(data, "name", str, context)
    width = _require(data, "width", int, context)
    init = _check_type(data.get("init", 0), "init", int, context)
    read_only = _check_type(data.get("read_only", False), "read_only", bool, context)

    unknown = set(data) - {"name", "width", "init", "read_only"}
    if unknown:
        raise ConfigurationError(f"registers[{index}]", f"unknown keys: {', '.join(sorted(unknown))}")

    # Non-positive widths are rejected when the register is created
    if width > 0 and not 0 <= init < 2 ** width:
        raise ConfigurationError(
            f"{context}init",
            f"initial value {init} doesn't fit in {width} bits",
        )

    return RegisterConfig(name=name, width=width, init=init, read_only=read_only)


def parse_config(data: Any) -> RegisterMapConfig:
    """Validates an already-loaded register map description."""

    if not isinstance(data, dict):
        raise ConfigurationError("configuration", "register map description must be a mapping")

    data_width = _require(data, "data_width", int, "")
    address_width = _require(data, "address_width", int, "")
    word_width = data.get("word_width")
    if word_width is not None:
        _check_type(word_width, "word_width", int, "")

    registers = data.get("registers", [])
    if not isinstance(registers, list):
        raise ConfigurationError("registers", "expected a list")

    # Storage signals are handed back keyed by name, so names must be unique
    parsed = []
    for i, register in enumerate(registers):
        register = _parse_register(register, i)
        if any(other.name == register.name for other in parsed):
            raise ConfigurationError(f"registers[{i}].name", f"duplicate name '{register.name}'")
        parsed.append(register)

    return RegisterMapConfig(
        data_width=data_width,
        address_width=address_width,
        word_width=word_width,
        registers=parsed,
    )


def load_config(stream) -> RegisterMapConfig:
    """Loads a register map description from a YAML string or file object."""

    try:
        data = yaml.safe_load(stream)
    except yaml.YAMLError as e:
        raise ConfigurationError("yaml", f"invalid YAML: {e}") from e

    return parse_config(data)


def build_register_map(config: RegisterMapConfig) -> Tuple[RegisterMap, Dict[str, Signal]]:
    """Creates a register map, and a storage signal for each register, from a description.

    Returns the map and the signals keyed by register name.
    """

    register_map = RegisterMap(config.data_width, config.address_width, config.word_width)

    storage = {}
    for register in config.registers:
        if register.width <= 0:
            raise ConfigurationError(
                "width",
                f"register '{register.name}' must have a positive width, got {register.width}",
            )
        signal = Signal(register.width, init=register.init, name=register.name)
        register_map.create_register(signal, register.name, read_only=register.read_only)
        storage[register.name] = signal

    logger.debug(f"Built register map with {len(register_map)} registers from description")
    return register_map, storage
