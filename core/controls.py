"""
core/controls.py

The standard control vocabulary.

A control is a command plus exactly one typed payload. Three front-ends
build the same ``Control`` value before dispatch:
 - make_control(command, value)        typed form
 - parse_control(type_str, value_str)  string form ("key", "hexiv", "digest", ...)
 - parse_hex_control(command, hex_str) hex form for byte-string commands
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Callable, Dict, Tuple, Union

from core.crypto_utils import hex_to_bytes
from core.errors import InvalidControlValue, NotFound, UnsupportedControl
from core.providers import CipherSpec, DigestSpec, Engine, get_cipher, get_digest, get_engine


class Command(IntEnum):
    SET_KEY = 1
    SET_IV = 2
    SET_CUSTOM = 3
    SET_XOF = 4
    SET_FLAGS = 5
    SET_ENGINE = 6
    SET_MD = 7
    SET_CIPHER = 8
    SET_SIZE = 9


class PayloadKind(Enum):
    BYTES = "bytes"
    UINT = "uint"
    BOOL = "bool"
    ENGINE = "engine"
    DIGEST = "digest"
    CIPHER = "cipher"


COMMAND_KINDS: Dict[Command, PayloadKind] = {
    Command.SET_KEY: PayloadKind.BYTES,
    Command.SET_IV: PayloadKind.BYTES,
    Command.SET_CUSTOM: PayloadKind.BYTES,
    Command.SET_XOF: PayloadKind.BOOL,
    Command.SET_FLAGS: PayloadKind.UINT,
    Command.SET_ENGINE: PayloadKind.ENGINE,
    Command.SET_MD: PayloadKind.DIGEST,
    Command.SET_CIPHER: PayloadKind.CIPHER,
    Command.SET_SIZE: PayloadKind.UINT,
}

# payloads that are key material and must not show up in reprs or logs
_SECRET_COMMANDS = frozenset({Command.SET_KEY})

_PAYLOAD_TYPES = {
    PayloadKind.BYTES: bytes,
    PayloadKind.UINT: int,
    PayloadKind.BOOL: bool,
    PayloadKind.ENGINE: Engine,
    PayloadKind.DIGEST: DigestSpec,
    PayloadKind.CIPHER: CipherSpec,
}

UNSET = object()


@dataclass(frozen=True, repr=False)
class Control:
    command: Command
    value: Any

    def __post_init__(self):
        kind = COMMAND_KINDS[self.command]
        expected = _PAYLOAD_TYPES[kind]
        ok = isinstance(self.value, expected)
        if kind is PayloadKind.UINT:
            ok = ok and not isinstance(self.value, bool) and self.value >= 0
        if not ok:
            raise InvalidControlValue(
                f"{self.command.name} expects a {kind.value} payload, got {type(self.value).__name__}")

    def __repr__(self):
        if self.command in _SECRET_COMMANDS:
            shown = f"<{len(self.value)} bytes>"
        elif isinstance(self.value, (DigestSpec, CipherSpec, Engine)):
            shown = self.value.name
        else:
            shown = repr(self.value)
        return f"Control({self.command.name}, {shown})"


def as_command(command: Union[Command, int, str]) -> Command:
    if isinstance(command, Command):
        return command
    try:
        if isinstance(command, str):
            name = command.strip().upper()
            return Command[name if name.startswith("SET_") else "SET_" + name]
        return Command(command)
    except (KeyError, ValueError):
        raise UnsupportedControl(f"unknown control command: {command!r}") from None


def _coerce(kind: PayloadKind, value: Any) -> Any:
    if kind is PayloadKind.BYTES and isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    try:
        if kind is PayloadKind.ENGINE and isinstance(value, str):
            return get_engine(value)
        if kind is PayloadKind.DIGEST and isinstance(value, str):
            return get_digest(value)
        if kind is PayloadKind.CIPHER and isinstance(value, str):
            return get_cipher(value)
    except NotFound as exc:
        raise InvalidControlValue(str(exc)) from exc
    return value


def make_control(command: Union[Command, int, str], value: Any = UNSET) -> Control:
    """Build a typed control; primitive and engine names are resolved here."""
    cmd = as_command(command)
    if value is UNSET:
        if cmd is not Command.SET_CUSTOM:
            raise InvalidControlValue(f"{cmd.name} requires a payload")
        value = b""
    return Control(cmd, _coerce(COMMAND_KINDS[cmd], value))


def _parse_text(value: str) -> bytes:
    return value.encode("utf-8")


def _parse_hex(value: str) -> bytes:
    try:
        return hex_to_bytes(value)
    except ValueError as exc:
        raise InvalidControlValue(f"not a hex string: {value!r}") from exc


def _parse_uint(value: str) -> int:
    try:
        n = int(value.strip(), 0)
    except ValueError as exc:
        raise InvalidControlValue(f"not an unsigned integer: {value!r}") from exc
    if n < 0:
        raise InvalidControlValue(f"not an unsigned integer: {value!r}")
    return n


def _parse_bool(value: str) -> bool:
    v = value.strip().lower()
    if v in ("1", "true", "yes", "on"):
        return True
    if v in ("0", "false", "no", "off"):
        return False
    raise InvalidControlValue(f"not a boolean: {value!r}")


STRING_CONTROLS: Dict[str, Tuple[Command, Callable[[str], Any]]] = {
    "key": (Command.SET_KEY, _parse_text),
    "hexkey": (Command.SET_KEY, _parse_hex),
    "iv": (Command.SET_IV, _parse_text),
    "hexiv": (Command.SET_IV, _parse_hex),
    "custom": (Command.SET_CUSTOM, _parse_text),
    "hexcustom": (Command.SET_CUSTOM, _parse_hex),
    "xof": (Command.SET_XOF, _parse_bool),
    "flags": (Command.SET_FLAGS, _parse_uint),
    "engine": (Command.SET_ENGINE, str),
    "digest": (Command.SET_MD, str),
    "md": (Command.SET_MD, str),
    "cipher": (Command.SET_CIPHER, str),
    "size": (Command.SET_SIZE, _parse_uint),
    "outlen": (Command.SET_SIZE, _parse_uint),
}


def parse_control(type_str: str, value_str: str) -> Control:
    entry = STRING_CONTROLS.get(type_str.strip().lower())
    if entry is None:
        raise UnsupportedControl(f"unknown control type: {type_str!r}")
    command, parse = entry
    return make_control(command, parse(value_str))


def parse_hex_control(command: Union[Command, int, str], hex_str: str) -> Control:
    cmd = as_command(command)
    if COMMAND_KINDS[cmd] is not PayloadKind.BYTES:
        raise InvalidControlValue(f"{cmd.name} does not take a byte-string payload")
    return make_control(cmd, _parse_hex(hex_str))


def split_option(option: str) -> Tuple[str, str]:
    """Split an openssl-style "type:value" option string."""
    type_str, sep, value = option.partition(":")
    if not sep:
        raise InvalidControlValue(f"expected type:value, got {option!r}")
    return type_str, value
