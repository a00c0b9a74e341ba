from __future__ import annotations
from enum import Enum


class ErrorKind(Enum):
    """Identifies the kind of a ScriptError so callers can branch on
        it without matching message text.
    """
    MALFORMED_PUSH = 'ErrMalformedPush'
    UNKNOWN_OPCODE = 'ErrUnknownOpcode'
    NON_MINIMAL_ENCODING = 'ErrMinimalData'
    SCRIPT_NUMBER_TOO_LONG = 'ErrNumOutOfRange'
    UNSUPPORTED_ADDRESS = 'ErrUnsupportedAddress'
    TOO_MANY_REQUIRED_SIGS = 'ErrTooManyRequiredSigs'
    TOO_MUCH_NULL_DATA = 'ErrTooMuchNullData'
    UNSUPPORTED_SCRIPT_VERSION = 'ErrUnsupportedScriptVersion'
    NOT_MULTISIG_SCRIPT = 'ErrNotMultisigScript'
    NOT_STAKE_OUTPUT = 'ErrNotStakeOutput'
    ELEMENT_TOO_BIG = 'ErrElementTooBig'
    SCRIPT_TOO_BIG = 'ErrScriptTooBig'


class ScriptError(Exception):
    """Error raised when a script cannot be tokenized, decoded, or
        generated. The kind attribute identifies the failure.
    """
    kind: ErrorKind

    def __init__(self, kind: ErrorKind, message: str = '') -> None:
        self.kind = kind
        super().__init__(message or kind.value)

    def __str__(self) -> str:
        if self.args[0] == self.kind.value:
            return self.kind.value
        return f'{self.kind.value}: {self.args[0]}'

    def is_kind(self, kind: ErrorKind) -> bool:
        return self.kind is kind

class SyntaxError(Exception):
    """Error raised by parser when syntax error encountered."""
    ...


def vert(condition: bool, message: str = '') -> None:
    """Replacement for assert preconditions. Raises ValueError with the
        given message if the condition check fails.
    """
    if condition:
        return
    raise ValueError(message)

def tert(condition: bool, message: str = '') -> None:
    """Replacement for assert preconditions. Raises TypeError with the
        given message if the condition check fails.
    """
    if condition:
        return
    raise TypeError(message)

def sert(condition: bool, kind: ErrorKind, message: str = '') -> None:
    """Replacement for assert preconditions. Raises ScriptError of the
        given kind with the given message if the condition check fails.
    """
    if condition:
        return
    raise ScriptError(kind, message)

def yert(condition: bool, message: str = '') -> None:
    """Replacement for assert preconditions. Raises SyntaxError with the
        given message if the condition check fails.
    """
    if condition:
        return
    raise SyntaxError(message)
