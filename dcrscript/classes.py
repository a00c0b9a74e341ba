from __future__ import annotations
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterator
from .errors import ErrorKind, ScriptError, sert, tert, vert
from .functions import (
    opcodes,
    script_num_bytes,
    MAX_SCRIPT_ELEMENT_SIZE,
    MAX_SCRIPT_SIZE,
    OP_0,
    OP_1,
    OP_1NEGATE,
    OP_DATA_75,
    OP_PUSHDATA1,
    OP_PUSHDATA2,
    OP_PUSHDATA4,
)


@dataclass(frozen=True)
class Token:
    """One opcode and its pushed data. The data is a view into the
        tokenized script, not a copy.
    """
    opcode: int
    data: memoryview
    raw_len: int


class ScriptTokenizer:
    """Single pass tokenizer over the opcodes and data pushes of a
        script. Each call to next() parses one opcode; after a True
        return the opcode and its data are available from opcode() and
        data(). A False return means either the end of the script was
        reached or a parse failure occurred, in which case err()
        returns the ScriptError. Once an error is set the tokenizer
        never advances again. Only version 0 scripts are tokenized;
        any other version produces no tokens and no error. Token data
        are memoryviews into the script, so a bytearray script cannot
        be resized while the tokenizer or any of its tokens is alive.
    """
    script: bytes|bytearray|memoryview
    version: int
    offset: int

    def __init__(self, version: int, script: bytes|bytearray|memoryview) -> None:
        tert(type(version) is int, 'version must be int')
        tert(isinstance(script, (bytes, bytearray, memoryview)),
            'script must be bytes, bytearray, or memoryview')
        self.version = version
        self.script = script
        self._view = memoryview(script)
        self.offset = 0 if version == 0 else len(script)
        self._opcode = None
        self._data = self._view[0:0]
        self._err = None

    def __iter__(self) -> Iterator[Token]:
        start = self.offset
        while self.next():
            yield Token(self._opcode, self._data, self.offset - start)
            start = self.offset

    def next(self) -> bool:
        """Parse the next opcode. Returns True on success and False at
            the end of the script or on a parse failure.
        """
        if self.done():
            return False

        op = self.script[self.offset]
        name, length = opcodes[op]

        if length == 1:
            # no data; small int opcodes represent the data themselves
            self.offset += 1
            self._opcode = op
            self._data = self._view[0:0]
            return True

        remaining = len(self.script) - self.offset
        if length > 1:
            if remaining < length:
                self._err = ScriptError(
                    ErrorKind.MALFORMED_PUSH,
                    f'opcode {name} requires {length} bytes, but script '
                    f'only has {remaining} remaining'
                )
                return False

            self._opcode = op
            self._data = self._view[self.offset+1:self.offset+length]
            self.offset += length
            return True

        # OP_PUSHDATA1/2/4: little-endian length prefix then data
        prefix_len = -length
        remaining -= 1
        if remaining < prefix_len:
            self._err = ScriptError(
                ErrorKind.MALFORMED_PUSH,
                f'opcode {name} requires {prefix_len} bytes, but script '
                f'only has {remaining} remaining'
            )
            return False

        start = self.offset + 1
        data_len = int.from_bytes(self._view[start:start+prefix_len], 'little')
        start += prefix_len
        remaining -= prefix_len
        if data_len > remaining:
            self._err = ScriptError(
                ErrorKind.MALFORMED_PUSH,
                f'opcode {name} pushes {data_len} bytes, but script only '
                f'has {remaining} remaining'
            )
            return False

        self._opcode = op
        self._data = self._view[start:start+data_len]
        self.offset = start + data_len
        return True

    def done(self) -> bool:
        """Return whether or not tokenizing has finished, either at the
            end of the script or due to a parse failure.
        """
        return self._err is not None or self.offset >= len(self.script)

    def opcode(self) -> int|None:
        """The most recently parsed opcode."""
        return self._opcode

    def data(self) -> memoryview:
        """The data pushed by the most recently parsed opcode."""
        return self._data

    def byte_index(self) -> int:
        """Offset of the next byte to parse."""
        return self.offset

    def err(self) -> ScriptError|None:
        """The parse failure, if any."""
        return self._err


def canonical_push(data: bytes) -> bytes:
    """Encode a data push using the smallest opcode able to represent
        it: small int opcodes for single byte values 0-16 and 0x81,
        OP_DATA_N up to 75 bytes, then OP_PUSHDATA1/2/4.
    """
    size = len(data)
    if size == 0 or (size == 1 and data[0] == 0):
        return bytes([OP_0])
    if size == 1 and 1 <= data[0] <= 16:
        return bytes([OP_1 - 1 + data[0]])
    if size == 1 and data[0] == 0x81:
        return bytes([OP_1NEGATE])

    if size <= OP_DATA_75:
        return bytes([size]) + data
    if size <= 0xff:
        return bytes([OP_PUSHDATA1, size]) + data
    if size <= 0xffff:
        return bytes([OP_PUSHDATA2]) + size.to_bytes(2, 'little') + data
    return bytes([OP_PUSHDATA4]) + size.to_bytes(4, 'little') + data


class ScriptBuilder:
    """Build a script from opcodes and canonical data pushes. Methods
        return the builder so calls can be chained. Raises ScriptError
        when a push exceeds MAX_SCRIPT_ELEMENT_SIZE (ELEMENT_TOO_BIG) or
        the script would exceed MAX_SCRIPT_SIZE (SCRIPT_TOO_BIG).
    """
    buf: bytearray

    def __init__(self) -> None:
        self.buf = bytearray()

    def _extend(self, part: bytes) -> ScriptBuilder:
        sert(
            len(self.buf) + len(part) <= MAX_SCRIPT_SIZE,
            ErrorKind.SCRIPT_TOO_BIG,
            f'adding {len(part)} bytes would exceed the maximum allowed '
            f'canonical script length of {MAX_SCRIPT_SIZE}'
        )
        self.buf.extend(part)
        return self

    def add_op(self, op: int) -> ScriptBuilder:
        """Append a single opcode."""
        tert(type(op) is int, 'op must be int')
        vert(0 <= op <= 0xff, 'op must be between 0 and 255')
        return self._extend(bytes([op]))

    def add_ops(self, ops: list[int]|bytes) -> ScriptBuilder:
        for op in ops:
            self.add_op(op)
        return self

    def add_data(self, data: bytes|bytearray|memoryview) -> ScriptBuilder:
        """Append a canonical push of the data."""
        tert(isinstance(data, (bytes, bytearray, memoryview)),
            'data must be bytes, bytearray, or memoryview')
        data = bytes(data)
        sert(
            len(data) <= MAX_SCRIPT_ELEMENT_SIZE,
            ErrorKind.ELEMENT_TOO_BIG,
            f'adding a data element of {len(data)} bytes would exceed '
            f'the maximum allowed script element size of {MAX_SCRIPT_ELEMENT_SIZE}'
        )
        return self._extend(canonical_push(data))

    def add_full_data(self, data: bytes|bytearray|memoryview) -> ScriptBuilder:
        """Append a canonical push of the data without the element size
            limit. Only meant for building scripts that deliberately
            break the rules, e.g. in tests.
        """
        tert(isinstance(data, (bytes, bytearray, memoryview)),
            'data must be bytes, bytearray, or memoryview')
        return self._extend(canonical_push(bytes(data)))

    def add_int64(self, number: int) -> ScriptBuilder:
        """Append a push of the integer, using a small int opcode where
            one exists.
        """
        tert(type(number) is int, 'number must be int')
        if number == 0:
            return self.add_op(OP_0)
        if number == -1 or 1 <= number <= 16:
            return self.add_op(OP_1 - 1 + number)
        return self.add_data(script_num_bytes(number))

    def reset(self) -> ScriptBuilder:
        self.buf = bytearray()
        return self

    def script(self) -> bytes:
        """Return the built script."""
        return bytes(self.buf)


class ScriptClass(IntEnum):
    """Standard script templates."""
    NON_STANDARD = 0
    PUBKEY = 1
    PUBKEY_HASH = 2
    SCRIPT_HASH = 3
    MULTISIG = 4
    NULL_DATA = 5
    STAKE_SUBMISSION = 6
    STAKE_GEN = 7
    STAKE_REVOCATION = 8
    STAKE_SUB_CHANGE = 9
    PUBKEY_ALT = 10
    PUBKEY_HASH_ALT = 11
    TREASURY_ADD = 12
    TREASURY_SPEND = 13

    def __str__(self) -> str:
        return _script_class_names[self]

    @classmethod
    def stringify(cls, value: int) -> str:
        """Return the name of the numeric class value, or 'Invalid' if
            it is not a known class.
        """
        try:
            return str(cls(value))
        except ValueError:
            return 'Invalid'

_script_class_names = {
    ScriptClass.NON_STANDARD: 'nonstandard',
    ScriptClass.PUBKEY: 'pubkey',
    ScriptClass.PUBKEY_ALT: 'pubkeyalt',
    ScriptClass.PUBKEY_HASH: 'pubkeyhash',
    ScriptClass.PUBKEY_HASH_ALT: 'pubkeyhashalt',
    ScriptClass.SCRIPT_HASH: 'scripthash',
    ScriptClass.MULTISIG: 'multisig',
    ScriptClass.NULL_DATA: 'nulldata',
    ScriptClass.STAKE_SUBMISSION: 'stakesubmission',
    ScriptClass.STAKE_GEN: 'stakegen',
    ScriptClass.STAKE_REVOCATION: 'stakerevoke',
    ScriptClass.STAKE_SUB_CHANGE: 'sstxchange',
    ScriptClass.TREASURY_ADD: 'treasuryadd',
    ScriptClass.TREASURY_SPEND: 'treasuryspend',
}


@dataclass(frozen=True)
class ScriptClassification:
    """A script class plus, for stake and treasury tagged scripts, the
        class of the wrapped script.
    """
    script_class: ScriptClass
    sub_class: ScriptClass = field(default=ScriptClass.NON_STANDARD)

    def __str__(self) -> str:
        if self.sub_class is ScriptClass.NON_STANDARD:
            return str(self.script_class)
        return f'{str(self.script_class)}({str(self.sub_class)})'


@dataclass(frozen=True)
class AtomicSwapDataPushes:
    """Data pushes extracted from an atomic swap contract."""
    recipient_hash160: bytes
    refund_hash160: bytes
    secret_hash: bytes
    secret_size: int
    lock_time: int
