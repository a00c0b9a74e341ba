from __future__ import annotations
from typing import Iterator, Protocol, runtime_checkable


@runtime_checkable
class TokenizerProtocol(Protocol):
    def next(self) -> bool:
        """Parse the next opcode. Returns True on success and False at
            the end of the script or on a parse failure.
        """
        ...

    def done(self) -> bool:
        """Return whether or not tokenizing has finished."""
        ...

    def opcode(self) -> int|None:
        """The most recently parsed opcode."""
        ...

    def data(self) -> memoryview:
        """The data pushed by the most recently parsed opcode."""
        ...

    def byte_index(self) -> int:
        """Offset of the next byte to parse."""
        ...

    def err(self) -> Exception|None:
        """The parse failure, if any."""
        ...

    def __iter__(self) -> Iterator:
        ...


@runtime_checkable
class AddressProtocol(Protocol):
    def script_address(self) -> bytes:
        """Return the raw bytes the address commits to in a script:
            a hash160 for hash addresses or the serialized pubkey for
            pubkey addresses.
        """
        ...
