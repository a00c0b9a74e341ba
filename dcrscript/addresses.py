from __future__ import annotations
from dataclasses import dataclass, field
from ecdsa import SECP256k1, VerifyingKey
from ecdsa.keys import MalformedPointError
from enum import IntEnum
from .errors import tert, vert
import nacl.bindings


class SigType(IntEnum):
    """Signature suites. The alt suites are selected in scripts by the
        small int pushed before OP_CHECKSIGALT.
    """
    ECDSA_SECP256K1 = 0
    ED25519 = 1
    SCHNORR_SECP256K1 = 2


def is_strict_pubkey_encoding(pubkey: bytes|memoryview) -> bool:
    """Return True for a 33-byte compressed (0x02/0x03 prefix) or
        65-byte uncompressed (0x04 prefix) secp256k1 key encoding. The
        point itself is not checked.
    """
    if len(pubkey) == 33 and pubkey[0] in (0x02, 0x03):
        return True
    return len(pubkey) == 65 and pubkey[0] == 0x04

def parse_secp_pubkey(pubkey: bytes|memoryview) -> VerifyingKey:
    """Parse a strictly encoded secp256k1 public key. Raises ValueError
        if the encoding is not strict or the point is not on the curve.
    """
    vert(is_strict_pubkey_encoding(pubkey),
        'pubkey must be 33 bytes compressed or 65 bytes uncompressed')
    try:
        return VerifyingKey.from_string(bytes(pubkey), curve=SECP256k1)
    except MalformedPointError as e:
        raise ValueError(f'invalid secp256k1 pubkey: {e}') from e

def is_valid_secp_pubkey(pubkey: bytes|memoryview) -> bool:
    """Return True if the data decodes to a secp256k1 point."""
    if not is_strict_pubkey_encoding(pubkey):
        return False
    try:
        parse_secp_pubkey(pubkey)
        return True
    except ValueError:
        return False

def is_valid_ed25519_pubkey(pubkey: bytes|memoryview) -> bool:
    """Return True if the data is a valid ed25519 point encoding."""
    if len(pubkey) != nacl.bindings.crypto_core_ed25519_BYTES:
        return False
    return nacl.bindings.crypto_core_ed25519_is_valid_point(bytes(pubkey))


@dataclass(frozen=True)
class AddressPubKeyHash:
    """Pay to the hash160 of a public key of the given signature type."""
    hash160: bytes
    sig_type: SigType = field(default=SigType.ECDSA_SECP256K1)

    def __post_init__(self) -> None:
        tert(type(self.hash160) is bytes, 'hash160 must be bytes')
        vert(len(self.hash160) == 20, 'hash160 must be 20 bytes')
        tert(isinstance(self.sig_type, int), 'sig_type must be SigType')
        object.__setattr__(self, 'sig_type', SigType(self.sig_type))

    def script_address(self) -> bytes:
        return self.hash160


@dataclass(frozen=True)
class AddressScriptHash:
    """Pay to the hash160 of a redeem script."""
    hash160: bytes

    def __post_init__(self) -> None:
        tert(type(self.hash160) is bytes, 'hash160 must be bytes')
        vert(len(self.hash160) == 20, 'hash160 must be 20 bytes')

    def script_address(self) -> bytes:
        return self.hash160


@dataclass(frozen=True)
class AddressSecpPubKey:
    """Pay directly to an ECDSA secp256k1 public key. Either strict
        encoding is accepted, but scripts always commit to the
        compressed form.
    """
    pubkey: bytes

    def __post_init__(self) -> None:
        tert(type(self.pubkey) is bytes, 'pubkey must be bytes')
        parse_secp_pubkey(self.pubkey)

    def serialize_compressed(self) -> bytes:
        """Return the 33-byte compressed encoding of the key."""
        if len(self.pubkey) == 33:
            return self.pubkey
        return parse_secp_pubkey(self.pubkey).to_string('compressed')

    def script_address(self) -> bytes:
        return self.serialize_compressed()


@dataclass(frozen=True)
class AddressEdwardsPubKey:
    """Pay directly to an ed25519 public key."""
    pubkey: bytes

    def __post_init__(self) -> None:
        tert(type(self.pubkey) is bytes, 'pubkey must be bytes')
        vert(is_valid_ed25519_pubkey(self.pubkey), 'invalid ed25519 pubkey')

    def script_address(self) -> bytes:
        return self.pubkey


@dataclass(frozen=True)
class AddressSchnorrPubKey:
    """Pay directly to a secp256k1 schnorr public key, which must use
        the compressed encoding.
    """
    pubkey: bytes

    def __post_init__(self) -> None:
        tert(type(self.pubkey) is bytes, 'pubkey must be bytes')
        vert(len(self.pubkey) == 33, 'schnorr pubkey must be 33 bytes compressed')
        parse_secp_pubkey(self.pubkey)

    def script_address(self) -> bytes:
        return self.pubkey


Address = (
    AddressPubKeyHash | AddressScriptHash | AddressSecpPubKey |
    AddressEdwardsPubKey | AddressSchnorrPubKey
)
