from __future__ import annotations
from .errors import ErrorKind, sert, tert, vert


MATH_OP_CODE_MAX_SCRIPT_NUM_LEN = 4
CLTV_MAX_SCRIPT_NUM_LEN = 5
DEFAULT_SCRIPT_VERSION = 0
MAX_SCRIPT_SIZE = 16384
MAX_SCRIPT_ELEMENT_SIZE = 2048
MAX_PUBKEYS_PER_MULTISIG = 20
MAX_DATA_CARRIER_SIZE = 256


OP_0 = 0x00
OP_FALSE = 0x00
OP_DATA_1 = 0x01
OP_DATA_2 = 0x02
OP_DATA_20 = 0x14
OP_DATA_30 = 0x1e
OP_DATA_32 = 0x20
OP_DATA_33 = 0x21
OP_DATA_36 = 0x24
OP_DATA_65 = 0x41
OP_DATA_75 = 0x4b
OP_PUSHDATA1 = 0x4c
OP_PUSHDATA2 = 0x4d
OP_PUSHDATA4 = 0x4e
OP_1NEGATE = 0x4f
OP_1 = 0x51
OP_TRUE = 0x51
OP_2 = 0x52
OP_16 = 0x60
OP_NOP = 0x61
OP_IF = 0x63
OP_ELSE = 0x67
OP_ENDIF = 0x68
OP_VERIFY = 0x69
OP_RETURN = 0x6a
OP_DROP = 0x75
OP_DUP = 0x76
OP_SIZE = 0x82
OP_EQUAL = 0x87
OP_EQUALVERIFY = 0x88
OP_SHA1 = 0xa7
OP_BLAKE256 = 0xa8
OP_HASH160 = 0xa9
OP_CHECKSIG = 0xac
OP_CHECKSIGVERIFY = 0xad
OP_CHECKMULTISIG = 0xae
OP_CHECKMULTISIGVERIFY = 0xaf
OP_CHECKLOCKTIMEVERIFY = 0xb1
OP_CHECKSEQUENCEVERIFY = 0xb2
OP_SSTX = 0xba
OP_SSGEN = 0xbb
OP_SSRTX = 0xbc
OP_SSTXCHANGE = 0xbd
OP_CHECKSIGALT = 0xbe
OP_CHECKSIGALTVERIFY = 0xbf
OP_SHA256 = 0xc0
OP_TADD = 0xc1
OP_TSPEND = 0xc2
OP_TGEN = 0xc3
OP_INVALIDOPCODE = 0xff


def script_num_bytes(number: int) -> bytes:
    """Convert a signed int into its minimal script number encoding:
        little-endian magnitude with the sign carried in the high bit
        of the final byte. Zero encodes to an empty byte string.
    """
    tert(type(number) is int, 'number must be int')
    if number == 0:
        return b''

    negative = number < 0
    magnitude = -number if negative else number
    result = bytearray()
    while magnitude > 0:
        result.append(magnitude & 0xff)
        magnitude >>= 8

    # an extra byte is needed when the high bit is already used by the
    # magnitude; otherwise the sign goes into the final byte
    if result[-1] & 0x80:
        result.append(0x80 if negative else 0x00)
    elif negative:
        result[-1] |= 0x80

    return bytes(result)

def check_minimal_data_encoding(value: bytes|bytearray|memoryview) -> None:
    """Raises ScriptError(NON_MINIMAL_ENCODING) if the value is not the
        shortest possible script number encoding of its integer.
    """
    if len(value) == 0:
        return

    # the final byte may only be 0x00 or 0x80 when the preceding byte
    # has its high bit set; this also rejects a lone 0x80
    if value[-1] & 0x7f == 0:
        sert(
            len(value) > 1 and value[-2] & 0x80 != 0,
            ErrorKind.NON_MINIMAL_ENCODING,
            f'numeric value encoded as {bytes(value).hex()} is not minimally encoded'
        )

def make_script_num(
        value: bytes|bytearray|memoryview, max_len: int = MATH_OP_CODE_MAX_SCRIPT_NUM_LEN,
        require_minimal: bool = True) -> int:
    """Decode a script number. Raises ScriptError(SCRIPT_NUMBER_TOO_LONG)
        if the encoding is longer than max_len and, when require_minimal
        is set, ScriptError(NON_MINIMAL_ENCODING) for a non-canonical
        encoding.
    """
    tert(isinstance(value, (bytes, bytearray, memoryview)),
        'value must be bytes, bytearray, or memoryview')
    vert(max_len >= 0, 'max_len must be >= 0')
    sert(
        len(value) <= max_len,
        ErrorKind.SCRIPT_NUMBER_TOO_LONG,
        f'numeric value encoded as {bytes(value).hex()} is {len(value)} '
        f'bytes which exceeds the max allowed of {max_len}'
    )

    if require_minimal:
        check_minimal_data_encoding(value)

    if len(value) == 0:
        return 0

    value = bytes(value)
    result = int.from_bytes(value, 'little')
    if value[-1] & 0x80:
        result &= ~(0x80 << (8 * (len(value) - 1)))
        return -result

    return result

def script_num_to_int32(number: int) -> int:
    """Saturate a script number to the int32 range."""
    if number > 2**31 - 1:
        return 2**31 - 1
    if number < -2**31:
        return -2**31
    return number

def is_small_int(op: int|None) -> bool:
    """Return True if the opcode pushes a small integer 0-16."""
    return op == OP_0 or (op is not None and OP_1 <= op <= OP_16)

def as_small_int(op: int) -> int:
    """Return the integer pushed by a small int opcode."""
    vert(is_small_int(op), 'op must be a small int opcode')
    if op == OP_0:
        return 0
    return op - (OP_1 - 1)

def is_push_opcode(op: int) -> bool:
    """Return True for OP_0 through OP_16, including OP_1NEGATE and
        OP_RESERVED, which is how push-only scripts are defined.
    """
    return op <= OP_16


# opcode table: (name, length) indexed by value
_table = [('OP_0', 1)]
_table.extend([(f'OP_DATA_{i}', i + 1) for i in range(1, 76)])
_table.extend([
    ('OP_PUSHDATA1', -1),
    ('OP_PUSHDATA2', -2),
    ('OP_PUSHDATA4', -4),
    ('OP_1NEGATE', 1),
    ('OP_RESERVED', 1),
])
_table.extend([(f'OP_{i}', 1) for i in range(1, 17)])
_table.extend([(name, 1) for name in (
    'OP_NOP', 'OP_VER', 'OP_IF', 'OP_NOTIF', 'OP_VERIF', 'OP_VERNOTIF',
    'OP_ELSE', 'OP_ENDIF', 'OP_VERIFY', 'OP_RETURN', 'OP_TOALTSTACK',
    'OP_FROMALTSTACK', 'OP_2DROP', 'OP_2DUP', 'OP_3DUP', 'OP_2OVER',
    'OP_2ROT', 'OP_2SWAP', 'OP_IFDUP', 'OP_DEPTH', 'OP_DROP', 'OP_DUP',
    'OP_NIP', 'OP_OVER', 'OP_PICK', 'OP_ROLL', 'OP_ROT', 'OP_SWAP',
    'OP_TUCK', 'OP_CAT', 'OP_SUBSTR', 'OP_LEFT', 'OP_RIGHT', 'OP_SIZE',
    'OP_INVERT', 'OP_AND', 'OP_OR', 'OP_XOR', 'OP_EQUAL', 'OP_EQUALVERIFY',
    'OP_ROTR', 'OP_ROTL', 'OP_1ADD', 'OP_1SUB', 'OP_2MUL', 'OP_2DIV',
    'OP_NEGATE', 'OP_ABS', 'OP_NOT', 'OP_0NOTEQUAL', 'OP_ADD', 'OP_SUB',
    'OP_MUL', 'OP_DIV', 'OP_MOD', 'OP_LSHIFT', 'OP_RSHIFT', 'OP_BOOLAND',
    'OP_BOOLOR', 'OP_NUMEQUAL', 'OP_NUMEQUALVERIFY', 'OP_NUMNOTEQUAL',
    'OP_LESSTHAN', 'OP_GREATERTHAN', 'OP_LESSTHANOREQUAL',
    'OP_GREATERTHANOREQUAL', 'OP_MIN', 'OP_MAX', 'OP_WITHIN',
    'OP_RIPEMD160', 'OP_SHA1', 'OP_BLAKE256', 'OP_HASH160', 'OP_HASH256',
    'OP_CODESEPARATOR', 'OP_CHECKSIG', 'OP_CHECKSIGVERIFY',
    'OP_CHECKMULTISIG', 'OP_CHECKMULTISIGVERIFY', 'OP_NOP1',
    'OP_CHECKLOCKTIMEVERIFY', 'OP_CHECKSEQUENCEVERIFY', 'OP_NOP4',
    'OP_NOP5', 'OP_NOP6', 'OP_NOP7', 'OP_NOP8', 'OP_NOP9', 'OP_NOP10',
    'OP_SSTX', 'OP_SSGEN', 'OP_SSRTX', 'OP_SSTXCHANGE', 'OP_CHECKSIGALT',
    'OP_CHECKSIGALTVERIFY', 'OP_SHA256', 'OP_TADD', 'OP_TSPEND', 'OP_TGEN',
)])
_table.extend([(f'OP_UNKNOWN{i}', 1) for i in range(196, 249)])
_table.extend([(f'OP_INVALID{i}', 1) for i in range(249, 255)])
_table.append(('OP_INVALIDOPCODE', 1))

opcodes: dict[int, tuple[str, int]] = {x: _table[x] for x in range(len(_table))}

opcodes_inverse: dict[str, tuple[int, int]] = {
    opcodes[key][0]: (key, opcodes[key][1]) for key in opcodes
}

opcode_aliases = {
    k[3:]: k for k in opcodes_inverse
    if not k[3:].isdigit()
}

opcode_aliases['OP_FALSE'] = 'OP_0'
opcode_aliases['FALSE'] = 'OP_0'
opcode_aliases['OP_TRUE'] = 'OP_1'
opcode_aliases['TRUE'] = 'OP_1'
opcode_aliases['OP_NOP2'] = 'OP_CHECKLOCKTIMEVERIFY'
opcode_aliases['NOP2'] = 'OP_CHECKLOCKTIMEVERIFY'
opcode_aliases['OP_NOP3'] = 'OP_CHECKSEQUENCEVERIFY'
opcode_aliases['NOP3'] = 'OP_CHECKSEQUENCEVERIFY'

del _table



def get_opcode(name: str) -> tuple[int, int]:
    """Look up an opcode by its name or alias and return its (value,
        length) pair. Raises ValueError for unknown names.
    """
    tert(type(name) is str, 'name must be str')
    name = name.upper()
    name = opcode_aliases.get(name, name)
    vert(name in opcodes_inverse, f'unknown opcode {name}')
    return opcodes_inverse[name]
