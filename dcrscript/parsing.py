from __future__ import annotations
from .classes import ScriptBuilder, ScriptTokenizer
from .errors import ErrorKind, ScriptError, sert, tert, yert
from .functions import (
    as_small_int,
    is_small_int,
    opcode_aliases,
    opcodes,
    opcodes_inverse,
    DEFAULT_SCRIPT_VERSION,
    OP_1NEGATE,
    OP_DATA_75,
)


def is_hex(s: str) -> bool:
    """Checks if a string is made of valid hexadecimal chars."""
    try:
        bytes.fromhex(f'0{s}' if len(s) % 2 else s)
        return True
    except ValueError:
        return False

def disasm_opcode(
        buf: list[str], op: int, data: bytes|memoryview, compress: bool = False
    ) -> None:
    """Append the text form of one opcode and its data to buf. Small
        int opcodes render as their decimal value and other opcodes by
        name without the OP_ prefix. Data pushes render as the opcode
        name followed by 0x-prefixed hex; in verbose form the length
        prefix of OP_PUSHDATA1/2/4 is echoed as its own little-endian
        hex token. With compress set, any non-empty push of up to 75
        bytes renders as DATA_<len> and longer pushes omit the length
        prefix. An empty push has no data token. Raises
        ScriptError(UNKNOWN_OPCODE) for a value with no table entry.
    """
    tert(type(buf) is list, 'buf must be list')
    sert(op in opcodes, ErrorKind.UNKNOWN_OPCODE, f'unknown opcode {op!r}')
    name, length = opcodes[op]

    if op == OP_1NEGATE:
        buf.append('-1')
        return

    if is_small_int(op):
        buf.append(str(as_small_int(op)))
        return

    if length == 1:
        buf.append(name[3:])
        return

    data = bytes(data)
    parts = [name[3:]]
    if compress and 0 < len(data) <= OP_DATA_75:
        parts = [f'DATA_{len(data)}']
    elif not compress and length < 0:
        parts.append(f'0x{len(data).to_bytes(-length, "little").hex()}')

    # an empty push has no data token
    if len(data):
        parts.append(f'0x{data.hex()}')
    buf.append(' '.join(parts))

def disasm_script(
        script: bytes, compress: bool = False,
        version: int = DEFAULT_SCRIPT_VERSION
    ) -> tuple[list[str], ScriptError|None]:
    """Disassemble every opcode of the script. Returns the rendered
        opcodes and the tokenizer error, if any; opcodes before a parse
        failure are still rendered.
    """
    buf = []
    tokenizer = ScriptTokenizer(version, script)
    while tokenizer.next():
        disasm_opcode(buf, tokenizer.opcode(), tokenizer.data(), compress)
    return buf, tokenizer.err()

def disasm_string(
        script: bytes, compress: bool = False,
        version: int = DEFAULT_SCRIPT_VERSION
    ) -> str:
    """Disassemble the script into one space-separated line. A parse
        failure is marked by a trailing [error] after the opcodes that
        did parse.
    """
    buf, err = disasm_script(script, compress, version)
    if err is not None:
        buf.append('[error]')
    return ' '.join(buf)


def _is_decimal(symbol: str) -> bool:
    digits = symbol[1:] if symbol.startswith('-') else symbol
    return digits.isdigit()

def _opcode_value(symbol: str) -> int|None:
    name = symbol.upper()
    name = opcode_aliases.get(name, name)
    if name in opcodes_inverse:
        return opcodes_inverse[name][0]
    return None

def parse_short_form(script: str) -> bytes:
    """Assemble the short form text of a script into bytes. Symbols
        are whitespace separated: decimal integers are pushed as script
        numbers, 0x-prefixed hex is copied into the script verbatim,
        single-quoted strings are pushed as data, and anything else
        must name an opcode with or without the OP_ prefix (OP_0-OP_16
        require the prefix since bare numbers are integers). Raises
        SyntaxError for an unrecognized symbol.
    """
    tert(type(script) is str, 'script must be str')
    builder = ScriptBuilder()

    for symbol in script.split():
        if _is_decimal(symbol):
            builder.add_int64(int(symbol))
            continue

        if symbol[:2] in ('0x', '0X'):
            digits = symbol[2:]
            yert(len(digits) % 2 == 0 and is_hex(digits),
                f'invalid hex symbol {symbol}')
            builder.buf.extend(bytes.fromhex(digits))
            continue

        if len(symbol) >= 2 and symbol[0] == "'" and symbol[-1] == "'":
            builder.add_full_data(symbol[1:-1].encode())
            continue

        value = _opcode_value(symbol)
        yert(value is not None, f'unrecognized symbol {symbol}')
        builder.add_op(value)

    return builder.script()
