from __future__ import annotations
from .addresses import (
    SigType,
    Address,
    AddressPubKeyHash,
    AddressScriptHash,
    AddressSecpPubKey,
    AddressEdwardsPubKey,
    AddressSchnorrPubKey,
)
from .classes import ScriptBuilder
from .errors import ErrorKind, ScriptError, sert, tert, vert
from .functions import (
    MAX_DATA_CARRIER_SIZE,
    OP_CHECKLOCKTIMEVERIFY,
    OP_CHECKMULTISIG,
    OP_CHECKSIG,
    OP_CHECKSIGALT,
    OP_DROP,
    OP_DUP,
    OP_ELSE,
    OP_ENDIF,
    OP_EQUAL,
    OP_EQUALVERIFY,
    OP_HASH160,
    OP_IF,
    OP_RETURN,
    OP_SHA256,
    OP_SIZE,
    OP_SSGEN,
    OP_SSRTX,
    OP_SSTX,
    OP_SSTXCHANGE,
    OP_TADD,
    OP_TGEN,
)
from .parsing import disasm_script, is_hex, parse_short_form
from .standard import classify_script, extract_pkscript_addrs
from importlib.metadata import PackageNotFoundError, version as _dist_version
from sys import argv


def _pay_to_pubkey_hash(pubkey_hash: bytes) -> bytes:
    return ScriptBuilder().add_op(OP_DUP).add_op(OP_HASH160).add_data(
        pubkey_hash).add_op(OP_EQUALVERIFY).add_op(OP_CHECKSIG).script()

def _pay_to_pubkey_hash_alt(pubkey_hash: bytes, sig_type: SigType) -> bytes:
    return ScriptBuilder().add_op(OP_DUP).add_op(OP_HASH160).add_data(
        pubkey_hash).add_op(OP_EQUALVERIFY).add_int64(int(sig_type)).add_op(
        OP_CHECKSIGALT).script()

def _pay_to_script_hash(script_hash: bytes) -> bytes:
    return ScriptBuilder().add_op(OP_HASH160).add_data(script_hash).add_op(
        OP_EQUAL).script()

def _unsupported(addr: object) -> ScriptError:
    return ScriptError(
        ErrorKind.UNSUPPORTED_ADDRESS,
        f'unable to generate payment script for unsupported address type '
        f'{type(addr).__name__}'
    )

def pay_to_addr_script(addr: Address|None) -> bytes:
    """Make the script paying to the address. Pubkey hash addresses
        use OP_CHECKSIG for secp256k1 ECDSA and the sig type plus
        OP_CHECKSIGALT for ed25519 and schnorr; secp256k1 pubkeys are
        always paid in compressed form. Raises
        ScriptError(UNSUPPORTED_ADDRESS) for None or any other type.
    """
    match addr:
        case AddressPubKeyHash(hash160=h, sig_type=SigType.ECDSA_SECP256K1):
            return _pay_to_pubkey_hash(h)
        case AddressPubKeyHash(hash160=h, sig_type=sig_type):
            return _pay_to_pubkey_hash_alt(h, sig_type)
        case AddressScriptHash(hash160=h):
            return _pay_to_script_hash(h)
        case AddressSecpPubKey():
            return ScriptBuilder().add_data(addr.serialize_compressed()).add_op(
                OP_CHECKSIG).script()
        case AddressEdwardsPubKey(pubkey=pk):
            return ScriptBuilder().add_data(pk).add_int64(
                int(SigType.ED25519)).add_op(OP_CHECKSIGALT).script()
        case AddressSchnorrPubKey(pubkey=pk):
            return ScriptBuilder().add_data(pk).add_int64(
                int(SigType.SCHNORR_SECP256K1)).add_op(OP_CHECKSIGALT).script()
        case _:
            raise _unsupported(addr)

def multisig_script(pubkeys: list[AddressSecpPubKey], nrequired: int) -> bytes:
    """Make a script requiring nrequired signatures from the pubkeys,
        which are committed to in compressed form. Raises
        ScriptError(TOO_MANY_REQUIRED_SIGS) if nrequired exceeds the
        number of pubkeys.
    """
    tert(type(pubkeys) is list, 'pubkeys must be list[AddressSecpPubKey]')
    tert(all(type(pk) is AddressSecpPubKey for pk in pubkeys),
        'pubkeys must be list[AddressSecpPubKey]')
    tert(type(nrequired) is int, 'nrequired must be int')
    sert(
        len(pubkeys) >= nrequired,
        ErrorKind.TOO_MANY_REQUIRED_SIGS,
        f'unable to generate multisig script with {nrequired} required '
        f'signatures when there are only {len(pubkeys)} public keys available'
    )

    builder = ScriptBuilder().add_int64(nrequired)
    for pk in pubkeys:
        builder.add_data(pk.serialize_compressed())
    return builder.add_int64(len(pubkeys)).add_op(OP_CHECKMULTISIG).script()

def generate_provably_pruneable_out(data: bytes) -> bytes:
    """Make a null data script carrying the data. Raises
        ScriptError(TOO_MUCH_NULL_DATA) for more than
        MAX_DATA_CARRIER_SIZE bytes.
    """
    tert(type(data) is bytes, 'data must be bytes')
    sert(
        len(data) <= MAX_DATA_CARRIER_SIZE,
        ErrorKind.TOO_MUCH_NULL_DATA,
        f'data size {len(data)} is larger than max allowed size '
        f'{MAX_DATA_CARRIER_SIZE}'
    )
    return ScriptBuilder().add_op(OP_RETURN).add_data(data).script()

def generate_sstx_addr_push(addr: Address|None, amount: int, limits: int) -> bytes:
    """Make the ticket commitment output: OP_RETURN then a 30 byte push
        of the 20 byte hash, the 8 byte little-endian amount with the
        high bit set for script hash addresses, and the 2 byte
        little-endian fee limits. Only secp256k1 pubkey hash and script
        hash addresses are supported.
    """
    vert(0 <= amount < 2**63, 'amount must be between 0 and 2**63-1')
    vert(0 <= limits <= 0xffff, 'limits must be between 0 and 65535')

    match addr:
        case AddressPubKeyHash(hash160=h, sig_type=SigType.ECDSA_SECP256K1):
            is_script_hash = False
        case AddressScriptHash(hash160=h):
            is_script_hash = True
        case _:
            raise _unsupported(addr)

    data = bytearray(30)
    data[:20] = h
    data[20:28] = amount.to_bytes(8, 'little')
    if is_script_hash:
        data[27] |= 0x80
    data[28:] = limits.to_bytes(2, 'little')

    return ScriptBuilder().add_op(OP_RETURN).add_data(bytes(data)).script()

def generate_ssgen_block_ref(block_hash: bytes, height: int) -> bytes:
    """Make the vote block reference output: OP_RETURN then a 36 byte
        push of the block hash (internal byte order) and the 4 byte
        little-endian height.
    """
    tert(type(block_hash) is bytes, 'block_hash must be bytes')
    vert(len(block_hash) == 32, 'block_hash must be 32 bytes')
    vert(0 <= height <= 0xffffffff, 'height must be a uint32')
    data = block_hash + height.to_bytes(4, 'little')
    return ScriptBuilder().add_op(OP_RETURN).add_data(data).script()

def generate_ssgen_votes(votebits: int) -> bytes:
    """Make the vote bits output: OP_RETURN then the 2 byte
        little-endian vote bits.
    """
    vert(0 <= votebits <= 0xffff, 'votebits must be a uint16')
    return ScriptBuilder().add_op(OP_RETURN).add_data(
        votebits.to_bytes(2, 'little')).script()

def _pay_to_tagged(addr: Address|None, tag: int) -> bytes:
    match addr:
        case AddressPubKeyHash(hash160=h, sig_type=SigType.ECDSA_SECP256K1):
            script = _pay_to_pubkey_hash(h)
        case AddressScriptHash(hash160=h):
            script = _pay_to_script_hash(h)
        case _:
            raise _unsupported(addr)
    return bytes([tag]) + script

def pay_to_sstx(addr: Address|None) -> bytes:
    """Make a ticket purchase output script tagged with OP_SSTX."""
    return _pay_to_tagged(addr, OP_SSTX)

def pay_to_sstx_change(addr: Address|None) -> bytes:
    """Make a ticket change output script tagged with OP_SSTXCHANGE."""
    return _pay_to_tagged(addr, OP_SSTXCHANGE)

def pay_to_ssgen(addr: Address|None) -> bytes:
    """Make a vote reward output script tagged with OP_SSGEN."""
    return _pay_to_tagged(addr, OP_SSGEN)

def pay_to_ssrtx(addr: Address|None) -> bytes:
    """Make a revocation output script tagged with OP_SSRTX."""
    return _pay_to_tagged(addr, OP_SSRTX)

def make_treasury_add_script() -> bytes:
    return bytes([OP_TADD])

def make_treasury_gen_script(addr: Address|None) -> bytes:
    """Make a treasury spend payout script tagged with OP_TGEN."""
    return _pay_to_tagged(addr, OP_TGEN)

def make_atomic_swap_contract(
        recipient_hash160: bytes, refund_hash160: bytes, secret_hash: bytes,
        lock_time: int, secret_size: int = 32) -> bytes:
    """Make an atomic swap contract. The recipient redeems with the
        secret whose sha256 is secret_hash; the refund address redeems
        once lock_time has passed.
    """
    tert(type(recipient_hash160) is bytes, 'recipient_hash160 must be bytes')
    tert(type(refund_hash160) is bytes, 'refund_hash160 must be bytes')
    tert(type(secret_hash) is bytes, 'secret_hash must be bytes')
    vert(len(recipient_hash160) == 20, 'recipient_hash160 must be 20 bytes')
    vert(len(refund_hash160) == 20, 'refund_hash160 must be 20 bytes')
    vert(len(secret_hash) == 32, 'secret_hash must be 32 bytes')

    builder = ScriptBuilder()
    builder.add_op(OP_IF)
    builder.add_op(OP_SIZE).add_int64(secret_size).add_op(OP_EQUALVERIFY)
    builder.add_op(OP_SHA256).add_data(secret_hash).add_op(OP_EQUALVERIFY)
    builder.add_op(OP_DUP).add_op(OP_HASH160).add_data(recipient_hash160)
    builder.add_op(OP_ELSE)
    builder.add_int64(lock_time).add_op(OP_CHECKLOCKTIMEVERIFY).add_op(OP_DROP)
    builder.add_op(OP_DUP).add_op(OP_HASH160).add_data(refund_hash160)
    builder.add_op(OP_ENDIF)
    builder.add_op(OP_EQUALVERIFY).add_op(OP_CHECKSIG)
    return builder.script()


def version() -> str:
    """Return the installed dcrscript version."""
    try:
        return _dist_version('dcrscript')
    except PackageNotFoundError:
        return 'unknown'

def cli_help() -> str:
    """Return CLI help text."""
    name = argv[0]
    return '\n'.join([
        f'Usage: {name} [method] [options]',
        '\t<hex_script> -- disassembles the script; default behavior if the '
        'first argument is not a method',
        '\tdisasm hex_script [--compress] -- disassembles the script, '
        'collapsing small pushes to DATA_N with --compress',
        '\tasm short_form -- assembles the quoted short form and prints the '
        'script hex',
        '\tclassify hex_script [--treasury] -- prints the script class and any '
        'addresses; --treasury enables the treasury templates',
        '\tversion -- print current dcrscript version',
    ])

def _clert(condition: bool, message: str = ''):
    """CLI assert: print error message and exit if condition fails."""
    if not condition:
        message = f'{message}\n{cli_help()}' if message else cli_help()
        print(message)
        exit(1)

def _parse_hex_arg(arg: str) -> bytes:
    _clert(len(arg) % 2 == 0 and is_hex(arg), f'invalid hex script {arg}')
    return bytes.fromhex(arg)

def _print_disasm(script: bytes, compress: bool) -> None:
    buf, err = disasm_script(script, compress)
    if err is not None:
        print(f'Error parsing script: {err}')
    print(f'Output:\n{" ".join(buf)}')

def run_cli() -> None:
    """Run the simple CLI tool. More advanced functionality requires
        programmatic access.
    """
    _clert(len(argv) > 1)
    method = argv[1]
    flags = argv[3:]
    match method:
        case 'version' | '--version':
            print(version())
        case 'help' | '--help' | '?' | '-?' | '-h':
            print(cli_help())
        case 'disasm':
            _clert(len(argv) >= 3, 'Missing hex_script parameter.')
            _print_disasm(_parse_hex_arg(argv[2]), '--compress' in flags)
        case 'asm':
            _clert(len(argv) >= 3, 'Missing short_form parameter.')
            print(parse_short_form(' '.join(argv[2:])).hex())
        case 'classify':
            _clert(len(argv) >= 3, 'Missing hex_script parameter.')
            script = _parse_hex_arg(argv[2])
            treasury = '--treasury' in flags
            classification = classify_script(0, script, treasury)
            print(f'class: {classification}')
            try:
                _, addrs, req_sigs = extract_pkscript_addrs(0, script, treasury)
            except ScriptError as e:
                print(f'Error parsing script: {e}')
                return
            print(f'required signatures: {req_sigs}')
            for addr in addrs:
                print(f'{type(addr).__name__}: {addr.script_address().hex()}')
        case _:
            _print_disasm(_parse_hex_arg(method), False)
