from __future__ import annotations
from dataclasses import dataclass, field
from .addresses import (
    SigType,
    AddressPubKeyHash,
    AddressScriptHash,
    AddressSecpPubKey,
    AddressEdwardsPubKey,
    AddressSchnorrPubKey,
    is_valid_ed25519_pubkey,
    is_valid_secp_pubkey,
)
from .classes import (
    AtomicSwapDataPushes,
    ScriptClass,
    ScriptClassification,
    ScriptTokenizer,
    Token,
)
from .errors import ErrorKind, ScriptError, sert
from .functions import (
    as_small_int,
    is_push_opcode,
    is_small_int,
    make_script_num,
    CLTV_MAX_SCRIPT_NUM_LEN,
    DEFAULT_SCRIPT_VERSION,
    MATH_OP_CODE_MAX_SCRIPT_NUM_LEN,
    MAX_DATA_CARRIER_SIZE,
    MAX_PUBKEYS_PER_MULTISIG,
    MAX_SCRIPT_SIZE,
    OP_CHECKLOCKTIMEVERIFY,
    OP_CHECKMULTISIG,
    OP_CHECKSIG,
    OP_CHECKSIGALT,
    OP_DATA_1,
    OP_DATA_20,
    OP_DATA_32,
    OP_DATA_33,
    OP_DATA_65,
    OP_DROP,
    OP_DUP,
    OP_ELSE,
    OP_ENDIF,
    OP_EQUAL,
    OP_EQUALVERIFY,
    OP_HASH160,
    OP_IF,
    OP_PUSHDATA4,
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
import logging


logger = logging.getLogger(__name__)

_stake_classes = {
    OP_SSTX: ScriptClass.STAKE_SUBMISSION,
    OP_SSGEN: ScriptClass.STAKE_GEN,
    OP_SSRTX: ScriptClass.STAKE_REVOCATION,
    OP_SSTXCHANGE: ScriptClass.STAKE_SUB_CHANGE,
}


@dataclass(frozen=True)
class MultiSigDetails:
    """Details extracted from a standard multisig script."""
    required_sigs: int
    num_pubkeys: int
    pubkeys: list[bytes] = field(default_factory=list)


def _tokenize(version: int, script: bytes) -> list[Token]|None:
    """Tokenize the whole script. Returns None and logs the failure if
        the script does not parse.
    """
    tokenizer = ScriptTokenizer(version, script)
    tokens = list(tokenizer)
    if tokenizer.err() is not None:
        logger.debug('script %s does not parse: %s', bytes(script).hex(), tokenizer.err())
        return None
    return tokens

def _ops(tokens: list[Token]) -> list[int]:
    return [t.opcode for t in tokens]

def _is_data_push(op: int) -> bool:
    return OP_DATA_1 <= op <= OP_PUSHDATA4


# template matchers over a tokenized version 0 script

def _match_pubkey(tokens: list[Token]) -> bytes|None:
    """OP_DATA_33 <compressed pubkey> OP_CHECKSIG or OP_DATA_65
        <uncompressed pubkey> OP_CHECKSIG.
    """
    if len(tokens) != 2 or tokens[1].opcode != OP_CHECKSIG:
        return None
    op, data = tokens[0].opcode, tokens[0].data
    if op == OP_DATA_33 and data[0] in (0x02, 0x03):
        return bytes(data)
    if op == OP_DATA_65 and data[0] == 0x04:
        return bytes(data)
    return None

def _match_pubkey_alt(tokens: list[Token]) -> tuple[bytes, SigType]|None:
    """<pubkey> <sig type> OP_CHECKSIGALT with an ed25519 (1) or a
        compressed schnorr secp256k1 (2) pubkey.
    """
    if len(tokens) != 3 or tokens[2].opcode != OP_CHECKSIGALT:
        return None
    op, data = tokens[0].opcode, tokens[0].data
    sig_op = tokens[1].opcode
    if not is_small_int(sig_op):
        return None

    sig_type = as_small_int(sig_op)
    if op == OP_DATA_32 and sig_type == SigType.ED25519:
        return bytes(data), SigType.ED25519
    if op == OP_DATA_33 and sig_type == SigType.SCHNORR_SECP256K1 and \
        data[0] in (0x02, 0x03):
        return bytes(data), SigType.SCHNORR_SECP256K1
    return None

def _match_pubkey_hash(tokens: list[Token]) -> bytes|None:
    """OP_DUP OP_HASH160 <20-byte hash> OP_EQUALVERIFY OP_CHECKSIG"""
    if _ops(tokens) == [OP_DUP, OP_HASH160, OP_DATA_20, OP_EQUALVERIFY, OP_CHECKSIG]:
        return bytes(tokens[2].data)
    return None

def _match_pubkey_hash_alt(tokens: list[Token]) -> tuple[bytes, SigType]|None:
    """OP_DUP OP_HASH160 <20-byte hash> OP_EQUALVERIFY <sig type>
        OP_CHECKSIGALT
    """
    ops = _ops(tokens)
    if len(ops) != 6 or ops[:4] != [OP_DUP, OP_HASH160, OP_DATA_20, OP_EQUALVERIFY]:
        return None
    if ops[5] != OP_CHECKSIGALT or not is_small_int(ops[4]):
        return None
    sig_type = as_small_int(ops[4])
    if sig_type not in (SigType.ED25519, SigType.SCHNORR_SECP256K1):
        return None
    return bytes(tokens[2].data), SigType(sig_type)

def _match_script_hash(tokens: list[Token]) -> bytes|None:
    """OP_HASH160 <20-byte hash> OP_EQUAL"""
    if _ops(tokens) == [OP_HASH160, OP_DATA_20, OP_EQUAL]:
        return bytes(tokens[1].data)
    return None

def _match_multisig(tokens: list[Token]) -> MultiSigDetails|None:
    """<m> <pubkey>... <n> OP_CHECKMULTISIG with 1 <= m <= n <= 20.
        Every data push counts as a pubkey whether or not it decodes.
    """
    if len(tokens) < 4 or tokens[-1].opcode != OP_CHECKMULTISIG:
        return None
    if not is_small_int(tokens[0].opcode) or not is_small_int(tokens[-2].opcode):
        return None

    required_sigs = as_small_int(tokens[0].opcode)
    num_pubkeys = as_small_int(tokens[-2].opcode)
    pushes = tokens[1:-2]
    if not all(_is_data_push(t.opcode) for t in pushes):
        return None
    if len(pushes) != num_pubkeys:
        return None
    if not 1 <= required_sigs <= num_pubkeys <= MAX_PUBKEYS_PER_MULTISIG:
        return None

    return MultiSigDetails(required_sigs, num_pubkeys, [bytes(t.data) for t in pushes])

def _match_null_data(tokens: list[Token]) -> bool:
    """OP_RETURN alone or followed by a single push of at most
        MAX_DATA_CARRIER_SIZE bytes.
    """
    if len(tokens) == 0 or tokens[0].opcode != OP_RETURN:
        return False
    if len(tokens) == 1:
        return True
    if len(tokens) != 2:
        return False

    op = tokens[1].opcode
    return (is_small_int(op) or op <= OP_PUSHDATA4) and \
        len(tokens[1].data) <= MAX_DATA_CARRIER_SIZE

def _match_tagged(tokens: list[Token], tag: int) -> ScriptClass|None:
    """<tag> followed by a pay-to-pubkey-hash or pay-to-script-hash
        script. Returns the wrapped class as the sub class.
    """
    if len(tokens) == 0 or tokens[0].opcode != tag:
        return None
    if _match_pubkey_hash(tokens[1:]) is not None:
        return ScriptClass.PUBKEY_HASH
    if _match_script_hash(tokens[1:]) is not None:
        return ScriptClass.SCRIPT_HASH
    return None

def _match_treasury_add(tokens: list[Token]) -> bool:
    return _ops(tokens) == [OP_TADD]

def _classify_tokens(tokens: list[Token], is_treasury_enabled: bool) -> ScriptClassification:
    if _match_pubkey(tokens) is not None:
        return ScriptClassification(ScriptClass.PUBKEY)
    if _match_pubkey_alt(tokens) is not None:
        return ScriptClassification(ScriptClass.PUBKEY_ALT)
    if _match_pubkey_hash(tokens) is not None:
        return ScriptClassification(ScriptClass.PUBKEY_HASH)
    if _match_pubkey_hash_alt(tokens) is not None:
        return ScriptClassification(ScriptClass.PUBKEY_HASH_ALT)
    if _match_script_hash(tokens) is not None:
        return ScriptClassification(ScriptClass.SCRIPT_HASH)
    if _match_multisig(tokens) is not None:
        return ScriptClassification(ScriptClass.MULTISIG)
    if _match_null_data(tokens):
        return ScriptClassification(ScriptClass.NULL_DATA)

    for tag, script_class in _stake_classes.items():
        sub_class = _match_tagged(tokens, tag)
        if sub_class is not None:
            return ScriptClassification(script_class, sub_class)

    if is_treasury_enabled:
        if _match_treasury_add(tokens):
            return ScriptClassification(ScriptClass.TREASURY_ADD)
        sub_class = _match_tagged(tokens, OP_TGEN)
        if sub_class is not None:
            return ScriptClassification(ScriptClass.TREASURY_SPEND, sub_class)

    return ScriptClassification(ScriptClass.NON_STANDARD)


def classify_script(
        version: int, script: bytes, is_treasury_enabled: bool = False
    ) -> ScriptClassification:
    """Match the script against the standard templates in precedence
        order and return its class and, for stake and treasury tagged
        scripts, the class of the wrapped script. Scripts that are not
        version 0 or do not parse are non standard. Treasury templates
        only participate when is_treasury_enabled is set.
    """
    if version != DEFAULT_SCRIPT_VERSION:
        return ScriptClassification(ScriptClass.NON_STANDARD)

    tokens = _tokenize(version, script)
    if tokens is None:
        return ScriptClassification(ScriptClass.NON_STANDARD)

    return _classify_tokens(tokens, is_treasury_enabled)

def get_script_class(
        version: int, script: bytes, is_treasury_enabled: bool = False
    ) -> ScriptClass:
    """Return the class of the script from the standard templates."""
    return classify_script(version, script, is_treasury_enabled).script_class

def get_stake_out_subclass(script: bytes, is_treasury_enabled: bool = False) -> ScriptClass:
    """Return the class of the script wrapped by a version 0 stake or
        treasury tagged output. Raises ScriptError(MALFORMED_PUSH) if
        the script does not parse and ScriptError(NOT_STAKE_OUTPUT) if
        it is not a tagged output.
    """
    err = check_script_parses(DEFAULT_SCRIPT_VERSION, script)
    if err is not None:
        raise err

    classification = classify_script(DEFAULT_SCRIPT_VERSION, script, is_treasury_enabled)
    sert(
        classification.sub_class is not ScriptClass.NON_STANDARD,
        ErrorKind.NOT_STAKE_OUTPUT,
        'not a stake output'
    )
    return classification.sub_class


def _version0_tokens(script: bytes, version: int) -> list[Token]:
    if version != DEFAULT_SCRIPT_VERSION:
        return []
    return _tokenize(version, script) or []

def is_pubkey_script(script: bytes, version: int = DEFAULT_SCRIPT_VERSION) -> bool:
    return _match_pubkey(_version0_tokens(script, version)) is not None

def is_pubkey_alt_script(script: bytes, version: int = DEFAULT_SCRIPT_VERSION) -> bool:
    return _match_pubkey_alt(_version0_tokens(script, version)) is not None

def is_pubkey_hash_script(script: bytes, version: int = DEFAULT_SCRIPT_VERSION) -> bool:
    return _match_pubkey_hash(_version0_tokens(script, version)) is not None

def is_pubkey_hash_alt_script(script: bytes, version: int = DEFAULT_SCRIPT_VERSION) -> bool:
    return _match_pubkey_hash_alt(_version0_tokens(script, version)) is not None

def is_script_hash_script(script: bytes, version: int = DEFAULT_SCRIPT_VERSION) -> bool:
    return _match_script_hash(_version0_tokens(script, version)) is not None

def is_multisig_script(script: bytes, version: int = DEFAULT_SCRIPT_VERSION) -> bool:
    return _match_multisig(_version0_tokens(script, version)) is not None

def is_null_data_script(script: bytes, version: int = DEFAULT_SCRIPT_VERSION) -> bool:
    return _match_null_data(_version0_tokens(script, version))

def is_stake_submission_script(script: bytes, version: int = DEFAULT_SCRIPT_VERSION) -> bool:
    return _match_tagged(_version0_tokens(script, version), OP_SSTX) is not None

def is_stake_gen_script(script: bytes, version: int = DEFAULT_SCRIPT_VERSION) -> bool:
    return _match_tagged(_version0_tokens(script, version), OP_SSGEN) is not None

def is_stake_revocation_script(script: bytes, version: int = DEFAULT_SCRIPT_VERSION) -> bool:
    return _match_tagged(_version0_tokens(script, version), OP_SSRTX) is not None

def is_stake_change_script(script: bytes, version: int = DEFAULT_SCRIPT_VERSION) -> bool:
    return _match_tagged(_version0_tokens(script, version), OP_SSTXCHANGE) is not None

def is_treasury_add_script(script: bytes, version: int = DEFAULT_SCRIPT_VERSION) -> bool:
    return _match_treasury_add(_version0_tokens(script, version))

def is_treasury_spend_script(script: bytes, version: int = DEFAULT_SCRIPT_VERSION) -> bool:
    return _match_tagged(_version0_tokens(script, version), OP_TGEN) is not None


def calc_multisig_stats(script: bytes) -> tuple[int, int]:
    """Return the number of pubkeys and required signatures of a
        version 0 multisig script. Raises ScriptError(NOT_MULTISIG_SCRIPT)
        for any other script.
    """
    details = _match_multisig(_version0_tokens(script, DEFAULT_SCRIPT_VERSION))
    sert(details is not None, ErrorKind.NOT_MULTISIG_SCRIPT,
        'script is not a multisig script')
    return details.num_pubkeys, details.required_sigs


def _hash_address(tokens: list[Token]) -> AddressPubKeyHash|AddressScriptHash|None:
    if (h := _match_pubkey_hash(tokens)) is not None:
        return AddressPubKeyHash(h)
    if (h := _match_script_hash(tokens)) is not None:
        return AddressScriptHash(h)
    return None

def extract_pkscript_addrs(
        version: int, script: bytes, is_treasury_enabled: bool = False
    ) -> tuple[ScriptClass, list, int]:
    """Return the class, addresses, and number of required signatures
        of a standard script. Multisig scripts only yield the addresses
        of pubkeys that decode. Non standard, null data, and treasury
        add scripts yield no addresses and zero signatures. Raises
        ScriptError(MALFORMED_PUSH) if a non standard script does not
        parse.
    """
    if version != DEFAULT_SCRIPT_VERSION:
        return ScriptClass.NON_STANDARD, [], 0

    tokenizer = ScriptTokenizer(version, script)
    tokens = list(tokenizer)
    if tokenizer.err() is not None:
        raise tokenizer.err()

    if (h := _match_pubkey_hash(tokens)) is not None:
        return ScriptClass.PUBKEY_HASH, [AddressPubKeyHash(h)], 1

    if (details := _match_pubkey_hash_alt(tokens)) is not None:
        h, sig_type = details
        return ScriptClass.PUBKEY_HASH_ALT, [AddressPubKeyHash(h, sig_type)], 1

    if (h := _match_script_hash(tokens)) is not None:
        return ScriptClass.SCRIPT_HASH, [AddressScriptHash(h)], 1

    if (pubkey := _match_pubkey(tokens)) is not None:
        addrs = []
        if is_valid_secp_pubkey(pubkey):
            addrs.append(AddressSecpPubKey(pubkey))
        return ScriptClass.PUBKEY, addrs, 1

    if (details := _match_pubkey_alt(tokens)) is not None:
        pubkey, sig_type = details
        addrs = []
        if sig_type is SigType.ED25519 and is_valid_ed25519_pubkey(pubkey):
            addrs.append(AddressEdwardsPubKey(pubkey))
        elif sig_type is SigType.SCHNORR_SECP256K1 and is_valid_secp_pubkey(pubkey):
            addrs.append(AddressSchnorrPubKey(pubkey))
        return ScriptClass.PUBKEY_ALT, addrs, 1

    if (details := _match_multisig(tokens)) is not None:
        addrs = [
            AddressSecpPubKey(pk) for pk in details.pubkeys
            if is_valid_secp_pubkey(pk)
        ]
        return ScriptClass.MULTISIG, addrs, details.required_sigs

    for tag, script_class in _stake_classes.items():
        if len(tokens) and tokens[0].opcode == tag:
            if (addr := _hash_address(tokens[1:])) is not None:
                return script_class, [addr], 1

    if _match_null_data(tokens):
        return ScriptClass.NULL_DATA, [], 0

    if is_treasury_enabled:
        if _match_treasury_add(tokens):
            return ScriptClass.TREASURY_ADD, [], 0
        if len(tokens) and tokens[0].opcode == OP_TGEN:
            if (addr := _hash_address(tokens[1:])) is not None:
                return ScriptClass.TREASURY_SPEND, [addr], 1

    return ScriptClass.NON_STANDARD, [], 0


# IF SIZE <secret size> EQUALVERIFY SHA256 <32-byte hash> EQUALVERIFY DUP
# HASH160 <recipient hash> ELSE <locktime> CHECKLOCKTIMEVERIFY DROP DUP
# HASH160 <refund hash> ENDIF EQUALVERIFY CHECKSIG
_atomic_swap_template = (
    OP_IF, OP_SIZE, None, OP_EQUALVERIFY,
    OP_SHA256, OP_DATA_32, OP_EQUALVERIFY, OP_DUP, OP_HASH160, OP_DATA_20,
    OP_ELSE, None, OP_CHECKLOCKTIMEVERIFY, OP_DROP,
    OP_DUP, OP_HASH160, OP_DATA_20, OP_ENDIF, OP_EQUALVERIFY, OP_CHECKSIG,
)

# template slot -> max script number length of the integer in it
_atomic_swap_int_slots = {
    2: MATH_OP_CODE_MAX_SCRIPT_NUM_LEN,
    11: CLTV_MAX_SCRIPT_NUM_LEN,
}

def _template_int(token: Token, max_len: int) -> int|None:
    """Decode a minimally encoded script number push or a small int
        opcode. Returns None for any other opcode.
    """
    if is_small_int(token.opcode):
        return as_small_int(token.opcode)
    if _is_data_push(token.opcode):
        return make_script_num(token.data, max_len, True)
    return None

def extract_atomic_swap_data_pushes(version: int, script: bytes) -> AtomicSwapDataPushes|None:
    """Return the data pushes of an atomic swap contract, or None if
        the script is not one. The secret size must be 32. Raises
        ScriptError(UNSUPPORTED_SCRIPT_VERSION) for any version but 0.
    """
    sert(
        version == DEFAULT_SCRIPT_VERSION,
        ErrorKind.UNSUPPORTED_SCRIPT_VERSION,
        f'unsupported script version {version}'
    )

    tokens = _tokenize(version, script)
    if tokens is None or len(tokens) != len(_atomic_swap_template):
        return None

    for i, expected in enumerate(_atomic_swap_template):
        if expected is None:
            continue
        if tokens[i].opcode != expected:
            return None

    try:
        secret_size = _template_int(tokens[2], _atomic_swap_int_slots[2])
        lock_time = _template_int(tokens[11], _atomic_swap_int_slots[11])
    except ScriptError as e:
        logger.debug('atomic swap integer push rejected: %s', e)
        return None

    if secret_size is None or lock_time is None or secret_size != 32:
        return None

    return AtomicSwapDataPushes(
        recipient_hash160=bytes(tokens[9].data),
        refund_hash160=bytes(tokens[16].data),
        secret_hash=bytes(tokens[5].data),
        secret_size=secret_size,
        lock_time=lock_time,
    )


def check_script_parses(version: int, script: bytes) -> ScriptError|None:
    """Return the tokenizer error for the script, or None if it
        tokenizes cleanly.
    """
    tokenizer = ScriptTokenizer(version, script)
    while tokenizer.next():
        pass
    return tokenizer.err()

def final_opcode_data(version: int, script: bytes) -> bytes|None:
    """Return the data pushed by the final opcode in the script, or
        None if the script is empty or does not parse.
    """
    tokens = _tokenize(version, script)
    if not tokens:
        return None
    return bytes(tokens[-1].data)

def is_push_only_script(script: bytes) -> bool:
    """Return True if the version 0 script parses and only pushes
        data.
    """
    tokens = _tokenize(DEFAULT_SCRIPT_VERSION, script)
    return tokens is not None and all(is_push_opcode(t.opcode) for t in tokens)

def get_script_opcode_count(script: bytes) -> int:
    """Count the opcodes of the version 0 script up to the first parse
        failure.
    """
    return sum(1 for _ in ScriptTokenizer(DEFAULT_SCRIPT_VERSION, script))

def is_unspendable(amount: int, script: bytes) -> bool:
    """Return True if an output with this amount and version 0 script
        can never be spent: a zero amount, an oversized script, a
        leading OP_RETURN, or a script that does not parse.
    """
    return (
        amount == 0
        or len(script) > MAX_SCRIPT_SIZE
        or (len(script) > 0 and script[0] == OP_RETURN)
        or check_script_parses(DEFAULT_SCRIPT_VERSION, script) is not None
    )
