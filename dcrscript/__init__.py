from .addresses import (
    SigType,
    Address,
    AddressPubKeyHash,
    AddressScriptHash,
    AddressSecpPubKey,
    AddressEdwardsPubKey,
    AddressSchnorrPubKey,
    is_strict_pubkey_encoding,
)
from .classes import (
    ScriptTokenizer,
    ScriptBuilder,
    ScriptClass,
    ScriptClassification,
    AtomicSwapDataPushes,
)
from .errors import ErrorKind, ScriptError
from .functions import (
    make_script_num,
    script_num_bytes,
    script_num_to_int32,
    check_minimal_data_encoding,
    get_opcode,
    opcodes,
    opcodes_inverse,
)
from .interfaces import AddressProtocol, TokenizerProtocol
from .parsing import (
    disasm_opcode,
    disasm_string,
    parse_short_form
)
from .standard import (
    classify_script,
    get_script_class,
    get_stake_out_subclass,
    calc_multisig_stats,
    extract_pkscript_addrs,
    extract_atomic_swap_data_pushes,
    check_script_parses,
    is_unspendable,
)
from .tools import (
    pay_to_addr_script,
    multisig_script,
    generate_provably_pruneable_out,
    generate_sstx_addr_push,
    generate_ssgen_block_ref,
    generate_ssgen_votes,
    pay_to_sstx,
    pay_to_sstx_change,
    pay_to_ssgen,
    pay_to_ssrtx,
    make_atomic_swap_contract,
    make_treasury_add_script,
    make_treasury_gen_script,
)
