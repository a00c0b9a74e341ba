from context import errors, parsing
import unittest


P2PKH_HEX = '76a914128004ff2fcaf13b2b91eb654b1dc2b674f7ec6188ac'
P2PKH_ASM = 'DUP HASH160 DATA_20 0x128004ff2fcaf13b2b91eb654b1dc2b674f7ec61 EQUALVERIFY CHECKSIG'


class TestDisassembly(unittest.TestCase):
    def test_disasm_string_pay_to_pubkey_hash(self):
        assert parsing.disasm_string(bytes.fromhex(P2PKH_HEX)) == P2PKH_ASM

    def test_small_ints_render_as_decimal(self):
        script = bytes.fromhex('004f515a60')
        assert parsing.disasm_string(script) == '0 -1 1 10 16'
        assert parsing.disasm_string(script, True) == '0 -1 1 10 16'

    def test_opcode_names_drop_prefix(self):
        script = bytes.fromhex('50b1b2bebac1c2c3c4f9ff')
        assert parsing.disasm_string(script) == (
            'RESERVED CHECKLOCKTIMEVERIFY CHECKSEQUENCEVERIFY CHECKSIGALT '
            'SSTX TADD TSPEND TGEN UNKNOWN196 INVALID249 INVALIDOPCODE'
        )

    def test_fixed_pushes(self):
        assert parsing.disasm_string(bytes.fromhex('0107')) == 'DATA_1 0x07'
        assert parsing.disasm_string(bytes.fromhex('0107'), True) == 'DATA_1 0x07'

    def test_pushdata_verbose_echoes_length_prefix(self):
        assert parsing.disasm_string(bytes.fromhex('4c02aabb')) == 'PUSHDATA1 0x02 0xaabb'
        assert parsing.disasm_string(bytes.fromhex('4d0200aabb')) == 'PUSHDATA2 0x0200 0xaabb'
        assert parsing.disasm_string(bytes.fromhex('4e02000000aabb')) == \
            'PUSHDATA4 0x02000000 0xaabb'

        script = bytes.fromhex('4d0001') + b'\x00' * 256
        assert parsing.disasm_string(script) == f'PUSHDATA2 0x0001 0x{"00" * 256}'

    def test_pushdata_compressed(self):
        assert parsing.disasm_string(bytes.fromhex('4c02aabb'), True) == 'DATA_2 0xaabb'
        assert parsing.disasm_string(bytes.fromhex('4e02000000aabb'), True) == 'DATA_2 0xaabb'

        script = bytes.fromhex('4d0001') + b'\x00' * 256
        assert parsing.disasm_string(script, True) == f'PUSHDATA2 0x{"00" * 256}'

        script = bytes.fromhex('4c4c') + b'\x01' * 76
        assert parsing.disasm_string(script, True) == f'PUSHDATA1 0x{"01" * 76}'

    def test_empty_pushdata(self):
        assert parsing.disasm_string(bytes.fromhex('4c00')) == 'PUSHDATA1 0x00'
        assert parsing.disasm_string(bytes.fromhex('4c00'), True) == 'PUSHDATA1'
        assert parsing.disasm_string(bytes.fromhex('4d0000'), True) == 'PUSHDATA2'

        buf = []
        parsing.disasm_opcode(buf, 0x4e, b'')
        assert buf == ['PUSHDATA4 0x00000000']

    def test_parse_failure_is_marked(self):
        assert parsing.disasm_string(bytes.fromhex('511400')) == '1 [error]'
        assert parsing.disasm_string(bytes.fromhex('4c')) == '[error]'

        buf, err = parsing.disasm_script(bytes.fromhex('511400'))
        assert buf == ['1']
        assert err.kind is errors.ErrorKind.MALFORMED_PUSH

    def test_disassembly_is_repeatable(self):
        script = bytes.fromhex('4c02aabb515214')
        assert parsing.disasm_string(script) == parsing.disasm_string(script)
        assert parsing.disasm_string(script) == 'PUSHDATA1 0x02 0xaabb 1 2 [error]'

    def test_unsupported_version_is_empty(self):
        assert parsing.disasm_string(bytes.fromhex(P2PKH_HEX), version=1) == ''

    def test_disasm_opcode(self):
        buf = []
        parsing.disasm_opcode(buf, 0x76, b'')
        parsing.disasm_opcode(buf, 0x02, b'\xaa\xbb')
        assert buf == ['DUP', 'DATA_2 0xaabb']

        with self.assertRaises(errors.ScriptError) as e:
            parsing.disasm_opcode(buf, 300, b'')
        assert e.exception.kind is errors.ErrorKind.UNKNOWN_OPCODE

        with self.assertRaises(TypeError):
            parsing.disasm_opcode('', 0x76, b'')


class TestShortForm(unittest.TestCase):
    def test_parse_short_form_pay_to_pubkey_hash(self):
        assert parsing.parse_short_form(P2PKH_ASM) == bytes.fromhex(P2PKH_HEX)

    def test_integers_use_small_int_opcodes(self):
        script = parsing.parse_short_form('0 1 -1 16 17 1000')
        assert script.hex() == '00514f60011102e803'

    def test_opcodes_with_and_without_prefix(self):
        script = parsing.parse_short_form('OP_1 OP_16 TRUE false OP_DUP dup nop2 OP_TGEN')
        assert script.hex() == '5160510076 76b1c3'.replace(' ', '')

    def test_hex_is_copied_verbatim(self):
        assert parsing.parse_short_form('0x0102 0X03').hex() == '010203'
        assert parsing.parse_short_form('DATA_2 0xaabb').hex() == '02aabb'

    def test_quoted_strings_are_pushed(self):
        assert parsing.parse_short_form("'abc'").hex() == '03616263'
        assert parsing.parse_short_form("''").hex() == '00'

    def test_syntax_errors(self):
        for text in ('BOGUS', '0xabc', '0xzz', 'OP_'):
            with self.assertRaises(errors.SyntaxError):
                parsing.parse_short_form(text)

        with self.assertRaises(TypeError):
            parsing.parse_short_form(b'DUP')

    def test_disassembly_reassembles(self):
        text = 'DUP HASH160 DATA_20 0x660d4ef3a743e3e696ad990364e555c271ad504b EQUALVERIFY 1 CHECKSIGALT'
        script = parsing.parse_short_form(text)
        assert parsing.disasm_string(script) == text

    def test_is_hex(self):
        assert parsing.is_hex('00ff')
        assert parsing.is_hex('abc')
        assert not parsing.is_hex('zz')


if __name__ == '__main__':
    unittest.main()
