# tests/arch/lr35902/test_lr35902_alu.py
"""
dmg_core.arch.lr35902.aluモジュールの単体テスト。
"""
import pytest

from dmg_core.arch.lr35902 import alu
from dmg_core.arch.lr35902.state import Lr35902CpuState

# @intent:test_suite 8/16ビット演算のフラグ計算規則を検証します。

def flags(state):
    return (state.flag_z, state.flag_n, state.flag_h, state.flag_c)

@pytest.fixture
def state():
    return Lr35902CpuState(f=0x00)

class TestAdd8:
    # @intent:test_case_add (a, b, carry_in) -> (結果, Z, N, H, C)
    @pytest.mark.parametrize("a, b, cin, expected, z, h, c", [
        (0x01, 0x02, 0, 0x03, False, False, False),
        (0x0F, 0x01, 0, 0x10, False, True, False),
        (0xF0, 0x10, 0, 0x00, True, False, True),
        (0xFF, 0x01, 0, 0x00, True, True, True),
        (0x0E, 0x01, 1, 0x10, False, True, False),
        (0xFF, 0x00, 1, 0x00, True, True, True),
    ])
    def test_add8(self, state, a, b, cin, expected, z, h, c):
        assert alu.add8(state, a, b, cin) == expected
        assert flags(state) == (z, False, h, c)

class TestSub8:
    @pytest.mark.parametrize("a, b, bin_, expected, z, h, c", [
        (0x05, 0x03, 0, 0x02, False, False, False),
        (0x10, 0x01, 0, 0x0F, False, True, False),
        (0x00, 0x01, 0, 0xFF, False, True, True),
        (0x42, 0x42, 0, 0x00, True, False, False),
        (0x10, 0x0F, 1, 0x00, True, True, False),
        (0x00, 0x00, 1, 0xFF, False, True, True),
    ])
    def test_sub8(self, state, a, b, bin_, expected, z, h, c):
        assert alu.sub8(state, a, b, bin_) == expected
        assert flags(state) == (z, True, h, c)

class TestAlu8:
    def test_and_sets_half_carry(self, state):
        assert alu.alu8(state, "AND", 0xF0, 0x0F) == (0x00, True)
        assert flags(state) == (True, False, True, False)

    @pytest.mark.parametrize("op, expected", [("XOR", 0xFF), ("OR", 0xFF)])
    def test_or_xor_clear_flags(self, op, expected):
        state = Lr35902CpuState(f=0xF0)
        assert alu.alu8(state, op, 0xF0, 0x0F) == (expected, True)
        assert flags(state) == (False, False, False, False)

    # @intent:test_case_cp CPはフラグのみ更新しAを変更しないことを検証します。
    def test_cp_does_not_store(self, state):
        result, store = alu.alu8(state, "CP", 0x42, 0x42)
        assert store is False
        assert result == 0x42
        assert flags(state) == (True, True, False, False)

    def test_adc_uses_carry_flag(self, state):
        state.flag_c = True
        assert alu.alu8(state, "ADC", 0x01, 0x01) == (0x03, True)

    def test_sbc_uses_carry_flag(self, state):
        state.flag_c = True
        assert alu.alu8(state, "SBC", 0x03, 0x01) == (0x01, True)

    def test_unknown_operation(self, state):
        with pytest.raises(ValueError):
            alu.alu8(state, "NAND", 0, 0)

class TestIncDec:
    # @intent:test_case_inc INC r はCフラグを保持することを検証します。
    def test_inc8_preserves_carry(self, state):
        state.flag_c = True
        assert alu.inc8(state, 0xFF) == 0x00
        assert flags(state) == (True, False, True, True)

    def test_inc8_half_carry(self, state):
        assert alu.inc8(state, 0x0F) == 0x10
        assert flags(state) == (False, False, True, False)

    def test_dec8(self, state):
        assert alu.dec8(state, 0x01) == 0x00
        assert flags(state) == (True, True, False, False)
        assert alu.dec8(state, 0x00) == 0xFF
        assert flags(state) == (False, True, True, False)

class TestAdd16:
    # @intent:test_case_add16 ADD HL,rr はZを保持し、bit11からのキャリーでHを立てることを検証します。
    def test_add16_preserves_zero(self, state):
        state.flag_z = True
        assert alu.add16(state, 0x0FFF, 0x0001) == 0x1000
        assert flags(state) == (True, False, True, False)

    def test_add16_carry(self, state):
        assert alu.add16(state, 0xFFFF, 0x0001) == 0x0000
        assert flags(state) == (False, False, True, True)

class TestAddSpE8:
    @pytest.mark.parametrize("sp, e, expected, h, c", [
        (0xFFF8, 0x08, 0x0000, True, True),
        (0x0000, 0xFF, 0xFFFF, False, False),
        (0x00FF, 0x01, 0x0100, True, True),
        (0x1000, 0x80, 0x0F80, False, False),
    ])
    def test_add_sp_e8(self, state, sp, e, expected, h, c):
        state.flag_z = True
        state.flag_n = True
        assert alu.add_sp_e8(state, sp, e) == expected
        assert flags(state) == (False, False, h, c)

class TestDaa:
    # @intent:test_case_daa BCD加算・減算の補正を検証します。
    def test_daa_after_add(self, state):
        a = alu.add8(state, 0x15, 0x27) # 0x3C
        assert alu.daa(state, a) == 0x42
        assert not state.flag_c

    def test_daa_after_add_with_carry(self, state):
        a = alu.add8(state, 0x99, 0x01) # 0x9A
        assert alu.daa(state, a) == 0x00
        assert state.flag_z and state.flag_c

    def test_daa_after_sub(self, state):
        a = alu.sub8(state, 0x42, 0x15) # 0x2D, H=1
        assert alu.daa(state, a) == 0x27
        assert state.flag_n
        assert not state.flag_h

class TestRotateA:
    @pytest.mark.parametrize("kind, a, cin, expected, cout", [
        ("RLCA", 0x85, False, 0x0B, True),
        ("RRCA", 0x01, False, 0x80, True),
        ("RLA", 0x80, False, 0x00, True),
        ("RLA", 0x00, True, 0x01, False),
        ("RRA", 0x01, False, 0x00, True),
        ("RRA", 0x00, True, 0x80, False),
    ])
    def test_rotate_a(self, state, kind, a, cin, expected, cout):
        state.flag_c = cin
        state.flag_z = True
        assert alu.rotate_a(state, a, kind) == expected
        # 結果が0でもZはクリアされる
        assert flags(state) == (False, False, False, cout)

    def test_unknown_kind(self, state):
        with pytest.raises(ValueError):
            alu.rotate_a(state, 0, "RLC")

def test_to_signed8():
    assert alu.to_signed8(0x7F) == 127
    assert alu.to_signed8(0x80) == -128
    assert alu.to_signed8(0xFE) == -2

class TestFlagLaws:
    # @intent:test_case_round_trip 全ての8ビット値でINC→DECが値を戻し、Nは最後の演算を反映することを検証します。
    def test_inc_dec_round_trip(self, state):
        for x in range(256):
            assert alu.dec8(state, alu.inc8(state, x)) == x
            assert state.flag_n
            assert alu.inc8(state, alu.dec8(state, x)) == x
            assert not state.flag_n

    # @intent:test_case_add_law 全ての (a, b) でADD/SUBのH/Cが拡張中間値の規則に従うことを検証します。
    def test_add_sub_carry_laws(self, state):
        for a in range(256):
            for b in range(256):
                alu.add8(state, a, b)
                assert state.flag_c == (a + b > 0xFF)
                assert state.flag_h == ((a & 0x0F) + (b & 0x0F) > 0x0F)
                alu.sub8(state, a, b)
                assert state.flag_c == (a < b)
                assert state.flag_h == ((a & 0x0F) < (b & 0x0F))
