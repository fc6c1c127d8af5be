# tests/arch/lr35902/test_instructions_load.py
"""
LR35902 データ転送命令の単体テスト。
"""
import pytest

from dmg_core.arch.lr35902.cpu import Lr35902Cpu
from dmg_core.transport.memory_map import create_dmg_bus

# @intent:test_suite 8/16ビットロード命令とスタック命令の動作を検証します。

@pytest.fixture
def setup_cpu():
    bus = create_dmg_bus()
    cpu = Lr35902Cpu(bus)
    return cpu, bus

def load_program(bus, address, program):
    for offset, byte_data in enumerate(program):
        bus.load(address + offset, byte_data)

class TestLoad8:
    def test_ld_r_d8(self, setup_cpu):
        cpu, bus = setup_cpu
        load_program(bus, 0x0000, [0x06, 0x12, 0x0E, 0x34]) # LD B,$12 ; LD C,$34
        assert cpu.step() == 8
        cpu.step()
        state = cpu.get_state()
        assert state.bc == 0x1234
        assert state.pc == 0x0004

    def test_ld_r_r_does_not_touch_flags(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.b = 0x99
        state.f = 0xA0
        load_program(bus, 0x0000, [0x78]) # LD A,B
        assert cpu.step() == 4
        assert state.a == 0x99
        assert state.f == 0xA0

    # @intent:test_case_hl_indirect (HL)を介したロードはバスを経由することを検証します。
    def test_ld_hl_indirect(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.hl = 0xC000
        load_program(bus, 0x0000, [0x36, 0x5A, 0x46]) # LD (HL),$5A ; LD B,(HL)
        assert cpu.step() == 12
        assert cpu.step() == 8
        assert bus.peek(0xC000) == 0x5A
        assert state.b == 0x5A

    @pytest.mark.parametrize("opcode, hl_after", [(0x22, 0xC001), (0x32, 0xBFFF)])
    def test_ld_hl_inc_dec_store(self, setup_cpu, opcode, hl_after):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.hl = 0xC000
        state.a = 0x77
        load_program(bus, 0x0000, [opcode])
        cpu.step()
        assert bus.peek(0xC000) == 0x77
        assert state.hl == hl_after

    def test_ld_a_hl_inc(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.hl = 0xC010
        bus.load(0xC010, 0x3C)
        load_program(bus, 0x0000, [0x2A]) # LD A,(HL+)
        cpu.step()
        assert state.a == 0x3C
        assert state.hl == 0xC011

    def test_ld_bc_de_indirect(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.bc = 0xC100
        state.de = 0xC100
        state.a = 0x5E
        load_program(bus, 0x0000, [0x02, 0x3E, 0x00, 0x1A]) # LD (BC),A ; LD A,$00 ; LD A,(DE)
        for _ in range(3):
            cpu.step()
        assert state.a == 0x5E

    # @intent:test_case_high_page LDH/LD (C) は 0xFF00 ページにアクセスすることを検証します。
    def test_ldh(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.a = 0x91
        load_program(bus, 0x0000, [0xE0, 0x40, 0xF0, 0x80]) # LDH ($FF40),A ; LDH A,($FF80)
        bus.load(0xFF80, 0x07)
        assert cpu.step() == 12
        assert bus.peek(0xFF40) == 0x91
        cpu.step()
        assert state.a == 0x07

    def test_ld_c_indirect(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.c = 0x85
        state.a = 0x66
        load_program(bus, 0x0000, [0xE2, 0xAF, 0xF2]) # LD (C),A ; XOR A ; LD A,(C)
        cpu.step()
        assert bus.peek(0xFF85) == 0x66
        cpu.step()
        cpu.step()
        assert state.a == 0x66

    def test_ld_a16_a(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.a = 0x24
        load_program(bus, 0x0000, [0xEA, 0x00, 0xD0, 0xFA, 0x01, 0xD0]) # LD ($D000),A ; LD A,($D001)
        bus.load(0xD001, 0x48)
        assert cpu.step() == 16
        assert bus.peek(0xD000) == 0x24
        cpu.step()
        assert state.a == 0x48

class TestLoad16:
    @pytest.mark.parametrize("opcode, pair", [(0x01, "bc"), (0x11, "de"), (0x21, "hl"), (0x31, "sp")])
    def test_ld_rr_d16(self, setup_cpu, opcode, pair):
        cpu, bus = setup_cpu
        load_program(bus, 0x0000, [opcode, 0x34, 0x12])
        assert cpu.step() == 12
        assert getattr(cpu.get_state(), pair) == 0x1234
        assert cpu.get_state().pc == 0x0003

    # @intent:test_case_ld_a16_sp SPがリトルエンディアンで2バイト書き込まれることを検証します。
    def test_ld_a16_sp(self, setup_cpu):
        cpu, bus = setup_cpu
        cpu.get_state().sp = 0xFFF8
        load_program(bus, 0x0000, [0x08, 0x00, 0xC0])
        assert cpu.step() == 20
        assert bus.peek(0xC000) == 0xF8
        assert bus.peek(0xC001) == 0xFF

    def test_ld_sp_hl(self, setup_cpu):
        cpu, bus = setup_cpu
        cpu.get_state().hl = 0xD000
        load_program(bus, 0x0000, [0xF9])
        assert cpu.step() == 8
        assert cpu.get_state().sp == 0xD000

    def test_ld_hl_sp_r8(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.sp = 0xFFF8
        load_program(bus, 0x0000, [0xF8, 0x02]) # LD HL,SP+2
        assert cpu.step() == 12
        assert state.hl == 0xFFFA
        assert state.sp == 0xFFF8
        assert not state.flag_z and not state.flag_n

class TestStack:
    # @intent:test_case_push 上位バイトがSP-1、下位バイトがSP-2に書き込まれることを検証します。
    def test_push_layout(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.sp = 0xD000
        state.bc = 0x1234
        load_program(bus, 0x0000, [0xC5]) # PUSH BC
        assert cpu.step() == 16
        assert state.sp == 0xCFFE
        assert bus.peek(0xCFFF) == 0x12
        assert bus.peek(0xCFFE) == 0x34

    # @intent:test_case_push_pop_transfer PUSHしたペアを別のペアにPOPすると値が転送されることを検証します。
    def test_push_pop_transfers_pair(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.sp = 0xD000
        state.de = 0xBEEF
        load_program(bus, 0x0000, [0xD5, 0xE1]) # PUSH DE ; POP HL
        cpu.step()
        assert cpu.step() == 12
        assert state.hl == 0xBEEF
        assert state.sp == 0xD000

    # @intent:test_case_push_pop 同じペアへのPUSH→POPは、PC以外のレジスタ・フラグ・SP・IME・実行モードを変えないことを検証します。
    @pytest.mark.parametrize("push, pop", [
        (0xC5, 0xC1), # BC
        (0xD5, 0xD1), # DE
        (0xE5, 0xE1), # HL
        (0xF5, 0xF1), # AF
    ])
    def test_push_pop_same_pair(self, setup_cpu, push, pop):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.sp = 0xD000
        state.af = 0x9A50
        state.bc = 0x1234
        state.de = 0x5678
        state.hl = 0xBEEF
        before = dict(vars(state))
        load_program(bus, 0x0000, [push, pop])
        assert cpu.step() == 16
        assert cpu.step() == 12

        after = dict(vars(state))
        assert after.pop("pc") == 0x0002
        before.pop("pc")
        assert after == before

    # @intent:test_case_pop_af POP AFではFの下位4ビットが0になることを検証します。
    def test_pop_af_masks_flags(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.sp = 0xCFFE
        bus.load(0xCFFE, 0xFF) # F
        bus.load(0xCFFF, 0x12) # A
        load_program(bus, 0x0000, [0xF1]) # POP AF
        cpu.step()
        assert state.a == 0x12
        assert state.f == 0xF0
