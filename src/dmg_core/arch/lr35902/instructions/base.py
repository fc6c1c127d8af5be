"""
LR35902命令セット実装のための共通ヘルパー関数と定数。
"""
from typing import List, Sequence, Tuple

from dmg_core.arch.lr35902.state import Lr35902CpuState
from dmg_core.core.snapshot import Operation
from dmg_core.transport.bus import Bus

# @intent:constant 各オペコードの基本サイクル数 (Tサイクル)。
# 条件分岐は「分岐しない」場合の値です。未実装/不正オペコードはフェッチ分の4です。
CYCLE_TABLE: List[int] = [
    #0   1   2   3   4   5   6   7   8   9   A   B   C   D   E   F
     4, 12,  8,  8,  4,  4,  8,  4, 20,  8,  8,  8,  4,  4,  8,  4,  # 0x
     4, 12,  8,  8,  4,  4,  8,  4, 12,  8,  8,  8,  4,  4,  8,  4,  # 1x
     8, 12,  8,  8,  4,  4,  8,  4,  8,  8,  8,  8,  4,  4,  8,  4,  # 2x
     8, 12,  8,  8, 12, 12, 12,  4,  8,  8,  8,  8,  4,  4,  8,  4,  # 3x
     4,  4,  4,  4,  4,  4,  8,  4,  4,  4,  4,  4,  4,  4,  8,  4,  # 4x
     4,  4,  4,  4,  4,  4,  8,  4,  4,  4,  4,  4,  4,  4,  8,  4,  # 5x
     4,  4,  4,  4,  4,  4,  8,  4,  4,  4,  4,  4,  4,  4,  8,  4,  # 6x
     8,  8,  8,  8,  8,  8,  4,  8,  4,  4,  4,  4,  4,  4,  8,  4,  # 7x
     4,  4,  4,  4,  4,  4,  8,  4,  4,  4,  4,  4,  4,  4,  8,  4,  # 8x
     4,  4,  4,  4,  4,  4,  8,  4,  4,  4,  4,  4,  4,  4,  8,  4,  # 9x
     4,  4,  4,  4,  4,  4,  8,  4,  4,  4,  4,  4,  4,  4,  8,  4,  # Ax
     4,  4,  4,  4,  4,  4,  8,  4,  4,  4,  4,  4,  4,  4,  8,  4,  # Bx
     8, 12, 12, 16, 12, 16,  8, 16,  8, 16, 12,  4, 12, 24,  8, 16,  # Cx
     8, 12, 12,  4, 12, 16,  8, 16,  8, 16, 12,  4, 12,  4,  8, 16,  # Dx
    12, 12,  8,  4,  4, 16,  8, 16, 16,  4, 16,  4,  4,  4,  8, 16,  # Ex
    12, 12,  8,  4,  4, 16,  8, 16, 12,  8, 16,  4,  4,  4,  8, 16,  # Fx
]

# @intent:constant 分岐成立時のサイクル数。補正はドライバの責務のため、参照用にのみ提供します。
TAKEN_CYCLE_TABLE = {
    0x20: 12, 0x28: 12, 0x30: 12, 0x38: 12,
    0xC0: 20, 0xC8: 20, 0xD0: 20, 0xD8: 20,
    0xC2: 16, 0xCA: 16, 0xD2: 16, 0xDA: 16,
    0xC4: 24, 0xCC: 24, 0xD4: 24, 0xDC: 24,
}

REGISTER_CODES = {
    0b000: "B", 0b001: "C", 0b010: "D", 0b011: "E",
    0b100: "H", 0b101: "L", 0b110: "(HL)", 0b111: "A"
}

CONDITION_CODES = {0b00: "NZ", 0b01: "Z", 0b10: "NC", 0b11: "C"}

def get_register_name(code: int) -> str:
    return REGISTER_CODES[code & 0b111]

# @intent:utility_function レジスタ名（または(HL)）に基づいて現在の値を取得します。
def get_register_value(state: Lr35902CpuState, bus: Bus, reg_name: str) -> int:
    if reg_name == "(HL)":
        return bus.read(state.hl)
    return getattr(state, reg_name.lower())

# @intent:utility_function レジスタ名（または(HL)）に値を設定します。
def set_register_value(state: Lr35902CpuState, bus: Bus, reg_name: str, value: int) -> None:
    if reg_name == "(HL)":
        bus.write(state.hl, value & 0xFF)
    else:
        setattr(state, reg_name.lower(), value & 0xFF)

# @intent:utility_function 16ビット演算・ロードで使用されるレジスタペア名を返します。
def get_rr_reg_name(code: int) -> str:
    return {0b00: "BC", 0b01: "DE", 0b10: "HL", 0b11: "SP"}[code & 0b11]

# @intent:utility_function PUSH/POP命令で使用されるレジスタペア名を返します。
def get_push_pop_reg_name(code: int) -> str:
    return {0b00: "BC", 0b01: "DE", 0b10: "HL", 0b11: "AF"}[code & 0b11]

def get_condition_name(opcode: int) -> str:
    return CONDITION_CODES[(opcode >> 3) & 0b11]

# @intent:utility_function 条件コード名に対応するフラグ述語を評価します。
def check_condition(state: Lr35902CpuState, cc: str) -> bool:
    if cc == "NZ":
        return not state.flag_z
    if cc == "Z":
        return state.flag_z
    if cc == "NC":
        return not state.flag_c
    if cc == "C":
        return state.flag_c
    raise ValueError(f"Unknown condition code: {cc}")

def read_d8(bus: Bus, pc: int) -> int:
    return bus.read((pc + 1) & 0xFFFF)

# @intent:utility_function リトルエンディアンの16ビット即値を (low, high) で読み出します。
def read_a16(bus: Bus, pc: int) -> Tuple[int, int]:
    low = bus.read((pc + 1) & 0xFFFF)
    high = bus.read((pc + 2) & 0xFFFF)
    return low, high

def word(low: int, high: int) -> int:
    return (high << 8) | low

# @intent:utility_function 命令表のサイクル数を付与したOperationを生成します。
def make_operation(opcode: int, mnemonic: str, operands: Sequence[str] = (),
                   operand_bytes: Sequence[int] = (), length: int = 1) -> Operation:
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=mnemonic,
        operands=list(operands),
        operand_bytes=list(operand_bytes),
        cycle_count=CYCLE_TABLE[opcode],
        length=length
    )

# @intent:utility_function 16ビット値をスタックに積みます（上位バイトが高いアドレス）。
# @intent:pre-condition 2つの書き込み先は、最初の書き込みの前に割り当て済みであることが確認されます。
def push_word(state: Lr35902CpuState, bus: Bus, value: int) -> None:
    high_addr = (state.sp - 1) & 0xFFFF
    low_addr = (state.sp - 2) & 0xFFFF
    bus.ensure_mapped(high_addr, low_addr)
    bus.write(high_addr, (value >> 8) & 0xFF)
    bus.write(low_addr, value & 0xFF)
    state.sp = low_addr

# @intent:utility_function スタックから16ビット値を取り出します（下位バイトから読み出し）。
def pop_word(state: Lr35902CpuState, bus: Bus) -> int:
    low = bus.read(state.sp)
    state.sp = (state.sp + 1) & 0xFFFF
    high = bus.read(state.sp)
    state.sp = (state.sp + 1) & 0xFFFF
    return word(low, high)
