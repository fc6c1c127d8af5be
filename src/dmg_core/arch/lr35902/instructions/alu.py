"""
LR35902 算術論理演算 (ALU) 命令の実装。
"""
from dmg_core.arch.lr35902 import alu
from dmg_core.arch.lr35902.alu import to_signed8
from dmg_core.arch.lr35902.state import Lr35902CpuState
from dmg_core.core.snapshot import Operation
from dmg_core.transport.bus import Bus
from .base import (
    get_register_name, get_register_value, get_rr_reg_name, make_operation, read_d8,
    set_register_value
)

# 0x80-0xBF / 0xC6-0xFE のbit5-3で選択される演算
ALU_OPS = ["ADD", "ADC", "SUB", "SBC", "AND", "XOR", "OR", "CP"]

ROTATE_A_OPS = {0x07: "RLCA", 0x0F: "RRCA", 0x17: "RLA", 0x1F: "RRA"}

def _alu_mnemonic(op_name: str, src: str) -> str:
    return f"{op_name} A,{src}"

# --- Decoding Functions ---

# @intent:responsibility ADD/ADC/SUB/SBC/AND/XOR/OR/CP A,r 形式の命令をデコードします。
def decode_alu_r(opcode: int, bus: Bus, pc: int) -> Operation:
    op_name = ALU_OPS[(opcode >> 3) & 0b111]
    return make_operation(opcode, _alu_mnemonic(op_name, get_register_name(opcode)))

# @intent:responsibility ADD/ADC/SUB/SBC/AND/XOR/OR/CP A,d8 形式の命令をデコードします。
def decode_alu_d8(opcode: int, bus: Bus, pc: int) -> Operation:
    op_name = ALU_OPS[(opcode >> 3) & 0b111]
    n = read_d8(bus, pc)
    return make_operation(opcode, _alu_mnemonic(op_name, "d8"), [f"${n:02X}"], [n], length=2)

# @intent:responsibility INC r / DEC r 形式の命令をデコードします。
def decode_inc_dec8(opcode: int, bus: Bus, pc: int) -> Operation:
    reg_name = get_register_name(opcode >> 3)
    is_inc = (opcode & 0b111) == 0b100
    return make_operation(opcode, f"{'INC' if is_inc else 'DEC'} {reg_name}")

# @intent:responsibility INC rr / DEC rr 形式の命令をデコードします。
def decode_inc_dec16(opcode: int, bus: Bus, pc: int) -> Operation:
    rr_name = get_rr_reg_name(opcode >> 4)
    is_inc = (opcode & 0x0F) == 0x03
    return make_operation(opcode, f"{'INC' if is_inc else 'DEC'} {rr_name}")

# @intent:responsibility ADD HL,rr 形式の命令をデコードします。
def decode_add_hl_rr(opcode: int, bus: Bus, pc: int) -> Operation:
    return make_operation(opcode, f"ADD HL,{get_rr_reg_name(opcode >> 4)}")

def decode_add_sp_r8(opcode: int, bus: Bus, pc: int) -> Operation:
    """ADD SP,r8 命令をデコードします。"""
    e = read_d8(bus, pc)
    return make_operation(opcode, "ADD SP,r8", [f"{to_signed8(e):+d}"], [e], length=2)

def decode_rotate_a(opcode: int, bus: Bus, pc: int) -> Operation:
    return make_operation(opcode, ROTATE_A_OPS[opcode])

def decode_27(opcode: int, bus: Bus, pc: int) -> Operation:
    return make_operation(opcode, "DAA")

def decode_2f(opcode: int, bus: Bus, pc: int) -> Operation:
    return make_operation(opcode, "CPL")

def decode_37(opcode: int, bus: Bus, pc: int) -> Operation:
    return make_operation(opcode, "SCF")

def decode_3f(opcode: int, bus: Bus, pc: int) -> Operation:
    return make_operation(opcode, "CCF")

# --- Execution Functions ---

def execute_alu_r(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    opcode = operation.opcode
    val = get_register_value(state, bus, get_register_name(opcode))
    result, store = alu.alu8(state, ALU_OPS[(opcode >> 3) & 0b111], state.a, val)
    if store:
        state.a = result

def execute_alu_d8(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    n = operation.operand_bytes[0]
    result, store = alu.alu8(state, ALU_OPS[(operation.opcode >> 3) & 0b111], state.a, n)
    if store:
        state.a = result

def execute_inc_dec8(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    opcode = operation.opcode
    reg_name = get_register_name(opcode >> 3)
    val = get_register_value(state, bus, reg_name)
    if (opcode & 0b111) == 0b100:
        result = alu.inc8(state, val)
    else:
        result = alu.dec8(state, val)
    set_register_value(state, bus, reg_name, result)

# @intent:responsibility 16ビットのINC/DEC。フラグは変化しません。
def execute_inc_dec16(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    opcode = operation.opcode
    rr_name = get_rr_reg_name(opcode >> 4).lower()
    delta = 1 if (opcode & 0x0F) == 0x03 else -1
    setattr(state, rr_name, (getattr(state, rr_name) + delta) & 0xFFFF)

def execute_add_hl_rr(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    rr_name = get_rr_reg_name(operation.opcode >> 4).lower()
    state.hl = alu.add16(state, state.hl, getattr(state, rr_name))

def execute_add_sp_r8(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    state.sp = alu.add_sp_e8(state, state.sp, operation.operand_bytes[0])

def execute_rotate_a(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    state.a = alu.rotate_a(state, state.a, ROTATE_A_OPS[operation.opcode])

def execute_27(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    """DAA命令を実行します。"""
    state.a = alu.daa(state, state.a)

def execute_2f(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    """CPL命令を実行します。Z/Cは変化しません。"""
    state.a = state.a ^ 0xFF
    state.flag_n = True
    state.flag_h = True

def execute_37(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    """SCF命令を実行します。"""
    state.flag_n = False
    state.flag_h = False
    state.flag_c = True

def execute_3f(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    """CCF命令を実行します。"""
    state.flag_n = False
    state.flag_h = False
    state.flag_c = not state.flag_c
