"""
LR35902 データ転送命令（8/16ビットロード、スタック操作）の実装。
ロード命令はフラグに影響しません（LD HL,SP+r8 を除く）。
"""
from dmg_core.arch.lr35902.alu import add_sp_e8, to_signed8
from dmg_core.arch.lr35902.state import Lr35902CpuState
from dmg_core.core.snapshot import Operation
from dmg_core.transport.bus import Bus
from .base import (
    get_push_pop_reg_name, get_register_name, get_register_value, get_rr_reg_name,
    make_operation, pop_word, push_word, read_a16, read_d8, set_register_value, word
)

# 0x02/0x12/0x22/0x32 および 0x0A/0x1A/0x2A/0x3A の間接アドレッシング
INDIRECT_NAMES = {0b00: "(BC)", 0b01: "(DE)", 0b10: "(HL+)", 0b11: "(HL-)"}

# --- Decoding Functions ---

# @intent:responsibility LD rr,d16 形式の命令をデコードします。
def decode_ld_rr_d16(opcode: int, bus: Bus, pc: int) -> Operation:
    rr_name = get_rr_reg_name(opcode >> 4)
    low, high = read_a16(bus, pc)
    return make_operation(opcode, f"LD {rr_name},d16", [f"${word(low, high):04X}"], [low, high], length=3)

# @intent:responsibility LD (BC)/(DE)/(HL+)/(HL-),A 形式の命令をデコードします。
def decode_ld_ind_a(opcode: int, bus: Bus, pc: int) -> Operation:
    return make_operation(opcode, f"LD {INDIRECT_NAMES[opcode >> 4]},A")

# @intent:responsibility LD A,(BC)/(DE)/(HL+)/(HL-) 形式の命令をデコードします。
def decode_ld_a_ind(opcode: int, bus: Bus, pc: int) -> Operation:
    return make_operation(opcode, f"LD A,{INDIRECT_NAMES[opcode >> 4]}")

# @intent:responsibility LD r,d8 形式の命令をデコードします。
def decode_ld_r_d8(opcode: int, bus: Bus, pc: int) -> Operation:
    reg_name = get_register_name(opcode >> 3)
    n = read_d8(bus, pc)
    return make_operation(opcode, f"LD {reg_name},d8", [f"${n:02X}"], [n], length=2)

# @intent:responsibility LD r,r' 形式の命令をデコードします。
def decode_ld_r_r(opcode: int, bus: Bus, pc: int) -> Operation:
    dest = get_register_name(opcode >> 3)
    src = get_register_name(opcode)
    return make_operation(opcode, f"LD {dest},{src}")

def decode_ld_a16_sp(opcode: int, bus: Bus, pc: int) -> Operation:
    """LD (a16),SP命令をデコードします。"""
    low, high = read_a16(bus, pc)
    return make_operation(opcode, "LD (a16),SP", [f"(${word(low, high):04X})"], [low, high], length=3)

def decode_push_pop(opcode: int, bus: Bus, pc: int) -> Operation:
    """PUSH/POP命令をデコードします。"""
    reg_name = get_push_pop_reg_name(opcode >> 4)
    is_push = (opcode & 0x0F) == 0x05
    return make_operation(opcode, f"{'PUSH' if is_push else 'POP'} {reg_name}")

# @intent:responsibility LDH (a8),A / LDH A,(a8) をデコードします。アドレスは 0xFF00 + a8 です。
def decode_ldh_a8(opcode: int, bus: Bus, pc: int) -> Operation:
    n = read_d8(bus, pc)
    target = f"(${0xFF00 | n:04X})"
    mnemonic = "LDH (a8),A" if opcode == 0xE0 else "LDH A,(a8)"
    return make_operation(opcode, mnemonic, [target], [n], length=2)

# @intent:responsibility LD (C),A / LD A,(C) をデコードします。アドレスは 0xFF00 + C です。
def decode_ld_c_ind(opcode: int, bus: Bus, pc: int) -> Operation:
    mnemonic = "LD (C),A" if opcode == 0xE2 else "LD A,(C)"
    return make_operation(opcode, mnemonic)

def decode_ld_a16_a(opcode: int, bus: Bus, pc: int) -> Operation:
    """LD (a16),A / LD A,(a16) 命令をデコードします。"""
    low, high = read_a16(bus, pc)
    mnemonic = "LD (a16),A" if opcode == 0xEA else "LD A,(a16)"
    return make_operation(opcode, mnemonic, [f"(${word(low, high):04X})"], [low, high], length=3)

def decode_ld_hl_sp_r8(opcode: int, bus: Bus, pc: int) -> Operation:
    """LD HL,SP+r8 命令をデコードします。"""
    e = read_d8(bus, pc)
    return make_operation(opcode, "LD HL,SP+r8", [f"{to_signed8(e):+d}"], [e], length=2)

def decode_ld_sp_hl(opcode: int, bus: Bus, pc: int) -> Operation:
    return make_operation(opcode, "LD SP,HL")

# --- Execution Functions ---

def execute_ld_rr_d16(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    rr_name = get_rr_reg_name(operation.opcode >> 4).lower()
    low, high = operation.operand_bytes
    setattr(state, rr_name, word(low, high))

# @intent:responsibility 間接アドレスを解決し、(HL+)/(HL-)ではアクセス後にHLを増減します。
def _indirect_address(state: Lr35902CpuState, opcode: int) -> int:
    mode = opcode >> 4
    if mode == 0b00:
        return state.bc
    if mode == 0b01:
        return state.de
    return state.hl

def _step_hl(state: Lr35902CpuState, opcode: int) -> None:
    mode = opcode >> 4
    if mode == 0b10:
        state.hl = (state.hl + 1) & 0xFFFF
    elif mode == 0b11:
        state.hl = (state.hl - 1) & 0xFFFF

def execute_ld_ind_a(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    opcode = operation.opcode
    bus.write(_indirect_address(state, opcode), state.a)
    _step_hl(state, opcode)

def execute_ld_a_ind(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    opcode = operation.opcode
    state.a = bus.read(_indirect_address(state, opcode))
    _step_hl(state, opcode)

def execute_ld_r_d8(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    reg_name = get_register_name(operation.opcode >> 3)
    set_register_value(state, bus, reg_name, operation.operand_bytes[0])

def execute_ld_r_r(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    opcode = operation.opcode
    val = get_register_value(state, bus, get_register_name(opcode))
    set_register_value(state, bus, get_register_name(opcode >> 3), val)

def execute_ld_a16_sp(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    low, high = operation.operand_bytes
    address = word(low, high)
    next_address = (address + 1) & 0xFFFF
    bus.ensure_mapped(address, next_address)
    bus.write(address, state.sp & 0xFF)
    bus.write(next_address, (state.sp >> 8) & 0xFF)

def execute_push_pop(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    opcode = operation.opcode
    reg_name = get_push_pop_reg_name(opcode >> 4).lower()
    if (opcode & 0x0F) == 0x05:
        push_word(state, bus, getattr(state, reg_name))
    else:
        # POP AF では F の下位4ビットは af セッターで常に0になる
        setattr(state, reg_name, pop_word(state, bus))

def execute_ldh_a8(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    address = 0xFF00 | operation.operand_bytes[0]
    if operation.opcode == 0xE0:
        bus.write(address, state.a)
    else:
        state.a = bus.read(address)

def execute_ld_c_ind(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    address = 0xFF00 | state.c
    if operation.opcode == 0xE2:
        bus.write(address, state.a)
    else:
        state.a = bus.read(address)

def execute_ld_a16_a(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    low, high = operation.operand_bytes
    address = word(low, high)
    if operation.opcode == 0xEA:
        bus.write(address, state.a)
    else:
        state.a = bus.read(address)

def execute_ld_hl_sp_r8(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    state.hl = add_sp_e8(state, state.sp, operation.operand_bytes[0])

def execute_ld_sp_hl(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    state.sp = state.hl
