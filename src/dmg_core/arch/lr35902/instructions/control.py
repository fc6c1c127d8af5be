"""
LR35902 制御命令（分岐、コール/リターン、リスタート、割り込み許可、CPU停止）の実装。

実行関数が呼ばれる時点で、PCは既に命令長分進められています（Lr35902Cpu.step）。
"""
from dmg_core.arch.lr35902.alu import to_signed8
from dmg_core.arch.lr35902.state import Lr35902CpuState, RunMode
from dmg_core.common.errors import UnimplementedOpcodeError
from dmg_core.core.snapshot import Operation
from dmg_core.transport.bus import Bus
from .base import (
    check_condition, get_condition_name, make_operation, pop_word, push_word, read_a16, read_d8, word
)

# --- Decoding Functions ---

def decode_00(opcode: int, bus: Bus, pc: int) -> Operation:
    """NOP命令をデコードします。"""
    return make_operation(opcode, "NOP")

# @intent:responsibility オペコード0x10 (STOP) をデコードします。2バイト目(通常0x00)は読み飛ばします。
def decode_10(opcode: int, bus: Bus, pc: int) -> Operation:
    n = read_d8(bus, pc)
    return make_operation(opcode, "STOP", [], [n], length=2)

def decode_76(opcode: int, bus: Bus, pc: int) -> Operation:
    """HALT命令をデコードします。"""
    return make_operation(opcode, "HALT")

def decode_f3(opcode: int, bus: Bus, pc: int) -> Operation:
    return make_operation(opcode, "DI")

def decode_fb(opcode: int, bus: Bus, pc: int) -> Operation:
    return make_operation(opcode, "EI")

# @intent:responsibility JR r8 / JR cc,r8 をデコードします。表示上のオペランドは分岐先アドレスです。
def decode_jr(opcode: int, bus: Bus, pc: int) -> Operation:
    offset = read_d8(bus, pc)
    target = (pc + 2 + to_signed8(offset)) & 0xFFFF
    mnemonic = "JR r8" if opcode == 0x18 else f"JR {get_condition_name(opcode)},r8"
    return make_operation(opcode, mnemonic, [f"${target:04X}"], [offset], length=2)

# @intent:responsibility JP a16 / JP cc,a16 をデコードします。
def decode_jp(opcode: int, bus: Bus, pc: int) -> Operation:
    low, high = read_a16(bus, pc)
    mnemonic = "JP a16" if opcode == 0xC3 else f"JP {get_condition_name(opcode)},a16"
    return make_operation(opcode, mnemonic, [f"${word(low, high):04X}"], [low, high], length=3)

def decode_e9(opcode: int, bus: Bus, pc: int) -> Operation:
    """JP (HL)命令をデコードします。"""
    return make_operation(opcode, "JP (HL)")

# @intent:responsibility CALL a16 / CALL cc,a16 をデコードします。
def decode_call(opcode: int, bus: Bus, pc: int) -> Operation:
    low, high = read_a16(bus, pc)
    mnemonic = "CALL a16" if opcode == 0xCD else f"CALL {get_condition_name(opcode)},a16"
    return make_operation(opcode, mnemonic, [f"${word(low, high):04X}"], [low, high], length=3)

# @intent:responsibility RET / RET cc / RETI をデコードします。
def decode_ret(opcode: int, bus: Bus, pc: int) -> Operation:
    if opcode == 0xC9:
        mnemonic = "RET"
    elif opcode == 0xD9:
        mnemonic = "RETI"
    else:
        mnemonic = f"RET {get_condition_name(opcode)}"
    return make_operation(opcode, mnemonic)

# @intent:responsibility RST n をデコードします。ベクタはオペコードのbit5-3から求めます。
def decode_rst(opcode: int, bus: Bus, pc: int) -> Operation:
    return make_operation(opcode, f"RST {opcode & 0x38:02X}H")

# @intent:responsibility 未実装オペコード（CBプレフィックスおよび不正オペコード）を報告します。
# @intent:rationale NOPとして読み飛ばさず、PCを進める前に致命的エラーとして扱います。
def decode_unimplemented(opcode: int, bus: Bus, pc: int) -> Operation:
    raise UnimplementedOpcodeError(opcode, pc)

# --- Execution Functions ---

def execute_00(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    # Intentional: NOP (No Operation)
    pass

def execute_10(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    state.mode = RunMode.STOPPED

# @intent:responsibility CPUをHALT状態にします。復帰は割り込み配送（コア外部）の責務です。
def execute_76(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    state.mode = RunMode.HALTED

def execute_f3(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    """DI命令を実行します。"""
    state.ime = False

def execute_fb(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    """EI命令を実行します。"""
    state.ime = True

def execute_jr(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    opcode = operation.opcode
    if opcode == 0x18 or check_condition(state, get_condition_name(opcode)):
        state.pc = (state.pc + to_signed8(operation.operand_bytes[0])) & 0xFFFF

def execute_jp(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    opcode = operation.opcode
    if opcode == 0xC3 or check_condition(state, get_condition_name(opcode)):
        low, high = operation.operand_bytes
        state.pc = word(low, high)

def execute_e9(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    state.pc = state.hl

# @intent:responsibility 戻りアドレス（次の命令のアドレス）を積んでから分岐します。
def execute_call(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    opcode = operation.opcode
    if opcode == 0xCD or check_condition(state, get_condition_name(opcode)):
        push_word(state, bus, state.pc)
        low, high = operation.operand_bytes
        state.pc = word(low, high)

def execute_ret(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    opcode = operation.opcode
    if opcode in (0xC9, 0xD9) or check_condition(state, get_condition_name(opcode)):
        state.pc = pop_word(state, bus)
        if opcode == 0xD9:
            state.ime = True

def execute_rst(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    push_word(state, bus, state.pc)
    state.pc = operation.opcode & 0x38

def execute_unimplemented(state: Lr35902CpuState, bus: Bus, operation: Operation) -> None:
    pc = (state.pc - operation.length) & 0xFFFF
    raise UnimplementedOpcodeError(operation.opcode, pc)
