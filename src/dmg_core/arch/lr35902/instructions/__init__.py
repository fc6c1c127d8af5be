"""
LR35902命令セット実装パッケージ。
"""
from typing import Callable, Tuple

from dmg_core.arch.lr35902.state import Lr35902CpuState
from dmg_core.core.snapshot import Operation
from dmg_core.transport.bus import Bus
from .base import CYCLE_TABLE, TAKEN_CYCLE_TABLE
from .maps import DECODE_MAP, EXECUTE_MAP, UNIMPLEMENTED_OPCODES

Executor = Callable[[Lr35902CpuState, Bus, Operation], None]

# @intent:responsibility オペコードから (基本サイクル数, 実行関数) を引く、純粋で全域的な検索です。
def lookup(opcode: int) -> Tuple[int, Executor]:
    opcode &= 0xFF
    return CYCLE_TABLE[opcode], EXECUTE_MAP[opcode]

# @intent:responsibility 与えられたオペコードをLR35902の命令としてデコードします。
# @intent:pre-condition `pc`はデコードするオペコードの先頭アドレスを指している必要があります。
def decode_opcode(opcode: int, bus: Bus, pc: int) -> Operation:
    """
    オペコードをデコードし、Operationオブジェクトを返します。
    未実装オペコードの場合は UnimplementedOpcodeError を送出します。
    """
    return DECODE_MAP[opcode & 0xFF](opcode & 0xFF, bus, pc)

# @intent:responsibility デコードされた命令を実行し、CPUの状態を変更します。
def execute_instruction(operation: Operation, state: Lr35902CpuState, bus: Bus) -> None:
    EXECUTE_MAP[operation.opcode](state, bus, operation)
