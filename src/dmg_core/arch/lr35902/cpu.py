"""
LR35902 CPUエミュレーションの中心モジュール。

このモジュールはLR35902の具体的な実装を提供し、
AbstractCpuインターフェースを実装します。
"""
from typing import Dict, List, Optional

from dmg_core.arch.lr35902 import disassembler
from dmg_core.arch.lr35902.instructions import decode_opcode, execute_instruction
from dmg_core.arch.lr35902.state import Lr35902CpuState, RunMode
from dmg_core.common.types import DisassemblyLine, RegisterInfo, RegisterLayoutInfo
from dmg_core.core.cpu import AbstractCpu
from dmg_core.core.snapshot import Operation

# HALT/STOP中の1ステップで消費するサイクル数
IDLE_CYCLES = 4

# @intent:responsibility LR35902の具体的なエミュレーションロジックを提供します。
class Lr35902Cpu(AbstractCpu):
    """
    LR35902 CPUをエミュレートするクラス。
    バスは生成時に渡すか、後から connect() で1度だけ接続します。
    """
    _state: Lr35902CpuState

    def _create_initial_state(self) -> Lr35902CpuState:
        return Lr35902CpuState()

    def get_state(self) -> Lr35902CpuState:
        return self._state

    # @intent:responsibility 現在のPCからオペコードをフェッチします。PCの更新はstep内で命令長に応じて行います。
    def _fetch(self) -> int:
        return self.bus.read(self._state.pc)

    # @intent:rationale オペランドはデコード時にバスから読み取るため、PCとバスを渡します。
    def _decode(self, opcode: int) -> Operation:
        return decode_opcode(opcode, self.bus, self._state.pc)

    def _execute(self, operation: Operation) -> None:
        execute_instruction(operation, self._state, self.bus)

    # @intent:responsibility HALT/STOP中はフェッチせず、PCを維持したまま待機サイクルを報告します。
    def _handle_halt(self) -> Optional[Operation]:
        mode = self._state.mode
        if mode is RunMode.RUNNING:
            return None
        opcode_hex = "76" if mode is RunMode.HALTED else "10"
        name = "HALT" if mode is RunMode.HALTED else "STOP"
        return Operation(opcode_hex=opcode_hex, mnemonic=f"{name} (suspended)", cycle_count=IDLE_CYCLES, length=0)

    @property
    def is_running(self) -> bool:
        return self._state.mode is RunMode.RUNNING

    # @intent:responsibility 割り込み配送などの外部機構がCPUを実行状態に戻すためのフックです。
    def resume(self) -> None:
        self._state.mode = RunMode.RUNNING

    def get_register_map(self) -> Dict[str, int]:
        s = self._state
        return {
            "A": s.a, "F": s.f, "B": s.b, "C": s.c, "D": s.d, "E": s.e, "H": s.h, "L": s.l,
            "AF": s.af, "BC": s.bc, "DE": s.de, "HL": s.hl,
            "SP": s.sp, "PC": s.pc, "IME": int(s.ime)
        }

    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [
            RegisterLayoutInfo("Main Registers", [
                RegisterInfo("AF", 16), RegisterInfo("BC", 16), RegisterInfo("DE", 16), RegisterInfo("HL", 16)
            ]),
            RegisterLayoutInfo("Control", [
                RegisterInfo("SP", 16), RegisterInfo("PC", 16), RegisterInfo("IME", 1)
            ])
        ]

    def get_flag_state(self) -> Dict[str, bool]:
        s = self._state
        return {
            "Z": s.flag_z,
            "N": s.flag_n,
            "H": s.flag_h,
            "C": s.flag_c
        }

    def disassemble(self, start_addr: int, length: int) -> List[DisassemblyLine]:
        return disassembler.disassemble(self.bus, start_addr, length)
