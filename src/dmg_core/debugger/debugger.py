# dmg_core/debugger/debugger.py
"""
実行制御とブレークポイント。

CPUを1命令ずつ進め、ブレークポイント、実行モードの離脱（HALT/STOP）、
ステップ上限のいずれかで停止します。直近のSnapshotは上限付きの履歴に残ります。
"""
import copy
import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, List, Optional

from dmg_core.core.cpu import AbstractCpu
from dmg_core.core.snapshot import Snapshot
from dmg_core.core.state import CpuState
from dmg_core.transport.bus import BusAccessType

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 1024

class BreakpointConditionType(Enum):
    PC_MATCH = "PC_MATCH"               # 命令の実行前、PCが value に一致
    MEMORY_READ = "MEMORY_READ"         # 命令が address を読んだ
    MEMORY_WRITE = "MEMORY_WRITE"       # 命令が address に書いた
    REGISTER_VALUE = "REGISTER_VALUE"   # 実行後、register_name が value になった
    REGISTER_CHANGE = "REGISTER_CHANGE" # 実行前後で register_name が変化した

class StopReason(Enum):
    BREAKPOINT = "BREAKPOINT"
    NOT_RUNNING = "NOT_RUNNING"   # HALT/STOPにより実行モードを離れた
    STEP_LIMIT = "STEP_LIMIT"
    STOPPED = "STOPPED"           # stop() による中断

_ACCESS_TYPES = {
    BreakpointConditionType.MEMORY_READ: BusAccessType.READ,
    BreakpointConditionType.MEMORY_WRITE: BusAccessType.WRITE,
}

# @intent:responsibility 1つの停止条件。レジスタ名は状態オブジェクトの属性名（"a", "hl", "sp" など）です。
@dataclass(frozen=True)
class BreakpointCondition:
    condition_type: BreakpointConditionType
    value: Optional[int] = None
    address: Optional[int] = None
    register_name: Optional[str] = None
    enabled: bool = True

    def matches_pc(self, pc: int) -> bool:
        return self.enabled and self.condition_type is BreakpointConditionType.PC_MATCH and self.value == pc

    # @intent:responsibility 実行済みの1命令について、PC以外の条件が成立したかを判定します。
    def matches_step(self, snapshot: Snapshot, previous: CpuState) -> bool:
        if not self.enabled:
            return False
        kind = self.condition_type
        if kind in _ACCESS_TYPES:
            wanted = _ACCESS_TYPES[kind]
            return any(a.access_type is wanted and a.address == self.address for a in snapshot.bus_activity)

        name = self.register_name
        if not name or not hasattr(snapshot.state, name):
            return False
        current = getattr(snapshot.state, name)
        if kind is BreakpointConditionType.REGISTER_VALUE:
            return current == self.value
        if kind is BreakpointConditionType.REGISTER_CHANGE:
            return current != getattr(previous, name)
        return False

class Debugger:
    """
    CPUの実行を呼び出し元のスレッドで制御します。

    PC_MATCH は該当アドレスの命令を実行する直前で停止します。その他の条件は、
    命令を実行した直後のSnapshotに対して評価されます。
    """
    def __init__(self, cpu: AbstractCpu, history_size: int = DEFAULT_HISTORY_SIZE):
        self._cpu = cpu
        self._breakpoints: List[BreakpointCondition] = []
        self._history: Deque[Snapshot] = deque(maxlen=history_size)
        self._last_snapshot: Optional[Snapshot] = None
        self._running = False

    def add_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition not in self._breakpoints:
            self._breakpoints.append(condition)

    # 同じ位置のまま条件を置き換える（有効/無効の切り替えなど）
    def update_breakpoint(self, old_condition: BreakpointCondition, new_condition: BreakpointCondition) -> None:
        for i, bp in enumerate(self._breakpoints):
            if bp == old_condition:
                self._breakpoints[i] = new_condition
                return

    def remove_breakpoint(self, condition: BreakpointCondition) -> None:
        self._breakpoints = [bp for bp in self._breakpoints if bp != condition]

    def get_breakpoints(self) -> List[BreakpointCondition]:
        return list(self._breakpoints)

    def get_history(self) -> List[Snapshot]:
        return list(self._history)

    def get_last_snapshot(self) -> Optional[Snapshot]:
        return self._last_snapshot

    def _hit_before_step(self) -> bool:
        pc = self._cpu.get_state().pc
        return any(bp.matches_pc(pc) for bp in self._breakpoints)

    def _hit_after_step(self, snapshot: Snapshot, previous: CpuState) -> bool:
        return any(bp.matches_step(snapshot, previous) for bp in self._breakpoints)

    def _step(self) -> CpuState:
        previous = copy.copy(self._cpu.get_state())
        snapshot = self._cpu.step_trace()
        self._last_snapshot = snapshot
        self._history.append(snapshot)
        return previous

    # @intent:responsibility 1命令を実行し、そのSnapshotを返します。ブレークポイントは評価しません。
    def step_instruction(self) -> Snapshot:
        self._step()
        return self._last_snapshot

    def _halt(self, reason: StopReason, message: str) -> StopReason:
        self._running = False
        logger.info("%s at PC: %#06x", message, self._cpu.get_state().pc)
        return reason

    # @intent:responsibility 停止条件が成立するまで命令を実行し、停止理由を返します。
    def run(self, max_steps: int = 1_000_000) -> StopReason:
        """
        開始位置のPC_MATCHは評価しないため、ブレークポイントで停止した位置からそのまま再開できます。
        致命的エラーはここでは捕捉せず、呼び出し元に伝播します。
        """
        self._running = True
        for count in range(max_steps):
            if not self._running:
                return StopReason.STOPPED
            if count and self._hit_before_step():
                return self._halt(StopReason.BREAKPOINT, "Breakpoint hit")

            previous = self._step()

            if not self._cpu.is_running:
                return self._halt(StopReason.NOT_RUNNING, "CPU left running mode")
            if self._hit_after_step(self._last_snapshot, previous):
                return self._halt(StopReason.BREAKPOINT, "Breakpoint hit")

        return self._halt(StopReason.STEP_LIMIT, f"Step limit of {max_steps} reached")

    def stop(self) -> None:
        self._running = False
