# dmg_core/core/cpu.py
"""
Core Layer (命令サイクル)

バスとの接続、レジスタ状態の保持、フェッチ→デコード→PC更新→実行の順序を定めます。
個々の命令の意味はアーキテクチャ側の命令表が担います。
"""
import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import fields
from typing import Dict, List, Optional

from dmg_core.common.errors import BusAlreadyConnectedError, BusNotConnectedError, EmulationError
from dmg_core.common.types import DisassemblyLine, RegisterLayoutInfo
from dmg_core.core.snapshot import Metadata, Operation, Snapshot
from dmg_core.core.state import CpuState
from dmg_core.transport.bus import Bus

logger = logging.getLogger(__name__)

# @intent:responsibility 抽象CPUの基本機能とインターフェースを定義します。
class AbstractCpu(ABC):
    """
    命令インタプリタの基底クラス。
    Busとの接続、基本的な状態管理、命令サイクルの抽象化を提供します。
    """
    # @intent:responsibility CPUの状態を初期化します。バスは後から connect() で接続できます。
    def __init__(self, bus: Optional[Bus] = None):
        self._bus: Optional[Bus] = None
        self._state: CpuState = self._create_initial_state()
        self._cycle_count: int = 0
        if bus is not None:
            self.connect(bus)

    # @intent:responsibility CPUを1つのバスに接続します。接続は生存期間中に1度だけです。
    def connect(self, bus: Bus) -> None:
        if self._bus is not None and self._bus is not bus:
            raise BusAlreadyConnectedError()
        self._bus = bus

    @property
    def is_connected(self) -> bool:
        return self._bus is not None

    # @intent:responsibility 接続済みのバスを返します。
    # @intent:post-condition 未接続の場合は BusNotConnectedError を送出します。
    @property
    def bus(self) -> Bus:
        if self._bus is None:
            raise BusNotConnectedError()
        return self._bus

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    # @intent:responsibility CPUが命令を実行するモードにあるかを返します。停止状態を持つアーキテクチャはオーバーライドします。
    @property
    def is_running(self) -> bool:
        return True

    # @intent:rationale 各CPUアーキテクチャで初期状態が異なるため、抽象メソッドとして定義します。
    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        pass

    # @intent:responsibility レジスタを初期値に戻し、累計サイクル数を0にします。バス接続は維持されます。
    def reset(self) -> None:
        self._state = self._create_initial_state()
        self._cycle_count = 0

    def get_state(self) -> CpuState:
        """
        実行中のレジスタ状態そのもの（コピーではない）を返します。
        """
        return self._state

    # @intent:responsibility 保存された状態の値を現在の状態オブジェクトへ書き戻します。
    # @intent:rationale get_state() で取得済みの参照が古くならないよう、オブジェクトは差し替えずに値だけ復元します。
    def restore_state(self, state: CpuState) -> None:
        for f in fields(state):
            setattr(self._state, f.name, getattr(state, f.name))

    # @intent:responsibility 現在のPCからオペコードを読み出します。PCの更新は行いません。
    @abstractmethod
    def _fetch(self) -> int:
        pass

    # @intent:responsibility フェッチしたオペコードを解析し、Operationオブジェクトに変換します。
    @abstractmethod
    def _decode(self, opcode: int) -> Operation:
        pass

    # @intent:responsibility デコードされた命令を実行し、CPUの状態を更新します。
    @abstractmethod
    def _execute(self, operation: Operation) -> None:
        pass

    # @intent:responsibility CPUを1命令進め、命令表の基本サイクル数を返します。
    def step(self) -> int:
        return self.step_trace().operation.cycle_count

    # @intent:responsibility CPUを1命令進め、その結果のスナップショットを返します。
    # @intent:rationale Template Methodパターン（ログクリア→停止判定→フェッチ→デコード→PC更新→実行→Snapshot生成）。
    def step_trace(self) -> Snapshot:
        """
        1命令を完了まで実行し、実行直後の状態を含むSnapshotを返します。
        致命的エラーが発生した場合、レジスタはこのステップ開始前の値に戻されてから例外が再送出されます。
        """
        bus = self.bus
        bus.get_and_clear_activity_log()
        initial_pc = self._state.pc

        idle_operation = self._handle_halt()
        if idle_operation is not None:
            return self._create_snapshot(initial_pc, idle_operation)

        saved_state = copy.copy(self._state)
        try:
            opcode = self._fetch()
            operation = self._decode(opcode)
            self._update_pc(operation)
            self._execute(operation)
        except EmulationError as e:
            self.restore_state(saved_state)
            bus.get_and_clear_activity_log()
            logger.error("Fatal error at PC=%#06x: %s", initial_pc, e)
            raise

        snapshot = self._create_snapshot(initial_pc, operation)
        logger.debug("PC=%#06x %s", initial_pc, snapshot.metadata.symbol_info)
        return snapshot

    # @intent:responsibility 停止状態の場合に実行する代替Operationを返します。
    # @intent:return 停止中であればそのOperation、そうでなければNone。
    def _handle_halt(self) -> Optional[Operation]:
        return None

    # @intent:responsibility 命令実行前にPCを命令長分進めます。
    def _update_pc(self, operation: Operation) -> None:
        self._state.pc = (self._state.pc + operation.length) & 0xFFFF

    def _create_snapshot(self, initial_pc: int, operation: Operation) -> Snapshot:
        bus_activity = self.bus.get_and_clear_activity_log()
        self._cycle_count += operation.cycle_count
        return Snapshot(
            state=copy.copy(self._state),
            operation=operation,
            metadata=Metadata(cycle_count=self._cycle_count, symbol_info=operation.render()),
            bus_activity=bus_activity
        )

    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        """
        レジスタ名から現在値への辞書を返す。
        フロントエンドがCPUの内部構造を知らなくても値を表示できるようにするために使用される。
        """
        pass

    @abstractmethod
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        pass

    @abstractmethod
    def get_flag_state(self) -> Dict[str, bool]:
        pass

    @abstractmethod
    def disassemble(self, start_addr: int, length: int) -> List[DisassemblyLine]:
        """
        [start_addr, start_addr + length) を (アドレス, 16進ダンプ, ニーモニック) の行に変換する。
        """
        pass
