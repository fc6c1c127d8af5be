# dmg_core/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1命令の実行結果（デコード内容、実行後のレジスタ、バスアクセス）を
記録した不変のデータ構造を定義します。
"""
from dataclasses import dataclass, field
from typing import List, Optional

from dmg_core.core.state import CpuState
from dmg_core.transport.bus import BusAccess


# @intent:responsibility デコードされた命令の詳細を記録します。
@dataclass(frozen=True)
class Operation:
    """
    デコードされた命令の詳細（HEX、ニーモニック、オペランド、基本サイクル数、バイト長）。
    """
    opcode_hex: str # 例: "C3"
    mnemonic: str # 例: "JP a16"
    operands: List[str] = field(default_factory=list) # 例: ["$0150"]
    operand_bytes: List[int] = field(default_factory=list) # 生のオペランドバイト
    cycle_count: int = 0 # 命令表に記載された基本クロックサイクル数
    length: int = 1 # 命令のバイト長

    @property
    def opcode(self) -> int:
        return int(self.opcode_hex, 16)

    def render(self) -> str:
        text = self.mnemonic
        if self.operands:
            text += " " + ", ".join(self.operands)
        return text

# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True)
class Metadata:
    cycle_count: int # 累計サイクル数
    symbol_info: Optional[str] = None # 例: "LD A,d8 $05"

# @intent:responsibility ある一時点におけるCPUとバスの状態を不変に記録します。
@dataclass(frozen=True)
class Snapshot:
    """
    1命令実行直後の状態を記録した不変のデータ構造。
    stateは実行直後のレジスタのコピーであり、以降の実行で変化しません。
    """
    state: CpuState
    operation: Operation
    metadata: Metadata
    bus_activity: List[BusAccess] = field(default_factory=list)
