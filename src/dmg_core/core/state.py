# dmg_core/core/state.py
"""
アーキテクチャに依存しないレジスタ状態。
"""
from dataclasses import dataclass

# @intent:responsibility 全てのCPUが持つ2つのアドレスレジスタ。汎用レジスタは派生クラスで追加します。
@dataclass
class CpuState:
    pc: int = 0x0000
    sp: int = 0x0000
