from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dmg_core.arch.lr35902.state import Lr35902CpuState
from dmg_core.transport.memory_map import DMG_REGIONS

ARCHITECTURE = "LR35902"

@dataclass
class MemoryRegion:
    start: int
    end: int
    type: str  # "ROM", "VRAM", "EXTERNAL_RAM", "WRAM", "OAM", "IO", "HRAM", "RAM"
    label: str = ""

@dataclass
class CpuInitialState:
    pc: int = 0x0000
    sp: int = 0xFFFE
    ime: bool = False
    registers: Dict[str, int] = field(default_factory=dict)

@dataclass
class SystemConfig:
    architecture: str = ARCHITECTURE
    memory_map: List[MemoryRegion] = field(default_factory=list)
    initial_state: CpuInitialState = field(default_factory=CpuInitialState)
    log_level: Optional[str] = None

# @intent:responsibility 固定メモリマップとブート直後のレジスタ値からなる既定構成を返します。
def default_config() -> SystemConfig:
    boot = Lr35902CpuState()
    return SystemConfig(
        architecture=ARCHITECTURE,
        memory_map=[MemoryRegion(r.start, r.end, r.name, r.name) for r in DMG_REGIONS],
        initial_state=CpuInitialState(
            pc=boot.pc,
            sp=boot.sp,
            ime=boot.ime,
            registers={"a": boot.a, "f": boot.f, "b": boot.b, "c": boot.c,
                       "d": boot.d, "e": boot.e, "h": boot.h, "l": boot.l}
        )
    )
