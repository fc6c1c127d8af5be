"""
DMG (8ビット携帯機) の固定メモリマップ。

0x0000-0xFFFF の空間を重複しない固定長領域に分割します。
0xE000-0xFDFF (エコー領域)、0xFEA0-0xFEFF、0xFF4C-0xFF7F、0xFFFF は未割り当てです。
"""
from typing import List, NamedTuple

from dmg_core.transport.bus import Bus, RAM

# @intent:data_structure 1つのメモリ領域の定義。
class Region(NamedTuple):
    name: str
    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start + 1

ROM_REGION = Region("ROM", 0x0000, 0x7FFF)
VRAM_REGION = Region("VRAM", 0x8000, 0x9FFF)
EXTERNAL_RAM_REGION = Region("EXTERNAL_RAM", 0xA000, 0xBFFF)
WRAM_REGION = Region("WRAM", 0xC000, 0xDFFF)
OAM_REGION = Region("OAM", 0xFE00, 0xFE9F)
IO_REGION = Region("IO", 0xFF00, 0xFF4B)
HRAM_REGION = Region("HRAM", 0xFF80, 0xFFFE)

DMG_REGIONS: List[Region] = [
    ROM_REGION,
    VRAM_REGION,
    EXTERNAL_RAM_REGION,
    WRAM_REGION,
    OAM_REGION,
    IO_REGION,
    HRAM_REGION,
]

# @intent:responsibility DMGの固定メモリマップを持つ、ゼロ初期化されたバスを生成します。
def create_dmg_bus() -> Bus:
    bus = Bus()
    for region in DMG_REGIONS:
        bus.register_device(region.start, region.end, RAM(region.size))
    return bus
