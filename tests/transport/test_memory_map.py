# tests/transport/test_memory_map.py
"""
dmg_core.transport.memory_mapモジュールの単体テスト。
"""
import pytest

from dmg_core.common.errors import MappingFault
from dmg_core.transport.memory_map import DMG_REGIONS, HRAM_REGION, ROM_REGION, create_dmg_bus

# @intent:test_suite DMG固定メモリマップの領域境界と未割り当て領域を検証します。

class TestDmgMemoryMap:
    @pytest.fixture
    def bus(self):
        return create_dmg_bus()

    def test_regions_do_not_overlap(self):
        regions = sorted(DMG_REGIONS, key=lambda r: r.start)
        for prev, cur in zip(regions, regions[1:]):
            assert prev.end < cur.start

    def test_region_sizes(self):
        assert ROM_REGION.size == 0x8000
        assert HRAM_REGION.size == 0x7F

    # @intent:test_case_boundary 0x9FFF(VRAM末尾)と0xA000(外部RAM先頭)は別の記憶域であることを検証します。
    def test_vram_external_ram_boundary(self, bus):
        bus.write(0x9FFF, 0x11)
        bus.write(0xA000, 0x22)
        assert bus.read(0x9FFF) == 0x11
        assert bus.read(0xA000) == 0x22

    @pytest.mark.parametrize("address", [0x0000, 0x7FFF, 0x8000, 0xBFFF, 0xC000, 0xDFFF,
                                         0xFE00, 0xFE9F, 0xFF00, 0xFF4B, 0xFF80, 0xFFFE])
    def test_mapped_addresses(self, bus, address):
        assert bus.read(address) == 0x00
        bus.write(address, 0x5A)
        assert bus.read(address) == 0x5A

    # @intent:test_case_unmapped エコー領域などの未割り当てアドレスはMappingFaultになることを検証します。
    @pytest.mark.parametrize("address", [0xE000, 0xFDFF, 0xFEA0, 0xFEFF, 0xFF4C, 0xFF7F, 0xFFFF])
    def test_unmapped_addresses(self, bus, address):
        with pytest.raises(MappingFault):
            bus.read(address)
        with pytest.raises(MappingFault):
            bus.write(address, 0x00)

    def test_rom_region_is_writable(self, bus):
        bus.write(0x0100, 0xC3)
        assert bus.read(0x0100) == 0xC3
