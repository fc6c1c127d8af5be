import unittest

from dmg_core.common.errors import MappingFault
from dmg_core.transport.bus import Bus, RAM

class TestBusAbnormal(unittest.TestCase):
    def setUp(self):
        self.bus = Bus()
        self.bus.register_device(0xC000, 0xDFFF, RAM(0x2000)) # WRAM

    def test_read_unmapped(self):
        # Echo RAM (0xE000) is not mapped
        with self.assertRaises(MappingFault):
            self.bus.read(0xE000)

    def test_write_unmapped_does_not_log(self):
        with self.assertRaises(MappingFault):
            self.bus.write(0xE000, 0xFF)
        self.assertEqual(self.bus.get_and_clear_activity_log(), [])

    def test_register_device_invalid_range(self):
        # Start > End
        with self.assertRaises(ValueError):
            self.bus.register_device(0x2000, 0x1000, RAM(0x100))

        # Negative address
        with self.assertRaises(ValueError):
            self.bus.register_device(-1, 0x100, RAM(0x100))

    def test_register_device_size_mismatch(self):
        # Range size 0x100 (256), but RAM size 0x200 (512)
        with self.assertRaises(ValueError):
            self.bus.register_device(0x1000, 0x10FF, RAM(0x200))

    def test_failed_registration_leaves_map_unchanged(self):
        with self.assertRaises(ValueError):
            self.bus.register_device(0xDF00, 0xE0FF, RAM(0x200))
        self.assertEqual(len(self.bus.get_memory_map()), 1)
        self.assertFalse(self.bus.is_mapped(0xE000))

if __name__ == '__main__':
    unittest.main()
