import logging
from typing import Any, Dict

import yaml

from .models import ARCHITECTURE, CpuInitialState, MemoryRegion, SystemConfig, default_config

logger = logging.getLogger(__name__)

KNOWN_KEYS = {"architecture", "memory_map", "initial_state", "log_level"}
REGISTER_NAMES = ("a", "f", "b", "c", "d", "e", "h", "l")

# @intent:responsibility YAML形式のシステム構成を読み込み、SystemConfigに変換します。
# @intent:rationale 省略された項目は既定構成（固定メモリマップ、ブート直後のレジスタ値）で補います。
class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        return self._parse_config(data or {})

    def load_from_string(self, text: str) -> SystemConfig:
        return self._parse_config(yaml.safe_load(text) or {})

    def _parse_config(self, data: Dict[str, Any]) -> SystemConfig:
        if not isinstance(data, dict):
            raise ValueError("Configuration root must be a mapping.")
        for key in data:
            if key not in KNOWN_KEYS:
                logger.warning("Ignoring unknown configuration key '%s'", key)

        defaults = default_config()
        arch = str(data.get("architecture", ARCHITECTURE)).upper()

        memory_map = defaults.memory_map
        if "memory_map" in data:
            regions = data["memory_map"]
            if not isinstance(regions, list):
                raise ValueError("memory_map must be a list of regions.")
            memory_map = []
            for region_data in regions:
                if not isinstance(region_data, dict):
                    raise ValueError(f"Memory region must be a mapping: {region_data!r}")
                memory_map.append(MemoryRegion(
                    start=self._parse_address(region_data.get("start"), "start"),
                    end=self._parse_address(region_data.get("end"), "end"),
                    type=str(region_data.get("type", "RAM")).upper(),
                    label=region_data.get("label", "")
                ))

        initial_state_data = data.get("initial_state", {}) or {}
        if not isinstance(initial_state_data, dict):
            raise ValueError("initial_state must be a mapping.")
        registers_data = initial_state_data.get("registers", {}) or {}
        if not isinstance(registers_data, dict):
            raise ValueError("initial_state.registers must be a mapping.")
        registers = dict(defaults.initial_state.registers)
        for name, value in registers_data.items():
            name = str(name).lower()
            if name not in REGISTER_NAMES:
                raise ValueError(f"Unknown register '{name}' in initial_state.")
            parsed = self._parse_int(value)
            if not 0 <= parsed <= 0xFF:
                raise ValueError(f"Register '{name}' value {parsed:#x} is not an 8-bit value.")
            registers[name] = parsed

        # YAMLの文字列 'false' を真と解釈しないよう、真偽値リテラルのみ受け付ける
        ime = initial_state_data.get("ime", defaults.initial_state.ime)
        if not isinstance(ime, bool):
            raise ValueError(f"ime must be true or false, got {ime!r}")

        initial_state = CpuInitialState(
            pc=self._parse_address(initial_state_data.get("pc", defaults.initial_state.pc), "pc"),
            sp=self._parse_address(initial_state_data.get("sp", defaults.initial_state.sp), "sp"),
            ime=ime,
            registers=registers
        )

        return SystemConfig(
            architecture=arch,
            memory_map=memory_map,
            initial_state=initial_state,
            log_level=data.get("log_level")
        )

    def _parse_address(self, value: Any, field: str) -> int:
        parsed = self._parse_int(value)
        if not 0 <= parsed <= 0xFFFF:
            raise ValueError(f"'{field}' value {parsed:#x} is outside the 16-bit address space.")
        return parsed

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            if value.lower().startswith("0x"):
                return int(value, 16)
            return int(value)
        raise ValueError(f"Invalid integer format: {value}")
