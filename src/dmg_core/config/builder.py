import logging
from typing import Optional, Tuple

from dmg_core.arch.lr35902.cpu import Lr35902Cpu
from dmg_core.arch.lr35902.state import RunMode
from dmg_core.transport.bus import Bus, RAM
from .models import ARCHITECTURE, CpuInitialState, SystemConfig

logger = logging.getLogger(__name__)

REGION_TYPES = {"ROM", "VRAM", "EXTERNAL_RAM", "WRAM", "OAM", "IO", "HRAM", "RAM"}

# @intent:responsibility 組み込み側のドライバ向けに、ルートロガーのハンドラとレベルを設定します。
def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or "INFO").upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

# @intent:responsibility システム構成（Config）に基づいて、Bus、Device、CPUを生成・接続し、初期状態を適用します。
class SystemBuilder:
    def build_system(self, config: SystemConfig, apply_logging: bool = False) -> Tuple[Lr35902Cpu, Bus]:
        if apply_logging and config.log_level:
            configure_logging(config.log_level)

        if config.architecture != ARCHITECTURE:
            raise ValueError(f"Unsupported architecture: {config.architecture}")

        bus = Bus()
        for region in config.memory_map:
            if region.type not in REGION_TYPES:
                logger.warning(
                    "Unknown region type '%s' for range %04X-%04X, defaulting to RAM",
                    region.type, region.start, region.end
                )
            # ROMを含む全ての領域はゼロ初期化された読み書き可能な記憶域
            bus.register_device(region.start, region.end, RAM(region.end - region.start + 1))

        cpu = Lr35902Cpu()
        cpu.connect(bus)
        self.apply_initial_state(cpu, config.initial_state)
        logger.info("Built %s system with %d memory regions", config.architecture, len(config.memory_map))
        return cpu, bus

    # @intent:responsibility CPUをリセットし、Configから指定された初期値を適用します。
    def apply_initial_state(self, cpu: Lr35902Cpu, config_state: CpuInitialState) -> None:
        cpu.reset()
        for field, value in (("pc", config_state.pc), ("sp", config_state.sp)):
            if not 0 <= value <= 0xFFFF:
                raise ValueError(f"Initial {field} {value:#x} is outside the 16-bit address space.")
        state = cpu.get_state()
        state.pc = config_state.pc
        state.sp = config_state.sp
        state.ime = config_state.ime
        state.mode = RunMode.RUNNING
        for reg_name, value in config_state.registers.items():
            if reg_name == "f":
                value &= 0xF0
            setattr(state, reg_name, value)
