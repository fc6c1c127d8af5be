# dmg_core/transport/bus.py
"""
Transport Layer (アドレスバス)

16ビットのアドレス空間を、重複しない固定長の記憶域（Device）の集合として表現します。
CPUからの読み書きは該当する記憶域のオフセットに変換され、トレース用に記録されます。
"""
import bisect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from dmg_core.common.errors import MappingFault

logger = logging.getLogger(__name__)

ADDRESS_SPACE_END = 0xFFFF

class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"

# @intent:responsibility 1回のバスアクセス（アドレス、値、方向）を不変に記録します。
@dataclass(frozen=True)
class BusAccess:
    address: int
    data: int
    access_type: BusAccessType

    def __str__(self) -> str:
        direction = "R" if self.access_type is BusAccessType.READ else "W"
        return f"{direction} ${self.address:04X}=${self.data:02X}"

# @intent:responsibility バスに割り当てられる記憶域のインターフェースです。
class Device(ABC):
    """
    アドレスは領域先頭からのオフセットで渡されます。
    """
    @abstractmethod
    def read(self, address: int) -> int:
        pass

    @abstractmethod
    def write(self, address: int, data: int) -> None:
        pass

# @intent:responsibility ゼロ初期化された固定長の記憶域。ROMを含むDMGの全領域をこれで表します。
class RAM(Device):
    def __init__(self, size: int):
        if not isinstance(size, int) or size <= 0:
            raise ValueError("RAM size must be a positive integer.")
        self._memory = bytearray(size)

    @property
    def size(self) -> int:
        return len(self._memory)

    def _check_offset(self, offset: int) -> None:
        if not 0 <= offset < len(self._memory):
            raise IndexError(f"Address {offset} out of bounds for RAM of size {len(self._memory)}.")

    def read(self, address: int) -> int:
        self._check_offset(address)
        return self._memory[address]

    def write(self, address: int, data: int) -> None:
        self._check_offset(address)
        if not 0 <= data <= 0xFF:
            raise ValueError(f"Data {data} is not an 8-bit value.")
        self._memory[address] = data

# @intent:responsibility アドレスから記憶域への振り分けと、ステップ単位のアクセス記録を行います。
# @intent:rationale 領域は開始アドレス順に保持し、二分探索で該当領域を求めます。
class Bus:
    """
    DMGのアドレスバス。

    全てのアドレスは高々1つの領域に属します。どの領域にも属さないアドレスへの
    アクセスは MappingFault です。`read`/`write` はアクセスログに記録され、
    インスペクタ用の `peek` とローダー用の `load` は記録されません。
    """
    def __init__(self):
        self._starts: List[int] = []
        self._regions: List[Tuple[int, int, Device]] = []
        self._activity: List[BusAccess] = []

    # @intent:responsibility 記憶域を [start_address, end_address] に割り当てます。
    # @intent:pre-condition 範囲は0x0000-0xFFFF内にあり、既存の領域と重ならないこと。
    def register_device(self, start_address: int, end_address: int, device: Device) -> None:
        if not (0 <= start_address <= end_address <= ADDRESS_SPACE_END):
            raise ValueError("Invalid address range: start_address must be <= end_address and within 0x0000-0xFFFF.")
        if not isinstance(device, Device):
            raise TypeError("Device must be an instance of a class derived from Device.")

        span = end_address - start_address + 1
        if isinstance(device, RAM) and device.size != span:
            raise ValueError(
                f"RAM of {device.size} bytes cannot back {start_address:#06x}-{end_address:#06x} ({span} bytes)."
            )

        index = bisect.bisect_left(self._starts, start_address)
        neighbours = self._regions[max(index - 1, 0):index + 1]
        for start, end, _ in neighbours:
            if start_address <= end and start <= end_address:
                raise ValueError(
                    f"Address range {start_address:#06x}-{end_address:#06x} overlaps "
                    f"existing range {start:#06x}-{end:#06x}."
                )

        self._starts.insert(index, start_address)
        self._regions.insert(index, (start_address, end_address, device))
        logger.debug("Mapped %s at %#06x-%#06x", type(device).__name__, start_address, end_address)

    def get_memory_map(self) -> List[Tuple[int, int, Device]]:
        return list(self._regions)

    def _resolve(self, address: int, access: str) -> Tuple[Device, int]:
        index = bisect.bisect_right(self._starts, address) - 1
        if index >= 0:
            start, end, device = self._regions[index]
            if address <= end:
                return device, address - start
        raise MappingFault(address, access)

    def is_mapped(self, address: int) -> bool:
        try:
            self._resolve(address, "read")
        except MappingFault:
            return False
        return True

    # @intent:responsibility 複数バイト書き込みの前に、全ての書き込み先が割り当て済みであることを確認します。
    def ensure_mapped(self, *addresses: int) -> None:
        for address in addresses:
            self._resolve(address, "write")

    def read(self, address: int) -> int:
        device, offset = self._resolve(address, "read")
        data = device.read(offset)
        self._activity.append(BusAccess(address, data, BusAccessType.READ))
        return data

    def write(self, address: int, data: int) -> None:
        """
        ROM領域もバンク切り替えのない読み書き可能な記憶域として扱います。
        """
        device, offset = self._resolve(address, "write")
        device.write(offset, data)
        self._activity.append(BusAccess(address, data, BusAccessType.WRITE))

    # 逆アセンブラ・デバッガ用の記録されない読み出し
    def peek(self, address: int) -> int:
        device, offset = self._resolve(address, "read")
        return device.read(offset)

    # ROMイメージの配置など、実行とみなさない書き込み
    def load(self, address: int, data: int) -> None:
        device, offset = self._resolve(address, "write")
        device.write(offset, data)

    # @intent:responsibility 直前のクリア以降に記録されたアクセスを返し、記録を空にします。
    def get_and_clear_activity_log(self) -> List[BusAccess]:
        activity, self._activity = self._activity, []
        return activity

    # @intent:responsibility 記録を指定した内容で置き換えます。退避したログを書き戻すために使います。
    def restore_activity_log(self, activity: List[BusAccess]) -> None:
        self._activity = list(activity)
