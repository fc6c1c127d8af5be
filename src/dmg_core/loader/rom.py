# dmg_core/loader/rom.py
"""
カートリッジROMローダーモジュール。

生のカートリッジイメージを先頭から 0x0000-0x7FFF にそのままコピーします。
ヘッダ検証（ロゴ、チェックサム、タイトル）はこのモジュールの責務外です。
"""
import logging
from pathlib import Path
from typing import Union

from dmg_core.transport.bus import Bus
from dmg_core.transport.memory_map import ROM_REGION

logger = logging.getLogger(__name__)

# @intent:responsibility ROMバイト列をバスの 0x0000 から書き込み、書き込んだバイト数を返します。
# @intent:rationale ロードは実行ではないため、バスアクティビティログには記録しません。
def load_rom_bytes(bus: Bus, data: bytes) -> int:
    limit = ROM_REGION.size
    if len(data) > limit:
        logger.warning("ROM image is %d bytes; only the first %d bytes are mapped.", len(data), limit)
    payload = data[:limit]
    for offset, byte_data in enumerate(payload):
        bus.load(ROM_REGION.start + offset, byte_data)
    logger.debug("Loaded %d ROM bytes at %#06x", len(payload), ROM_REGION.start)
    return len(payload)

# @intent:responsibility ROMファイルをバイナリで読み込み、バスへロードします。
def load_rom_file(file_path: Union[str, Path], bus: Bus) -> int:
    data = Path(file_path).read_bytes()
    written = load_rom_bytes(bus, data)
    logger.info("Loaded ROM %s (%d bytes)", file_path, written)
    return written
