"""
LR35902逆アセンブラモジュール。

メモリ上のバイナリデータを解析し、アセンブリ言語のニーモニック形式に変換します。
"""
from typing import List

from dmg_core.arch.lr35902.instructions import decode_opcode
from dmg_core.common.errors import MappingFault, UnimplementedOpcodeError
from dmg_core.common.types import DisassemblyLine
from dmg_core.transport.bus import Bus

# @intent:responsibility 指定されたメモリ範囲のバイナリデータを解析し、アドレスとニーモニックのリストを返します。
def disassemble(bus: Bus, start_addr: int, length: int) -> List[DisassemblyLine]:
    """
    メモリ上のデータを読み取り、(アドレス, 16進ダンプ, ニーモニック) のタプルのリストを返します。
    未実装オペコードは "DB $xx"、未割り当てアドレスは "??" として1バイトずつ進みます。
    """
    result: List[DisassemblyLine] = []
    # オペランドはbus.read経由で読まれるため、呼び出し前の記録を退避しておく
    saved_activity = bus.get_and_clear_activity_log()
    try:
        _decode_range(bus, start_addr, start_addr + length, result)
    finally:
        bus.restore_activity_log(saved_activity)
    return result

def _decode_range(bus: Bus, current_addr: int, end_addr: int, result: List[DisassemblyLine]) -> None:
    while current_addr < end_addr and current_addr <= 0xFFFF:
        try:
            opcode = bus.peek(current_addr)
        except MappingFault:
            result.append((current_addr, "??", "ERR"))
            current_addr += 1
            continue

        try:
            operation = decode_opcode(opcode, bus, current_addr)
        except UnimplementedOpcodeError:
            result.append((current_addr, f"{opcode:02X}", f"DB ${opcode:02X}"))
            current_addr += 1
            continue
        except MappingFault:
            # オペランドが未割り当て領域にはみ出している
            result.append((current_addr, f"{opcode:02X}", "ERR"))
            current_addr += 1
            continue

        hex_dump = " ".join([f"{opcode:02X}"] + [f"{b:02X}" for b in operation.operand_bytes])
        result.append((current_addr, hex_dump, operation.render()))
        current_addr += operation.length

