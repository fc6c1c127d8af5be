"""
エミュレーションコア共通の例外定義。

コア内で回復不能な状態（マッピング違反、バス未接続、未実装オペコード）を表します。
各例外は、既存コードが同じ分類で送出している組み込み例外も継承します。
"""
from typing import Optional


# @intent:responsibility コアが送出する全ての致命的エラーの基底クラスです。
class EmulationError(Exception):
    """エミュレーションを継続できない状態を表す基底例外。"""


# @intent:responsibility どの領域にも割り当てられていないアドレスへのアクセスを表します。
class MappingFault(EmulationError, IndexError):
    def __init__(self, address: int, access: str = "read"):
        self.address = address
        self.access = access
        super().__init__(f"Address {address:#06x} not mapped to any device ({access}).")


# @intent:responsibility バスが接続される前のメモリアクセスを表します。
class BusNotConnectedError(EmulationError, RuntimeError):
    def __init__(self, message: str = "No bus connected to CPU."):
        super().__init__(message)


# @intent:responsibility 既に別のバスに接続されたCPUへの再接続を表します。
class BusAlreadyConnectedError(EmulationError, RuntimeError):
    def __init__(self, message: str = "CPU is already connected to a different bus."):
        super().__init__(message)


# @intent:responsibility デコード表で未実装（予約・不正・CBプレフィックス）に割り当てられたオペコードを表します。
class UnimplementedOpcodeError(EmulationError, NotImplementedError):
    def __init__(self, opcode: int, pc: Optional[int] = None):
        self.opcode = opcode
        self.pc = pc
        location = f" at PC {pc:#06x}" if pc is not None else ""
        super().__init__(f"Opcode {opcode:#04x} not implemented{location}.")
