"""
LR35902 CPU固有の状態定義。

このモジュールは、LR35902のレジスタ、フラグ、割り込みマスタ許可(IME)、
および実行モードを保持するデータ構造を定義します。
"""
from dataclasses import dataclass
from enum import Enum, IntFlag

from dmg_core.core.state import CpuState

# @intent:constant Fレジスタ内の各フラグビットの位置を定義します。下位4ビットは常に0です。
class Flag(IntFlag):
    Z = 0b10000000  # Zero
    N = 0b01000000  # Subtract
    H = 0b00100000  # Half Carry
    C = 0b00010000  # Carry

Z_FLAG = Flag.Z
N_FLAG = Flag.N
H_FLAG = Flag.H
C_FLAG = Flag.C
FLAG_MASK = 0xF0

# @intent:responsibility CPUの実行モード。Running以外からの復帰はコア外部（割り込み配送）の責務です。
class RunMode(Enum):
    RUNNING = "RUNNING"
    HALTED = "HALTED"
    STOPPED = "STOPPED"


# @intent:responsibility LR35902の全てのレジスタとフラグの状態を保持します。
@dataclass
class Lr35902CpuState(CpuState):
    """
    LR35902のレジスタ状態を保持するデータクラス。
    既定値はブートROM実行直後のレジスタ値です（PCのみ0x0000から開始）。
    """
    sp: int = 0xFFFE

    a: int = 0x01
    f: int = 0xB0  # Flag register
    b: int = 0x00
    c: int = 0x13
    d: int = 0x00
    e: int = 0xD8
    h: int = 0x01
    l: int = 0x4D

    ime: bool = False # Interrupt Master Enable
    mode: RunMode = RunMode.RUNNING

    @property
    def halted(self) -> bool:
        return self.mode is RunMode.HALTED

    @property
    def stopped(self) -> bool:
        return self.mode is RunMode.STOPPED

    # @intent:responsibility Fレジスタの1ビットだけを設定/クリアします。他の3フラグは変化しません。
    def set_flag(self, flag: Flag, value: bool) -> None:
        mask = int(flag)
        if value:
            self.f = (self.f | mask) & FLAG_MASK
        else:
            self.f = self.f & ~mask & FLAG_MASK

    def get_flag(self, flag: Flag) -> bool:
        return (self.f & int(flag)) != 0

    # @intent:accessor 各フラグビットにアクセスするためのプロパティを提供します。
    @property
    def flag_z(self) -> bool:
        return self.get_flag(Flag.Z)

    @flag_z.setter
    def flag_z(self, value: bool) -> None:
        self.set_flag(Flag.Z, value)

    @property
    def flag_n(self) -> bool:
        return self.get_flag(Flag.N)

    @flag_n.setter
    def flag_n(self, value: bool) -> None:
        self.set_flag(Flag.N, value)

    @property
    def flag_h(self) -> bool:
        return self.get_flag(Flag.H)

    @flag_h.setter
    def flag_h(self, value: bool) -> None:
        self.set_flag(Flag.H, value)

    @property
    def flag_c(self) -> bool:
        return self.get_flag(Flag.C)

    @flag_c.setter
    def flag_c(self, value: bool) -> None:
        self.set_flag(Flag.C, value)

    # 16-bit register pairs (上位バイト = bit15-8, 下位バイト = bit7-0)
    @property
    def af(self) -> int:
        return (self.a << 8) | self.f

    @af.setter
    def af(self, value: int) -> None:
        self.a = (value >> 8) & 0xFF
        self.f = value & FLAG_MASK

    @property
    def bc(self) -> int:
        return (self.b << 8) | self.c

    @bc.setter
    def bc(self, value: int) -> None:
        self.b = (value >> 8) & 0xFF
        self.c = value & 0xFF

    @property
    def de(self) -> int:
        return (self.d << 8) | self.e

    @de.setter
    def de(self, value: int) -> None:
        self.d = (value >> 8) & 0xFF
        self.e = value & 0xFF

    @property
    def hl(self) -> int:
        return (self.h << 8) | self.l

    @hl.setter
    def hl(self, value: int) -> None:
        self.h = (value >> 8) & 0xFF
        self.l = value & 0xFF
