"""
LR35902 ALU (算術論理演算ユニット) およびフラグ操作ユーティリティ。

演算結果に基づいたフラグ（Z, N, H, C）の計算と更新を担当します。
キャリー/ハーフキャリーは切り捨て前の拡張された中間値から求めます。
"""
from typing import Tuple

from dmg_core.arch.lr35902.state import Lr35902CpuState

# @intent:responsibility 8ビット加算(ADD/ADC)の結果を返し、全フラグを更新します。
def add8(state: Lr35902CpuState, val1: int, val2: int, carry_in: int = 0) -> int:
    result = val1 + val2 + carry_in
    res8 = result & 0xFF
    state.flag_z = res8 == 0
    state.flag_n = False
    state.flag_h = ((val1 & 0x0F) + (val2 & 0x0F) + carry_in) > 0x0F
    state.flag_c = result > 0xFF
    return res8

# @intent:responsibility 8ビット減算(SUB/SBC/CP)の結果を返し、全フラグを更新します。
def sub8(state: Lr35902CpuState, val1: int, val2: int, borrow_in: int = 0) -> int:
    """
    結果は負になり得る中間値を0xFFでマスクして返します。
    Cフラグは被減数が減数(+借り)より小さい場合にセットされます。
    """
    result = val1 - val2 - borrow_in
    res8 = result & 0xFF
    state.flag_z = res8 == 0
    state.flag_n = True
    state.flag_h = ((val1 & 0x0F) - (val2 & 0x0F) - borrow_in) < 0
    state.flag_c = result < 0
    return res8

# @intent:responsibility 8ビット論理演算の結果に基づいてフラグを更新します。
def update_flags_logic8(state: Lr35902CpuState, result: int, h_flag: bool = False) -> None:
    """AND/OR/XOR命令のフラグを更新します。ANDのみHがセットされ、Cは常にクリアされます。"""
    state.flag_z = (result & 0xFF) == 0
    state.flag_n = False
    state.flag_h = h_flag
    state.flag_c = False

# @intent:responsibility INC r の結果を返します。Cフラグは保持されます。
def inc8(state: Lr35902CpuState, val: int) -> int:
    result = (val + 1) & 0xFF
    state.flag_z = result == 0
    state.flag_n = False
    state.flag_h = (val & 0x0F) == 0x0F
    return result

# @intent:responsibility DEC r の結果を返します。Cフラグは保持されます。
def dec8(state: Lr35902CpuState, val: int) -> int:
    result = (val - 1) & 0xFF
    state.flag_z = result == 0
    state.flag_n = True
    state.flag_h = (val & 0x0F) == 0x00
    return result

# @intent:responsibility ADD HL,rr の結果を返します。Zフラグは変化しません。
def add16(state: Lr35902CpuState, val1: int, val2: int) -> int:
    result = val1 + val2
    state.flag_n = False
    # Half Carry: bit 11 から bit 12 へのキャリー
    state.flag_h = ((val1 & 0x0FFF) + (val2 & 0x0FFF)) > 0x0FFF
    state.flag_c = result > 0xFFFF
    return result & 0xFFFF

def to_signed8(value: int) -> int:
    return value - 0x100 if value >= 0x80 else value

# @intent:responsibility SP + e8 (ADD SP,e8 / LD HL,SP+e8) の結果を返します。
# @intent:rationale H/Cは符号なしの下位バイト同士の加算から求め、Z/Nは常にクリアされます。
def add_sp_e8(state: Lr35902CpuState, sp: int, offset_byte: int) -> int:
    state.flag_z = False
    state.flag_n = False
    state.flag_h = ((sp & 0x0F) + (offset_byte & 0x0F)) > 0x0F
    state.flag_c = ((sp & 0xFF) + (offset_byte & 0xFF)) > 0xFF
    return (sp + to_signed8(offset_byte)) & 0xFFFF

# @intent:responsibility 直前のBCD加減算に合わせてAを補正します (DAA)。
def daa(state: Lr35902CpuState, a: int) -> int:
    carry = state.flag_c
    if not state.flag_n:
        if carry or a > 0x99:
            a += 0x60
            carry = True
        if state.flag_h or (a & 0x0F) > 0x09:
            a += 0x06
    else:
        if carry:
            a -= 0x60
        if state.flag_h:
            a -= 0x06
    a &= 0xFF
    state.flag_z = a == 0
    state.flag_h = False
    state.flag_c = carry
    return a

# @intent:responsibility アキュムレータのローテート (RLCA/RRCA/RLA/RRA) を行います。
def rotate_a(state: Lr35902CpuState, a: int, kind: str) -> int:
    """
    kind: "RLCA", "RRCA", "RLA", "RRA"。
    結果に関わらずZ/N/Hはクリアされ、Cには押し出されたビットが入ります。
    """
    carry_in = 1 if state.flag_c else 0
    if kind == "RLCA":
        carry_out = a >> 7
        result = ((a << 1) | carry_out) & 0xFF
    elif kind == "RRCA":
        carry_out = a & 1
        result = (a >> 1) | (carry_out << 7)
    elif kind == "RLA":
        carry_out = a >> 7
        result = ((a << 1) | carry_in) & 0xFF
    elif kind == "RRA":
        carry_out = a & 1
        result = (a >> 1) | (carry_in << 7)
    else:
        raise ValueError(f"Unknown rotate kind: {kind}")
    state.flag_z = False
    state.flag_n = False
    state.flag_h = False
    state.flag_c = carry_out == 1
    return result

# @intent:responsibility 8ビットALU演算(ADD/ADC/SUB/SBC/AND/XOR/OR/CP)を名前で適用します。
# @intent:return (新しいAの値, Aへ格納するかどうか)
def alu8(state: Lr35902CpuState, op: str, a: int, val: int) -> Tuple[int, bool]:
    carry = 1 if state.flag_c else 0
    if op == "ADD":
        return add8(state, a, val), True
    if op == "ADC":
        return add8(state, a, val, carry), True
    if op == "SUB":
        return sub8(state, a, val), True
    if op == "SBC":
        return sub8(state, a, val, carry), True
    if op == "AND":
        result = a & val
        update_flags_logic8(state, result, h_flag=True)
        return result, True
    if op == "XOR":
        result = a ^ val
        update_flags_logic8(state, result)
        return result, True
    if op == "OR":
        result = a | val
        update_flags_logic8(state, result)
        return result, True
    if op == "CP":
        sub8(state, a, val)
        return a, False
    raise ValueError(f"Unknown ALU operation: {op}")
