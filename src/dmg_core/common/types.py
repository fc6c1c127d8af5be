"""
パッケージ横断で使う型定義。
"""
from typing import List, NamedTuple, Tuple

# (アドレス, "3E 05" 形式の16進ダンプ, "LD A,d8 $05" 形式のテキスト)
DisassemblyLine = Tuple[int, str, str]

# @intent:data_structure レジスタ表示用の1項目。widthはビット幅 (1, 8, 16)。
class RegisterInfo(NamedTuple):
    name: str
    width: int

# @intent:data_structure フロントエンドがレジスタ欄を組み立てるための表示グループ。
class RegisterLayoutInfo(NamedTuple):
    group_name: str
    registers: List[RegisterInfo]
