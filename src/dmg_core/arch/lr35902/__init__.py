"""
Sharp LR35902 (DMG) アーキテクチャ実装。
"""
