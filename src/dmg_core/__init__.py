"""
DMG Core Tracer: Sharp LR35902 命令セットインタプリタとメモリバス。
"""
__version__ = "0.1.0"
