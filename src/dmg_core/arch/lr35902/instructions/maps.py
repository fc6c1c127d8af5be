"""
LR35902 命令マッピング定義。
各命令モジュールから関数をインポートし、全256オペコードと関数の対応表を構築します。
"""
from .alu import (
    decode_27, decode_2f, decode_37, decode_3f, decode_add_hl_rr, decode_add_sp_r8, decode_alu_d8,
    decode_alu_r, decode_inc_dec16, decode_inc_dec8, decode_rotate_a,
    execute_27, execute_2f, execute_37, execute_3f, execute_add_hl_rr, execute_add_sp_r8, execute_alu_d8,
    execute_alu_r, execute_inc_dec16, execute_inc_dec8, execute_rotate_a
)
from .control import (
    decode_00, decode_10, decode_76, decode_call, decode_e9, decode_f3, decode_fb, decode_jp, decode_jr,
    decode_ret, decode_rst, decode_unimplemented,
    execute_00, execute_10, execute_76, execute_call, execute_e9, execute_f3, execute_fb, execute_jp,
    execute_jr, execute_ret, execute_rst, execute_unimplemented
)
from .load import (
    decode_ld_a16_a, decode_ld_a16_sp, decode_ld_a_ind, decode_ld_c_ind, decode_ld_hl_sp_r8,
    decode_ld_ind_a, decode_ld_r_d8, decode_ld_r_r, decode_ld_rr_d16, decode_ld_sp_hl, decode_ldh_a8,
    decode_push_pop,
    execute_ld_a16_a, execute_ld_a16_sp, execute_ld_a_ind, execute_ld_c_ind, execute_ld_hl_sp_r8,
    execute_ld_ind_a, execute_ld_r_d8, execute_ld_r_r, execute_ld_rr_d16, execute_ld_sp_hl, execute_ldh_a8,
    execute_push_pop
)

# CBプレフィックス表は未実装。残りはLR35902で割り当てのない不正オペコード。
UNIMPLEMENTED_OPCODES = frozenset(
    [0xCB, 0xD3, 0xDB, 0xDD, 0xE3, 0xE4, 0xEB, 0xEC, 0xED, 0xF4, 0xFC, 0xFD]
)

# (decoder, executor) の組
_HANDLERS = {
    0x00: (decode_00, execute_00),
    0x08: (decode_ld_a16_sp, execute_ld_a16_sp),
    0x10: (decode_10, execute_10),
    0x18: (decode_jr, execute_jr),
    0x27: (decode_27, execute_27),
    0x2F: (decode_2f, execute_2f),
    0x37: (decode_37, execute_37),
    0x3F: (decode_3f, execute_3f),
    0x76: (decode_76, execute_76),
    0xC3: (decode_jp, execute_jp),
    0xC9: (decode_ret, execute_ret),
    0xCD: (decode_call, execute_call),
    0xD9: (decode_ret, execute_ret),
    0xE0: (decode_ldh_a8, execute_ldh_a8),
    0xF0: (decode_ldh_a8, execute_ldh_a8),
    0xE2: (decode_ld_c_ind, execute_ld_c_ind),
    0xF2: (decode_ld_c_ind, execute_ld_c_ind),
    0xE8: (decode_add_sp_r8, execute_add_sp_r8),
    0xE9: (decode_e9, execute_e9),
    0xEA: (decode_ld_a16_a, execute_ld_a16_a),
    0xFA: (decode_ld_a16_a, execute_ld_a16_a),
    0xF3: (decode_f3, execute_f3),
    0xFB: (decode_fb, execute_fb),
    0xF8: (decode_ld_hl_sp_r8, execute_ld_hl_sp_r8),
    0xF9: (decode_ld_sp_hl, execute_ld_sp_hl),
    **{op: (decode_rotate_a, execute_rotate_a) for op in (0x07, 0x0F, 0x17, 0x1F)},
    **{op: (decode_ld_rr_d16, execute_ld_rr_d16) for op in range(0x01, 0x40, 0x10)}, # LD rr,d16
    **{op: (decode_ld_ind_a, execute_ld_ind_a) for op in range(0x02, 0x40, 0x10)}, # LD (rr),A
    **{op: (decode_ld_a_ind, execute_ld_a_ind) for op in range(0x0A, 0x40, 0x10)}, # LD A,(rr)
    **{op: (decode_inc_dec16, execute_inc_dec16) for op in range(0x03, 0x40, 0x10)}, # INC rr
    **{op: (decode_inc_dec16, execute_inc_dec16) for op in range(0x0B, 0x40, 0x10)}, # DEC rr
    **{op: (decode_add_hl_rr, execute_add_hl_rr) for op in range(0x09, 0x40, 0x10)}, # ADD HL,rr
    **{op: (decode_inc_dec8, execute_inc_dec8) for op in range(0x04, 0x40, 0x08)}, # INC r
    **{op: (decode_inc_dec8, execute_inc_dec8) for op in range(0x05, 0x40, 0x08)}, # DEC r
    **{op: (decode_ld_r_d8, execute_ld_r_d8) for op in range(0x06, 0x40, 0x08)}, # LD r,d8
    **{op: (decode_jr, execute_jr) for op in range(0x20, 0x40, 0x08)}, # JR cc,r8
    **{op: (decode_ld_r_r, execute_ld_r_r) for op in range(0x40, 0x80) if op != 0x76},
    **{op: (decode_alu_r, execute_alu_r) for op in range(0x80, 0xC0)},
    **{op: (decode_ret, execute_ret) for op in range(0xC0, 0xE0, 0x08)}, # RET cc
    **{op: (decode_jp, execute_jp) for op in range(0xC2, 0xE0, 0x08)}, # JP cc,a16
    **{op: (decode_call, execute_call) for op in range(0xC4, 0xE0, 0x08)}, # CALL cc,a16
    **{op: (decode_push_pop, execute_push_pop) for op in range(0xC1, 0x100, 0x10)}, # POP
    **{op: (decode_push_pop, execute_push_pop) for op in range(0xC5, 0x100, 0x10)}, # PUSH
    **{op: (decode_alu_d8, execute_alu_d8) for op in range(0xC6, 0x100, 0x08)}, # ALU A,d8
    **{op: (decode_rst, execute_rst) for op in range(0xC7, 0x100, 0x08)}, # RST
    **{op: (decode_unimplemented, execute_unimplemented) for op in UNIMPLEMENTED_OPCODES},
}

DECODE_MAP = {op: handlers[0] for op, handlers in _HANDLERS.items()}
EXECUTE_MAP = {op: handlers[1] for op, handlers in _HANDLERS.items()}

if len(_HANDLERS) != 0x100:
    missing = sorted(set(range(0x100)) - set(_HANDLERS))
    raise RuntimeError(f"Opcode table is not total, missing: {[f'{op:02X}' for op in missing]}")
