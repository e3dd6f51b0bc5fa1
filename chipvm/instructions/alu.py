"""CHIP-8 ALU operations (8xxx).

Each operation maps ``(vx, vy, vf)`` to ``(result, flag)``. Both are written
back, result first, so the flag wins when X is F. Operations that do not
produce a flag hand back ``vf`` unchanged, and the dispatcher skips the flag
write for them.
"""

import jax
import jax.numpy as jnp
from chipvm.state import EmulatorState, ShiftQuirk, advance
from chipvm.decode import DecodedInstruction
from chipvm.constants import FLAG_REGISTER
from chipvm.instructions.system import execute_unknown


def alu_set(vx, vy, vf):
    """8XY0 - Set: VX = VY."""
    return vy, vf


def alu_or(vx, vy, vf):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, vf


def alu_and(vx, vy, vf):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, vf


def alu_xor(vx, vy, vf):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, vf


def alu_add(vx, vy, vf):
    """8XY4 - Add: VX += VY, VF = 1 if the wrapped sum is below VY."""
    result = (vx + vy) & 0xFF
    return result, jnp.astype(result < vy, jnp.int32)


def alu_sub_xy(vx, vy, vf):
    """8XY5 - Subtract: VX -= VY, VF = 0 on borrow."""
    return (vx - vy) & 0xFF, jnp.astype(vx >= vy, jnp.int32)


def alu_sub_yx(vx, vy, vf):
    """8XY7 - Subtract: VX = VY - VX, VF = 0 on borrow."""
    return (vy - vx) & 0xFF, jnp.astype(vy >= vx, jnp.int32)


def alu_shift_right(value, vf):
    """8XY6 - Shift right, VF = bit shifted out."""
    return value >> 1, value & 0x01


def alu_shift_left(value, vf):
    """8XYE - Shift left, VF = bit shifted out."""
    return (value << 1) & 0xFF, (value & 0x80) >> 7


# Low nibble -> branch index; 9 marks an unknown 8XYN instruction.
_ALU_BRANCH = jnp.array([0, 1, 2, 3, 4, 5, 6, 7, 9, 9, 9, 9, 9, 9, 8, 9], dtype=jnp.int32)
_WRITES_FLAG = jnp.array([0, 0, 0, 0, 1, 1, 1, 1, 1], dtype=jnp.bool_)


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher."""
    vx = jnp.astype(state.V[instruction.x], jnp.int32)
    vy = jnp.astype(state.V[instruction.y], jnp.int32)
    vf = jnp.astype(state.V[FLAG_REGISTER], jnp.int32)

    # The shift source is chosen at trace time; the quirk is static.
    if state.shift_quirk == ShiftQuirk.ORIGINAL:
        shift_source = vy
    else:
        shift_source = vx

    def _shift_right(vx, vy, vf):
        return alu_shift_right(shift_source, vf)

    def _shift_left(vx, vy, vf):
        return alu_shift_left(shift_source, vf)

    def _apply(state):
        branch = _ALU_BRANCH[instruction.n]
        result, flag = jax.lax.switch(
            branch,
            [alu_set, alu_or, alu_and, alu_xor, alu_add,
             alu_sub_xy, _shift_right, alu_sub_yx, _shift_left],
            vx, vy, vf
        )
        new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
        new_V = jnp.where(
            _WRITES_FLAG[branch],
            new_V.at[FLAG_REGISTER].set(jnp.astype(flag, jnp.uint8)),
            new_V,
        )
        return advance(state.replace(V=new_V))

    return jax.lax.cond(
        _ALU_BRANCH[instruction.n] == 9,
        lambda s: execute_unknown(s, instruction),
        _apply,
        state,
    )
