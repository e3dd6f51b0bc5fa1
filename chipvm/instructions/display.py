"""CHIP-8 display operations."""

import jax.numpy as jnp
from chipvm.state import EmulatorState, advance
from chipvm.decode import DecodedInstruction
from chipvm.constants import FLAG_REGISTER, SCREEN_WIDTH, SCREEN_HEIGHT
from chipvm.faults import guard_memory

MAX_SPRITE_ROWS = 15
SPRITE_WIDTH = 8

_rows = jnp.arange(MAX_SPRITE_ROWS)
_columns = jnp.arange(SPRITE_WIDTH)


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    Coordinates wrap around both screen edges. VF is set when a lit pixel is
    switched off; ``draw`` is raised only when a pixel is switched on.
    """
    origin_x = jnp.astype(state.V[instruction.x], jnp.int32)
    origin_y = jnp.astype(state.V[instruction.y], jnp.int32)

    def _draw(state):
        addresses = jnp.astype(state.I, jnp.int32) + _rows
        sprite_bytes = state.memory.at[addresses].get(mode="fill", fill_value=0)
        bits = (jnp.astype(sprite_bytes, jnp.int32)[:, None] >> (7 - _columns)[None, :]) & 1
        bits = (bits == 1) & (_rows < instruction.n)[:, None]

        # At most 15 rows and 8 columns, so wrapped positions never coincide.
        xs = (origin_x + _columns) % SCREEN_WIDTH
        ys = (origin_y + _rows) % SCREEN_HEIGHT
        sprite = jnp.zeros_like(state.display).at[xs[None, :], ys[:, None]].set(bits)

        collision = jnp.any(state.display & sprite)
        lit = jnp.any(~state.display & sprite)
        state = state.replace(
            display=state.display ^ sprite,
            draw=state.draw | lit,
            V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8)),
        )
        return advance(state)

    return guard_memory(state, state.I, instruction.n, _draw, instruction.raw)
