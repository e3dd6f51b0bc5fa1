"""Tests for display operations (DXYN)."""

import pytest
import jax.numpy as jnp
from chipvm import execute, Fault, SCREEN_WIDTH, SCREEN_HEIGHT
from conftest import setup_memory, set_registers, set_index

FONT_GLYPHS = {
    0x0: ["####", "#..#", "#..#", "#..#", "####"],
    0x1: ["..#.", ".##.", "..#.", "..#.", ".###"],
    0x2: ["####", "...#", "####", "#...", "####"],
    0x3: ["####", "...#", "####", "...#", "####"],
    0x4: ["#..#", "#..#", "####", "...#", "...#"],
    0x5: ["####", "#...", "####", "...#", "####"],
    0x6: ["####", "#...", "####", "#..#", "####"],
    0x7: ["####", "...#", "..#.", ".#..", ".#.."],
    0x8: ["####", "#..#", "####", "#..#", "####"],
    0x9: ["####", "#..#", "####", "...#", "####"],
    0xA: ["####", "#..#", "####", "#..#", "#..#"],
    0xB: ["###.", "#..#", "###.", "#..#", "###."],
    0xC: ["####", "#...", "#...", "#...", "####"],
    0xD: ["###.", "#..#", "#..#", "#..#", "###."],
    0xE: ["####", "#...", "####", "#...", "####"],
    0xF: ["####", "#...", "####", "#...", "#..."],
}


def _row(state, y, x=0, width=4):
    return "".join("#" if state.display[x + i, y] else "." for i in range(width))


class TestBasicSprites:
    """Test basic sprite drawing."""

    def test_basic_sprite_draw(self, fresh_state):
        """Test basic sprite drawing without collision."""
        state = setup_memory(fresh_state, 0x300, [0xC0, 0xC0])
        state = set_index(set_registers(state, V0=10, V1=5), 0x300)

        state = execute(state, 0xD012)

        assert state.display[10, 5]
        assert state.display[11, 5]
        assert state.display[10, 6]
        assert state.display[11, 6]
        assert not state.display[12, 5]
        assert jnp.sum(state.display) == 4
        assert state.V[15] == 0
        assert state.draw
        assert state.pc == 0x202

    def test_row_bit_order(self, fresh_state):
        state = setup_memory(fresh_state, 0x222, [0b01010101, 0b11111111])
        state = set_index(set_registers(state, V1=5, V2=6), 0x222)

        state = execute(state, 0xD122)

        assert _row(state, 6, x=5, width=8) == ".#.#.#.#"
        assert _row(state, 7, x=5, width=8) == "########"

    def test_collision_detection(self, fresh_state):
        """Collision flag when sprite overlaps existing pixels."""
        state = setup_memory(fresh_state, 0x400, [0x80])
        state = set_index(set_registers(state, V0=20, V1=10), 0x400)

        state = execute(state, 0xD011)
        assert state.display[20, 10]
        assert state.V[15] == 0

        state = execute(state, 0xD011)
        assert not state.display[20, 10]
        assert state.V[15] == 1

    def test_double_draw_restores_display(self, fresh_state):
        state = setup_memory(fresh_state, 0x500, [0xF0, 0x90, 0xF0])
        state = set_index(set_registers(state, V0=8, V1=15), 0x500)
        state = state.replace(display=state.display.at[0, 0].set(True))
        before = state.display

        state = execute(state, 0xD013)
        state = execute(state, 0xD013)

        assert jnp.array_equal(state.display, before)
        assert state.V[15] == 1

    def test_flag_cleared_before_drawing(self, fresh_state):
        state = setup_memory(fresh_state, 0x300, [0x80])
        state = set_index(set_registers(state, V0=1, V1=1, VF=1), 0x300)
        state = execute(state, 0xD011)
        assert state.V[15] == 0

    def test_zero_height_draws_nothing(self, fresh_state):
        state = set_index(set_registers(fresh_state, V0=3, V1=3), 0x300)
        state = execute(state, 0xD010)
        assert jnp.sum(state.display) == 0
        assert not state.draw
        assert state.pc == 0x202


class TestDrawFlag:
    """The redraw flag only reacts to pixels turning on."""

    def test_erasing_only_does_not_request_redraw(self, fresh_state):
        state = setup_memory(fresh_state, 0x300, [0x80])
        state = set_index(state, 0x300)
        state = state.replace(display=state.display.at[0, 0].set(True))

        state = execute(state, 0xD001)

        assert not state.display[0, 0]
        assert state.V[15] == 1
        assert not state.draw

    def test_empty_row_changes_nothing(self, fresh_state):
        state = setup_memory(fresh_state, 0x300, [0x00])
        state = set_index(state, 0x300)
        state = execute(state, 0xD001)
        assert state.V[15] == 0
        assert not state.draw

    def test_flag_not_cleared_by_interpreter(self, fresh_state):
        state = fresh_state.replace(draw=jnp.ones((), dtype=jnp.bool_))
        state = setup_memory(state, 0x300, [0x00])
        state = execute(set_index(state, 0x300), 0xD001)
        assert state.draw


class TestWrapping:
    """Coordinates wrap independently at both edges."""

    def test_wraps_horizontally(self, fresh_state):
        state = setup_memory(fresh_state, 0x300, [0xFF])
        state = set_index(set_registers(state, V0=SCREEN_WIDTH - 2, V1=4), 0x300)

        state = execute(state, 0xD011)

        assert state.display[SCREEN_WIDTH - 2, 4]
        assert state.display[SCREEN_WIDTH - 1, 4]
        assert state.display[0, 4]
        assert state.display[5, 4]
        assert not state.display[6, 4]

    def test_wraps_vertically(self, fresh_state):
        state = setup_memory(fresh_state, 0x300, [0x80, 0x80, 0x80])
        state = set_index(set_registers(state, V0=7, V1=SCREEN_HEIGHT - 1), 0x300)

        state = execute(state, 0xD013)

        assert state.display[7, SCREEN_HEIGHT - 1]
        assert state.display[7, 0]
        assert state.display[7, 1]
        assert jnp.sum(state.display) == 3

    def test_wraps_in_both_directions(self, fresh_state):
        state = setup_memory(fresh_state, 0x300, [0xC0, 0xC0])
        state = set_index(set_registers(state, V0=SCREEN_WIDTH - 1, V1=SCREEN_HEIGHT - 1), 0x300)

        state = execute(state, 0xD012)

        assert state.display[SCREEN_WIDTH - 1, SCREEN_HEIGHT - 1]
        assert state.display[0, SCREEN_HEIGHT - 1]
        assert state.display[SCREEN_WIDTH - 1, 0]
        assert state.display[0, 0]

    def test_coordinates_wrap_before_drawing(self, fresh_state):
        state = setup_memory(fresh_state, 0x300, [0x80])
        state = set_index(set_registers(state, V0=SCREEN_WIDTH + 3, V1=SCREEN_HEIGHT + 2), 0x300)
        state = execute(state, 0xD011)
        assert state.display[3, 2]


class TestFont:
    """Font glyphs render as documented."""

    @pytest.mark.parametrize("digit", sorted(FONT_GLYPHS))
    def test_draw_font_glyph(self, fresh_state, digit):
        state = set_registers(fresh_state, V0=digit, V1=0, V2=0)
        state = execute(state, 0xF029)
        state = execute(state, 0xD125)

        assert [_row(state, y) for y in range(5)] == FONT_GLYPHS[digit]
        assert state.V[15] == 0
        assert state.draw


class TestSpriteFaults:

    def test_sprite_past_end_of_memory_faults(self, fresh_state):
        state = set_index(fresh_state, 0xFFE)
        state = execute(state, 0xD015)

        assert int(state.fault) == Fault.MEMORY
        assert state.fault_instruction == 0xD015
        assert jnp.sum(state.display) == 0
        assert state.pc == 0x200

    def test_sprite_ending_at_last_byte(self, fresh_state):
        state = setup_memory(fresh_state, 0xFFE, [0x80, 0x80])
        state = set_index(state, 0xFFE)
        state = execute(state, 0xD002)

        assert int(state.fault) == Fault.NONE
        assert jnp.sum(state.display) == 2
