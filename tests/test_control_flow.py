"""Tests for control flow instructions."""

import pytest
import jax.numpy as jnp
from chipvm import execute, Fault
from conftest import set_registers


class TestJump:
    """Test jump instructions."""

    def test_execute_jump(self, fresh_state):
        """Test 1NNN - Jump to address."""
        state = execute(fresh_state, 0x1ABC)
        assert state.pc == 0xABC

    def test_jump_with_offset(self, fresh_state):
        """BNNN - Jump to NNN + V0."""
        state = set_registers(fresh_state, V0=0x10)
        state = execute(state, 0xB300)
        assert state.pc == 0x310

    def test_jump_with_offset_is_not_masked(self, fresh_state):
        state = set_registers(fresh_state, V0=0xFF)
        state = execute(state, 0xBFFF)
        assert state.pc == 0x10FE

    def test_jump_with_offset_ignores_vx(self, fresh_state):
        state = set_registers(fresh_state, V0=0x02, V3=0x40)
        state = execute(state, 0xB300)
        assert state.pc == 0x302


class TestSkipInstructions:
    """Test all skip instruction variants: +4 when taken, +2 otherwise."""

    @pytest.mark.parametrize("value,expected_pc", [(0x42, 0x204), (0x41, 0x202)])
    def test_skip_if_equal_immediate(self, fresh_state, value, expected_pc):
        """3XNN - Skip if VX == NN."""
        state = set_registers(fresh_state, V5=value)
        state = execute(state, 0x3542)
        assert state.pc == expected_pc

    @pytest.mark.parametrize("value,expected_pc", [(0x10, 0x204), (0x20, 0x202)])
    def test_skip_if_not_equal_immediate(self, fresh_state, value, expected_pc):
        """4XNN - Skip if VX != NN."""
        state = set_registers(fresh_state, V3=value)
        state = execute(state, 0x4320)
        assert state.pc == expected_pc

    @pytest.mark.parametrize("vy,expected_pc", [(0x55, 0x204), (0x54, 0x202)])
    def test_skip_if_equal_register(self, fresh_state, vy, expected_pc):
        """5XY0 - Skip if VX == VY."""
        state = set_registers(fresh_state, V1=0x55, V2=vy)
        state = execute(state, 0x5120)
        assert state.pc == expected_pc

    @pytest.mark.parametrize("vy,expected_pc", [(0x54, 0x204), (0x55, 0x202)])
    def test_skip_if_not_equal_register(self, fresh_state, vy, expected_pc):
        """9XY0 - Skip if VX != VY."""
        state = set_registers(fresh_state, V1=0x55, V2=vy)
        state = execute(state, 0x9120)
        assert state.pc == expected_pc

    def test_skip_if_equal_register_requires_zero_nibble(self, fresh_state):
        state = execute(fresh_state, 0x5121)
        assert int(state.fault) == Fault.UNKNOWN_INSTRUCTION
        assert state.pc == 0x200


class TestKeySkips:
    """Test EX9E / EXA1."""

    def _press(self, state, key):
        return state.replace(keypad=state.keypad.at[key].set(True))

    def test_skip_if_key_pressed(self, fresh_state):
        state = self._press(set_registers(fresh_state, V4=0xB), 0xB)
        assert execute(state, 0xE49E).pc == 0x204
        assert execute(state, 0xE4A1).pc == 0x202

    def test_skip_if_key_not_pressed(self, fresh_state):
        state = self._press(set_registers(fresh_state, V4=0xB), 0xA)
        assert execute(state, 0xE49E).pc == 0x202
        assert execute(state, 0xE4A1).pc == 0x204

    def test_key_index_uses_low_nibble(self, fresh_state):
        state = self._press(set_registers(fresh_state, V0=0x13), 0x3)
        assert execute(state, 0xE09E).pc == 0x204

    def test_unknown_key_instruction(self, fresh_state):
        state = execute(fresh_state, 0xE09F)
        assert int(state.fault) == Fault.UNKNOWN_INSTRUCTION
        assert state.fault_instruction == 0xE09F
