"""Test configuration and fixtures for CHIP-8 interpreter tests."""

import pytest
import jax.numpy as jnp
from chipvm import create_state, ShiftQuirk


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


@pytest.fixture
def original_state():
    """Provide a fresh state using the original shift semantics."""
    return create_state(shift_quirk=ShiftQuirk.ORIGINAL)


def setup_memory(state, address, data):
    """Helper to put bytes in memory."""
    return state.replace(
        memory=state.memory.at[address:address + len(data)].set(
            jnp.array(data, dtype=jnp.uint8)
        )
    )


def set_registers(state, **registers):
    """Helper to set registers by name, e.g. ``set_registers(state, V1=3)``."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)


def set_index(state, value):
    return state.replace(I=jnp.asarray(value, dtype=jnp.uint16))
