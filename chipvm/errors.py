"""Exceptions raised by the host-facing emulator functions."""

from chipvm.constants import MAX_ROM_SIZE
from chipvm.faults import Fault


class Chip8Error(Exception):
    """Base class for all chipvm errors."""


class RomTooLargeError(Chip8Error):
    """The program image does not fit into program memory."""

    def __init__(self, size: int):
        self.size = size
        super().__init__(
            f"Program too large to fit into memory: {size} bytes "
            f"(maximum {MAX_ROM_SIZE})"
        )


class NoRomLoadedError(Chip8Error):
    """Reset was requested before any program image was loaded."""

    def __init__(self):
        super().__init__("Cannot reset: no ROM has been loaded")


class CpuFault(Chip8Error):
    """A cycle stopped on a fault.

    Attributes:
        instruction: The instruction word being executed (0 for fetch faults)
        pc: Program counter of the faulting instruction
        state: The faulted emulator state, kept for inspection
    """

    description = "CPU fault"

    def __init__(self, instruction: int, pc: int, state=None):
        self.instruction = instruction
        self.pc = pc
        self.state = state
        super().__init__(f"{self.description}: {instruction:04X} at 0x{pc:03X}")


class UnknownInstructionError(CpuFault):
    description = "Unknown opcode"


class MemoryFaultError(CpuFault):
    description = "Memory access out of range"


class StackOverflowError(CpuFault):
    description = "Stack overflow"


class StackUnderflowError(CpuFault):
    description = "Stack underflow"


FAULT_ERRORS = {
    Fault.UNKNOWN_INSTRUCTION: UnknownInstructionError,
    Fault.MEMORY: MemoryFaultError,
    Fault.STACK_OVERFLOW: StackOverflowError,
    Fault.STACK_UNDERFLOW: StackUnderflowError,
}


def raise_for_fault(state) -> None:
    """Raise the error matching the fault latched in ``state``, if any."""
    fault = Fault(int(state.fault))
    if fault is Fault.NONE:
        return
    raise FAULT_ERRORS[fault](int(state.fault_instruction), int(state.pc), state)
