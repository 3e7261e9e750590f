from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from .config import DEFAULT_TAPE_LENGTH, EofPolicy
from .instructions import (
    Add,
    AddOffset,
    BeginLoop,
    EndLoop,
    In,
    Instruction,
    Move,
    Mult,
    Out,
    Zero,
    ZeroOffset,
)


class StepLimitExceeded(RuntimeError):
    """Raised when execution exceeds the configured step budget."""


@dataclass
class ExecutionState:
    step: int
    pc: int
    instruction: Optional[Instruction]
    pointer: int
    tape_start: int
    tape: List[int]
    output: bytes
    program_length: int


@dataclass
class InstructionInterpreter:
    """Executes instruction sequences with the semantics of the emitted C.

    Cells hold values modulo ``2 ** bits``. Input follows ``eof``; as in the
    generated C, a byte whose value equals ``(T)EOF`` in the cell type is
    indistinguishable from end of input.
    """

    tape_length: int = DEFAULT_TAPE_LENGTH
    bits: int = 8
    eof: EofPolicy = EofPolicy.RAW

    tape: List[int] = field(init=False, repr=False)
    pointer: int = field(init=False, repr=False)
    output_buffer: bytearray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.eof = EofPolicy(self.eof)
        self.reset()

    @property
    def modulus(self) -> int:
        return 1 << self.bits

    def reset(self) -> None:
        self.tape = [0] * self.tape_length
        self.pointer = 0
        self.output_buffer = bytearray()

    def run(
        self,
        program: Sequence[Instruction],
        input_data: Optional[Iterable[int]] = None,
        max_steps: Optional[int] = None,
    ) -> bytes:
        for _ in self.step(program, input_data=input_data, max_steps=max_steps):
            pass
        return bytes(self.output_buffer)

    def step(
        self,
        program: Sequence[Instruction],
        input_data: Optional[Iterable[int]] = None,
        max_steps: Optional[int] = None,
        tape_window: int = 10,
    ) -> Iterator[ExecutionState]:
        self.reset()
        input_iter = iter(list(input_data or []))
        jump_map = self._build_jump_map(program)
        pc = 0
        steps = 0
        program_length = len(program)

        while pc < program_length:
            if max_steps is not None and steps >= max_steps:
                raise StepLimitExceeded("Program exceeded allowed step count")

            instruction = program[pc]
            pc = self._execute_instruction(instruction, pc, jump_map, input_iter)
            steps += 1
            yield self._snapshot(pc, instruction, steps, program_length, tape_window)

        yield self._snapshot(pc, None, steps, program_length, tape_window)

    def _cell_index(self, offset: int) -> int:
        index = self.pointer + offset
        if index < 0:
            raise IndexError("Access before start of tape.")
        if index >= self.tape_length:
            raise IndexError("Access beyond the tape length.")
        return index

    def _add(self, offset: int, amount: int) -> None:
        index = self._cell_index(offset)
        self.tape[index] = (self.tape[index] + amount) % self.modulus

    def _read(self, input_iter: Iterator[int]) -> None:
        eof_value = -1 % self.modulus
        value = next(input_iter, None)
        inbuf = eof_value if value is None else value % self.modulus
        index = self._cell_index(0)
        if self.eof is EofPolicy.RAW or inbuf != eof_value:
            self.tape[index] = inbuf
        elif self.eof is EofPolicy.ZERO:
            self.tape[index] = 0
        elif self.eof is EofPolicy.NEG_ONE:
            self.tape[index] = eof_value

    def _execute_instruction(
        self,
        instruction: Instruction,
        pc: int,
        jump_map: Dict[int, int],
        input_iter: Iterator[int],
    ) -> int:
        new_pc = pc + 1
        if isinstance(instruction, Add):
            self._add(0, instruction.delta)
        elif isinstance(instruction, AddOffset):
            self._add(instruction.offset, instruction.delta)
        elif isinstance(instruction, Move):
            self.pointer += instruction.delta
            self._cell_index(0)
        elif isinstance(instruction, Zero):
            self.tape[self._cell_index(0)] = 0
        elif isinstance(instruction, ZeroOffset):
            self.tape[self._cell_index(instruction.offset)] = 0
        elif isinstance(instruction, Mult):
            self._add(instruction.offset, self.tape[self._cell_index(0)] * instruction.factor)
        elif isinstance(instruction, Out):
            self.output_buffer.append(self.tape[self._cell_index(0)] & 0xFF)
        elif isinstance(instruction, In):
            self._read(input_iter)
        elif isinstance(instruction, BeginLoop):
            if self.tape[self._cell_index(0)] == 0:
                new_pc = jump_map[pc] + 1
        elif isinstance(instruction, EndLoop):
            if self.tape[self._cell_index(0)] != 0:
                new_pc = jump_map[pc] + 1
        else:
            raise TypeError(f"Cannot execute {instruction!r}")
        return new_pc

    def _snapshot(
        self,
        pc: int,
        instruction: Optional[Instruction],
        step: int,
        program_length: int,
        tape_window: int,
    ) -> ExecutionState:
        start = max(0, self.pointer - tape_window)
        end = min(self.tape_length, self.pointer + tape_window + 1)
        tape_view = self.tape[start:end].copy()
        return ExecutionState(
            step=step,
            pc=pc,
            instruction=instruction,
            pointer=self.pointer,
            tape_start=start,
            tape=tape_view,
            output=bytes(self.output_buffer),
            program_length=program_length,
        )

    def _build_jump_map(self, program: Sequence[Instruction]) -> Dict[int, int]:
        jump_map: Dict[int, int] = {}
        stack: List[int] = []
        for index, instruction in enumerate(program):
            if isinstance(instruction, BeginLoop):
                stack.append(index)
            elif isinstance(instruction, EndLoop):
                if not stack:
                    raise ValueError("Unmatched EndLoop at position {}".format(index))
                start = stack.pop()
                jump_map[start] = index
                jump_map[index] = start
        if stack:
            raise ValueError("Unmatched BeginLoop at position {}".format(stack.pop()))
        return jump_map


__all__ = [
    "ExecutionState",
    "InstructionInterpreter",
    "StepLimitExceeded",
]
