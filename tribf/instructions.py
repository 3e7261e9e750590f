from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Union


# === Instruction kinds ===


@dataclass(frozen=True)
class Add:
    delta: int

    def __str__(self) -> str:
        return f"Add({self.delta})"


@dataclass(frozen=True)
class AddOffset:
    delta: int
    offset: int

    def __str__(self) -> str:
        return f"AddOffset({self.delta}, {self.offset})"


@dataclass(frozen=True)
class Zero:
    def __str__(self) -> str:
        return "Zero"


@dataclass(frozen=True)
class ZeroOffset:
    offset: int

    def __str__(self) -> str:
        return f"ZeroOffset({self.offset})"


@dataclass(frozen=True)
class Move:
    delta: int

    def __str__(self) -> str:
        return f"Move({self.delta})"


@dataclass(frozen=True)
class Mult:
    """Add ``factor`` times the current cell to the cell at ``offset``."""

    offset: int
    factor: int

    def __str__(self) -> str:
        return f"Mult({self.offset}, {self.factor})"


@dataclass(frozen=True)
class In:
    def __str__(self) -> str:
        return "In"


@dataclass(frozen=True)
class Out:
    def __str__(self) -> str:
        return "Out"


@dataclass(frozen=True)
class BeginLoop:
    def __str__(self) -> str:
        return "BeginLoop"


@dataclass(frozen=True)
class EndLoop:
    def __str__(self) -> str:
        return "EndLoop"


Instruction = Union[Add, AddOffset, Zero, ZeroOffset, Move, Mult, In, Out, BeginLoop, EndLoop]

INSTRUCTION_TYPES = (Add, AddOffset, Zero, ZeroOffset, Move, Mult, In, Out, BeginLoop, EndLoop)


def format_listing(instructions: Iterable[Instruction], indent: str = "  ") -> str:
    lines: List[str] = []
    depth = 0
    for instruction in instructions:
        if isinstance(instruction, EndLoop):
            depth = max(0, depth - 1)
        lines.append(f"{indent * depth}{instruction}")
        if isinstance(instruction, BeginLoop):
            depth += 1
    return "\n".join(lines)


__all__ = [
    "Add",
    "AddOffset",
    "BeginLoop",
    "EndLoop",
    "INSTRUCTION_TYPES",
    "In",
    "Instruction",
    "Move",
    "Mult",
    "Out",
    "Zero",
    "ZeroOffset",
    "format_listing",
]
