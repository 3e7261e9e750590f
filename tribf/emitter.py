from __future__ import annotations

from typing import Iterable, List

from .config import CompilerConfig, EofPolicy
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


INCLUDES = "#include <stdio.h>\n#include <inttypes.h>\n"
EPILOGUE = "return 0;\n}\n"

_EOF_REPLACEMENT = {
    EofPolicy.ZERO: "0",
    EofPolicy.NEG_ONE: "-1",
    EofPolicy.UNCHANGED: "*ptr",
}


class CEmitter:
    def __init__(self, config: CompilerConfig) -> None:
        self.config = config
        self.input_code = self._input_code()

    def _input_code(self) -> str:
        if self.config.eof is EofPolicy.RAW:
            return "*ptr=getchar();"
        replacement = _EOF_REPLACEMENT[self.config.eof]
        return f"inbuf=getchar();*ptr=(inbuf==({self.config.cell_type})(EOF))?{replacement}:inbuf;"

    def prologue(self) -> str:
        cell_type = self.config.cell_type
        return (
            INCLUDES
            + f"{cell_type} mem[{self.config.tape_length}]; {cell_type} *ptr = mem;\n"
            + f"{cell_type} inbuf;\n"
            + "int main() {\n"
        )

    def emit_instruction(self, instruction: Instruction) -> str:
        if isinstance(instruction, Add):
            return f"*ptr+={instruction.delta};"
        if isinstance(instruction, AddOffset):
            return f"*(ptr+{instruction.offset})+={instruction.delta};"
        if isinstance(instruction, Move):
            return f"ptr+={instruction.delta};"
        if isinstance(instruction, Zero):
            return "*ptr=0;"
        if isinstance(instruction, ZeroOffset):
            return f"*(ptr+{instruction.offset})=0;"
        if isinstance(instruction, Mult):
            return f"*(ptr+{instruction.offset})+=*ptr*{instruction.factor};"
        if isinstance(instruction, BeginLoop):
            return "while(*ptr){"
        if isinstance(instruction, EndLoop):
            return "}"
        if isinstance(instruction, Out):
            return "putchar(*ptr);"
        if isinstance(instruction, In):
            return self.input_code
        raise TypeError(f"Cannot emit {instruction!r}")

    def emit(self, instructions: Iterable[Instruction]) -> str:
        lines: List[str] = [self.prologue()]
        for instruction in instructions:
            lines.append(self.emit_instruction(instruction) + "\n")
        lines.append(EPILOGUE)
        return "".join(lines)


__all__ = ["CEmitter"]
