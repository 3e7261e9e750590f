from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from .config import CompilerConfig
from .emitter import CEmitter
from .instructions import Instruction
from .optimizer import OptimizationStats, optimize_with_stats
from .tokenizer import parse


logger = logging.getLogger(__name__)


class BrainfuckCompiler:
    def __init__(self, config: Optional[CompilerConfig] = None) -> None:
        self.config = config or CompilerConfig()
        self.emitter = CEmitter(self.config)

    def compile(self, source: str) -> str:
        instructions, _ = self.lower(source)
        return self.emit(instructions)

    def lower(self, source: str) -> Tuple[List[Instruction], OptimizationStats]:
        """Run every stage up to, but not including, code emission."""
        instructions = self.parse(source)
        return self.optimize_with_stats(instructions)

    # --- Stages ---

    def parse(self, source: str) -> List[Instruction]:
        return parse(source, self.config.optimizations)

    def optimize(self, instructions: Sequence[Instruction]) -> List[Instruction]:
        optimized, _ = self.optimize_with_stats(instructions)
        return optimized

    def optimize_with_stats(
        self, instructions: Sequence[Instruction]
    ) -> Tuple[List[Instruction], OptimizationStats]:
        return optimize_with_stats(instructions, self.config.optimizations)

    def emit(self, instructions: Sequence[Instruction]) -> str:
        code = self.emitter.emit(instructions)
        logger.debug("emitted %d instructions as %d bytes of C", len(instructions), len(code))
        return code


__all__ = ["BrainfuckCompiler"]
