from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from .config import Optimizations
from .instructions import Add, AddOffset, BeginLoop, EndLoop, Instruction, Move, Mult, Zero, ZeroOffset


logger = logging.getLogger(__name__)

WINDOW_SIZE = 8

# None marks padding past the end of the program.
Window = Sequence[Optional[Instruction]]


@dataclass(frozen=True)
class Match:
    shape: str
    consumed: int
    replacement: Tuple[Instruction, ...]


@dataclass
class OptimizationStats:
    input_length: int = 0
    output_length: int = 0
    matches: Counter = field(default_factory=Counter)

    def as_dict(self) -> dict:
        return {
            "input_length": self.input_length,
            "output_length": self.output_length,
            "matches": dict(self.matches),
        }


def _is_decrement(instruction: Optional[Instruction]) -> bool:
    return isinstance(instruction, Add) and instruction.delta == -1


def _opposite_signs(first: int, second: int) -> bool:
    return (first > 0 and second < 0) or (first < 0 and second > 0)


def _loop_body(window: Window, length: int) -> Optional[Tuple[Instruction, ...]]:
    """Body of a loop spanning exactly ``length`` slots, with the decrement removed.

    The decrement of the source cell may sit at either end of the body.
    """
    if not isinstance(window[0], BeginLoop) or not isinstance(window[length - 1], EndLoop):
        return None
    body = window[1 : length - 1]
    if _is_decrement(body[0]):
        return tuple(body[1:])
    if _is_decrement(body[-1]):
        return tuple(body[:-1])
    return None


def _match_move_loop(window: Window, flags: Optimizations) -> Optional[Match]:
    if not flags.move_loop:
        return None
    body = _loop_body(window, 6)
    if body is None:
        return None
    move1, add1, move2 = body
    if not (isinstance(move1, Move) and isinstance(add1, Add) and isinstance(move2, Move)):
        return None
    if move1.delta != -move2.delta:
        return None
    return Match("move_loop", 6, (Mult(move1.delta, add1.delta), Zero()))


def _match_copy_loop(window: Window, flags: Optimizations) -> Optional[Match]:
    if not flags.copy_loop:
        return None
    body = _loop_body(window, 8)
    if body is None:
        return None
    move1, add1, move2, add2, move3 = body
    if not (
        isinstance(move1, Move)
        and isinstance(add1, Add)
        and isinstance(move2, Move)
        and isinstance(add2, Add)
        and isinstance(move3, Move)
    ):
        return None
    if -move3.delta != move1.delta + move2.delta:
        return None
    if not (add1.delta == 1 and add2.delta == 1) and not flags.mult_loop:
        return None
    return Match(
        "copy_loop",
        8,
        (
            Mult(move1.delta, add1.delta),
            Mult(move1.delta + move2.delta, add2.delta),
            Zero(),
        ),
    )


def _offset_rewrite(first: Move, last: Move, target: Instruction) -> Tuple[Instruction, ...]:
    net = first.delta + last.delta
    if net == 0:
        return (target,)
    return (target, Move(net))


def _match_add_offset(window: Window, flags: Optimizations) -> Optional[Match]:
    if not flags.add_offset:
        return None
    move1, add, move2 = window[0], window[1], window[2]
    if not (isinstance(move1, Move) and isinstance(add, Add) and isinstance(move2, Move)):
        return None
    if not _opposite_signs(move1.delta, move2.delta):
        return None
    return Match("add_offset", 3, _offset_rewrite(move1, move2, AddOffset(add.delta, move1.delta)))


def _match_zero_offset(window: Window, flags: Optimizations) -> Optional[Match]:
    if not flags.zero_offset:
        return None
    move1, zero, move2 = window[0], window[1], window[2]
    if not (isinstance(move1, Move) and isinstance(zero, Zero) and isinstance(move2, Move)):
        return None
    if not _opposite_signs(move1.delta, move2.delta):
        return None
    return Match("zero_offset", 3, _offset_rewrite(move1, move2, ZeroOffset(move1.delta)))


MATCHERS: Tuple[Callable[[Window, Optimizations], Optional[Match]], ...] = (
    _match_move_loop,
    _match_copy_loop,
    _match_add_offset,
    _match_zero_offset,
)


def match_window(window: Window, flags: Optimizations) -> Optional[Match]:
    """Try each idiom against ``window`` in priority order.

    ``window`` must hold exactly ``WINDOW_SIZE`` slots; ``None`` marks padding
    past the end of the program.
    """
    if len(window) != WINDOW_SIZE:
        raise ValueError(f"window must contain {WINDOW_SIZE} slots, got {len(window)}")
    for matcher in MATCHERS:
        match = matcher(window, flags)
        if match is not None:
            return match
    return None


def optimize_with_stats(
    instructions: Sequence[Instruction], flags: Optimizations
) -> Tuple[List[Instruction], OptimizationStats]:
    stats = OptimizationStats(input_length=len(instructions))
    padded: List[Optional[Instruction]] = list(instructions) + [None] * WINDOW_SIZE
    optimized: List[Instruction] = []
    index = 0
    while index < len(instructions):
        match = match_window(padded[index : index + WINDOW_SIZE], flags)
        if match is None:
            optimized.append(instructions[index])
            index += 1
            continue
        optimized.extend(match.replacement)
        stats.matches[match.shape] += 1
        index += match.consumed
    stats.output_length = len(optimized)
    logger.debug(
        "peephole pass: %d -> %d instructions, matches=%s",
        stats.input_length,
        stats.output_length,
        dict(stats.matches),
    )
    return optimized, stats


def optimize(instructions: Sequence[Instruction], flags: Optimizations) -> List[Instruction]:
    """Single forward pass; replacement instructions are never rescanned."""
    optimized, _ = optimize_with_stats(instructions, flags)
    return optimized


__all__ = [
    "MATCHERS",
    "Match",
    "OptimizationStats",
    "WINDOW_SIZE",
    "match_window",
    "optimize",
    "optimize_with_stats",
]
