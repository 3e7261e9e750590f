from __future__ import annotations

import logging
from typing import List, Optional

from .config import Optimizations
from .instructions import Add, BeginLoop, EndLoop, In, Instruction, Move, Out, Zero


logger = logging.getLogger(__name__)

COMMANDS = frozenset("+-<>[],.")
ZERO_SENTINEL = "0"
CLEAR_LOOPS = ("[-]", "[+]")


def filter_source(text: str) -> str:
    return "".join(ch for ch in text if ch in COMMANDS)


def rewrite_clear_loops(code: str) -> str:
    for loop in CLEAR_LOOPS:
        code = code.replace(loop, ZERO_SENTINEL)
    return code


def _open(symbol: str) -> Optional[Instruction]:
    if symbol == "+":
        return Add(1)
    if symbol == "-":
        return Add(-1)
    if symbol == ">":
        return Move(1)
    if symbol == "<":
        return Move(-1)
    if symbol == ZERO_SENTINEL:
        return Zero()
    if symbol == ".":
        return Out()
    if symbol == ",":
        return In()
    if symbol == "[":
        return BeginLoop()
    if symbol == "]":
        return EndLoop()
    return None


def _extend(symbol: str, pending: Optional[Instruction]) -> Optional[Instruction]:
    """Fold ``symbol`` into ``pending``, or return None when it cannot."""
    if isinstance(pending, Add):
        if symbol == "+":
            return Add(pending.delta + 1)
        if symbol == "-":
            return Add(pending.delta - 1)
        if symbol == ZERO_SENTINEL:
            return Zero()
    elif isinstance(pending, Move):
        if symbol == ">":
            return Move(pending.delta + 1)
        if symbol == "<":
            return Move(pending.delta - 1)
    elif isinstance(pending, Zero):
        if symbol == ZERO_SENTINEL:
            return pending
    return None


def _is_noop(instruction: Instruction) -> bool:
    return isinstance(instruction, (Add, Move)) and instruction.delta == 0


def tokenize(code: str, clump: bool = True) -> List[Instruction]:
    """Turn filtered source into instructions, folding runs when ``clump`` is set.

    ``code`` may contain the zero sentinel produced by ``rewrite_clear_loops``.
    Characters outside the command set and the sentinel are ignored.
    """
    tokens: List[Instruction] = []
    pending: Optional[Instruction] = None
    for symbol in code:
        if clump:
            extended = _extend(symbol, pending)
            if extended is not None:
                pending = extended
                continue
        opened = _open(symbol)
        if opened is None:
            continue
        if pending is not None:
            tokens.append(pending)
        pending = opened
    if pending is not None:
        tokens.append(pending)
    return [token for token in tokens if not _is_noop(token)]


def parse(text: str, optimizations: Optimizations) -> List[Instruction]:
    code = filter_source(text)
    if optimizations.zero_loop:
        code = rewrite_clear_loops(code)
    tokens = tokenize(code, clump=optimizations.clump_ops)
    logger.debug("tokenized %d commands into %d instructions", len(code), len(tokens))
    return tokens


__all__ = [
    "COMMANDS",
    "ZERO_SENTINEL",
    "filter_source",
    "parse",
    "rewrite_clear_loops",
    "tokenize",
]
