from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


VALID_BITS = (8, 16, 32, 64)
MAX_OPTIMIZATION_LEVEL = 3
DEFAULT_TAPE_LENGTH = 30000


class ConfigError(ValueError):
    """Raised when a compiler configuration value is out of range."""


class EofPolicy(str, Enum):
    RAW = "raw"
    ZERO = "zero"
    NEG_ONE = "neg-one"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class Optimizations:
    zero_loop: bool = False
    clump_ops: bool = False
    move_loop: bool = False
    copy_loop: bool = False
    mult_loop: bool = False
    add_offset: bool = False
    zero_offset: bool = False

    @classmethod
    def for_level(cls, level: int) -> "Optimizations":
        """Flags enabled at ``level``; each level keeps everything below it."""
        if not 0 <= level <= MAX_OPTIMIZATION_LEVEL:
            raise ConfigError(
                f"optimization level must be between 0 and {MAX_OPTIMIZATION_LEVEL}, got {level}"
            )
        return cls(
            zero_loop=level >= 1,
            clump_ops=level >= 1,
            move_loop=level >= 2,
            copy_loop=level >= 2,
            mult_loop=level >= 2,
            add_offset=level >= 3,
            zero_offset=level >= 3,
        )


@dataclass(frozen=True)
class CompilerConfig:
    bits: int = 8
    tape_length: int = DEFAULT_TAPE_LENGTH
    eof: EofPolicy = EofPolicy.RAW
    optimize: int = MAX_OPTIMIZATION_LEVEL

    optimizations: Optimizations = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.bits not in VALID_BITS:
            raise ConfigError(f"bit count must be 8, 16, 32, or 64, got {self.bits}")
        if isinstance(self.tape_length, bool) or not isinstance(self.tape_length, int):
            raise ConfigError(f"tape length must be an integer, got {self.tape_length!r}")
        if self.tape_length <= 0:
            raise ConfigError(f"tape length must be positive, got {self.tape_length}")
        if isinstance(self.optimize, bool) or not isinstance(self.optimize, int):
            raise ConfigError(f"optimization level must be an integer, got {self.optimize!r}")
        try:
            eof = EofPolicy(self.eof)
        except ValueError as exc:
            raise ConfigError(f"unknown end-of-input policy: {self.eof!r}") from exc
        object.__setattr__(self, "eof", eof)
        object.__setattr__(self, "optimizations", Optimizations.for_level(self.optimize))

    @property
    def cell_type(self) -> str:
        return f"int{self.bits}_t"


__all__ = [
    "CompilerConfig",
    "ConfigError",
    "DEFAULT_TAPE_LENGTH",
    "EofPolicy",
    "MAX_OPTIMIZATION_LEVEL",
    "Optimizations",
    "VALID_BITS",
]
