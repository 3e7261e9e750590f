from .bf_interpreter import ExecutionState, InstructionInterpreter, StepLimitExceeded
from .compiler import BrainfuckCompiler
from .config import CompilerConfig, ConfigError, EofPolicy, Optimizations

__all__ = [
    "BrainfuckCompiler",
    "CompilerConfig",
    "ConfigError",
    "EofPolicy",
    "ExecutionState",
    "InstructionInterpreter",
    "Optimizations",
    "StepLimitExceeded",
]
