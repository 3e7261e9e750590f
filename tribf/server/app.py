from __future__ import annotations

import logging
from typing import Dict, List

from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel, Field, field_validator

from tribf.bf_interpreter import InstructionInterpreter, StepLimitExceeded
from tribf.compiler import BrainfuckCompiler
from tribf.config import DEFAULT_TAPE_LENGTH, CompilerConfig, ConfigError, EofPolicy


logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 1_000_000


def _string_to_input_bytes(data: str) -> List[int]:
    return list(data.encode("latin-1", errors="replace"))


class CompileRequest(BaseModel):
    code: str = ""
    bits: int = 8
    tape_length: int = DEFAULT_TAPE_LENGTH
    eof: EofPolicy = EofPolicy.RAW
    optimize: int = 3

    @field_validator("eof", mode="before")
    @classmethod
    def normalize_eof(cls, value):
        if isinstance(value, str):
            return value.lower().replace("_", "-")
        return value


class RunRequest(CompileRequest):
    input: str = ""
    max_steps: int = Field(default=DEFAULT_MAX_STEPS, ge=1)


class OptimizationSummary(BaseModel):
    input_length: int
    output_length: int
    matches: Dict[str, int]


class CompileResponse(BaseModel):
    c_source: str
    instructions: List[str]
    stats: OptimizationSummary


class RunResponse(BaseModel):
    output: str
    steps: int
    instructions: List[str]


def create_app() -> FastAPI:
    app = FastAPI(title="tribf API", version="0.1.0")

    def _compiler(payload: CompileRequest) -> BrainfuckCompiler:
        try:
            config = CompilerConfig(
                bits=payload.bits,
                tape_length=payload.tape_length,
                eof=payload.eof,
                optimize=payload.optimize,
            )
        except ConfigError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        return BrainfuckCompiler(config)

    @app.post("/api/compile", response_model=CompileResponse)
    def compile_program(payload: CompileRequest) -> CompileResponse:
        compiler = _compiler(payload)
        instructions, stats = compiler.lower(payload.code)
        return CompileResponse(
            c_source=compiler.emit(instructions),
            instructions=[str(instruction) for instruction in instructions],
            stats=OptimizationSummary(**stats.as_dict()),
        )

    @app.post("/api/run", response_model=RunResponse)
    def run_program(payload: RunRequest) -> RunResponse:
        compiler = _compiler(payload)
        instructions, _ = compiler.lower(payload.code)
        config = compiler.config
        interpreter = InstructionInterpreter(
            tape_length=config.tape_length,
            bits=config.bits,
            eof=config.eof,
        )
        steps = 0
        try:
            for state in interpreter.step(
                instructions,
                input_data=_string_to_input_bytes(payload.input),
                max_steps=payload.max_steps,
            ):
                steps = state.step
        except StepLimitExceeded as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
        except (IndexError, ValueError) as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        logger.debug("executed %d steps", steps)
        return RunResponse(
            output=bytes(interpreter.output_buffer).decode("latin-1"),
            steps=steps,
            instructions=[str(instruction) for instruction in instructions],
        )

    return app


__all__ = ["create_app"]
