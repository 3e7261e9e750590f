import unittest

from tribf import EofPolicy, InstructionInterpreter, Optimizations, StepLimitExceeded
from tribf.instructions import Add, BeginLoop, EndLoop, In, Move, Out
from tribf.optimizer import optimize
from tribf.tokenizer import parse


HELLO_WORLD = (
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]>>.>---.+++++++..+++.>>."
    "<-.<.+++.------.--------.>>+.>++."
)


def _lower(source: str, level: int) -> list:
    flags = Optimizations.for_level(level)
    return optimize(parse(source, flags), flags)


class InstructionInterpreterTests(unittest.TestCase):
    def test_simple_output(self) -> None:
        interpreter = InstructionInterpreter()
        self.assertEqual(interpreter.run([Add(65), Out()]), b"A")

    def test_cells_wrap_at_cell_width(self) -> None:
        self.assertEqual(InstructionInterpreter(bits=8).run([Add(-1), Out()]), b"\xff")
        interpreter = InstructionInterpreter(bits=16)
        interpreter.run([Add(256)])
        self.assertEqual(interpreter.tape[0], 256)

    def test_step_limit_exceeded(self) -> None:
        interpreter = InstructionInterpreter()
        with self.assertRaises(StepLimitExceeded):
            interpreter.run([Add(1), BeginLoop(), EndLoop()], max_steps=10)

    def test_unbalanced_loops_rejected(self) -> None:
        with self.assertRaises(ValueError):
            InstructionInterpreter().run([BeginLoop()])
        with self.assertRaises(ValueError):
            InstructionInterpreter().run([EndLoop()])

    def test_tape_bounds(self) -> None:
        with self.assertRaises(IndexError):
            InstructionInterpreter().run([Move(-1)])
        with self.assertRaises(IndexError):
            InstructionInterpreter(tape_length=4).run([Move(4)])

    def test_step_snapshots(self) -> None:
        program = [Add(2), Out()]
        states = list(InstructionInterpreter().step(program, tape_window=2))
        self.assertEqual([state.instruction for state in states], [Add(2), Out(), None])
        self.assertEqual(states[-1].pc, len(program))
        self.assertEqual(states[-1].output, b"\x02")


class EofPolicyTests(unittest.TestCase):
    def read(self, policy: EofPolicy, input_data, bits: int = 8) -> bytes:
        interpreter = InstructionInterpreter(bits=bits, eof=policy)
        return interpreter.run([Add(7), In(), Out()], input_data=input_data)

    def test_raw_stores_eof_value(self) -> None:
        self.assertEqual(self.read(EofPolicy.RAW, []), b"\xff")

    def test_zero(self) -> None:
        self.assertEqual(self.read(EofPolicy.ZERO, []), b"\x00")

    def test_neg_one(self) -> None:
        self.assertEqual(self.read(EofPolicy.NEG_ONE, []), b"\xff")

    def test_unchanged(self) -> None:
        self.assertEqual(self.read(EofPolicy.UNCHANGED, []), b"\x07")

    def test_byte_reads_normally(self) -> None:
        for policy in EofPolicy:
            with self.subTest(policy=policy):
                self.assertEqual(self.read(policy, [65]), b"A")

    def test_byte_255_looks_like_eof_in_eight_bit_cells(self) -> None:
        self.assertEqual(self.read(EofPolicy.ZERO, [255]), b"\x00")
        self.assertEqual(self.read(EofPolicy.ZERO, [255], bits=16), b"\xff")


class SemanticEquivalenceTests(unittest.TestCase):
    PROGRAMS = [
        ("++++++++[>++++++++<-]>+.", []),
        ("+++++[->+>+<<]>.>.", []),
        ("+++[->++>+++<<]>.>.", []),
        (">>+++[<<++>>-]<<.>.>.", []),
        (">++<>[-]<.>.", []),
        (",>,<[->+<]>.", [3, 4]),
        ("+++>>>+++[-]<<<[>+>+<<-]>.>.>.", []),
        (">>>>+<<+<[-]>>>[<<<+>>>-]<<<.", []),
        (",[.,]", [104, 105]),
        (HELLO_WORLD, []),
    ]

    def _run(self, program: list, input_data: list) -> tuple:
        interpreter = InstructionInterpreter(tape_length=64, eof=EofPolicy.ZERO)
        output = interpreter.run(program, input_data=input_data, max_steps=1_000_000)
        return output, interpreter.pointer, list(interpreter.tape)

    def test_every_level_matches_unoptimized(self) -> None:
        for source, input_data in self.PROGRAMS:
            baseline = self._run(_lower(source, 0), input_data)
            for level in (1, 2, 3):
                with self.subTest(source=source, level=level):
                    self.assertEqual(self._run(_lower(source, level), input_data), baseline)

    def test_hello_world(self) -> None:
        output, _, _ = self._run(_lower(HELLO_WORLD, 3), [])
        self.assertEqual(output, b"Hello World!\n")

    def test_idioms_are_exercised(self) -> None:
        lowered = _lower("+++++[->+>+<<]>[->+<]>>+<<.>[-]<", 3)
        kinds = {type(instruction).__name__ for instruction in lowered}
        self.assertTrue({"Mult", "Zero", "AddOffset", "ZeroOffset"} <= kinds)


if __name__ == "__main__":
    unittest.main()
