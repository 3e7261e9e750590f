from __future__ import annotations

import unittest

from fastapi.testclient import TestClient

from tribf.server import create_app


HELLO_WORLD = (
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]>>.>---.+++++++..+++.>>."
    "<-.<.+++.------.--------.>>+.>++."
)


class CompileApiTests(unittest.TestCase):
    def setUp(self) -> None:
        self.client = TestClient(create_app())

    def _compile(self, **payload):
        response = self.client.post("/api/compile", json=payload)
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()

    def test_compile_returns_c_and_instructions(self) -> None:
        data = self._compile(code="[->+<]")
        self.assertEqual(data["instructions"], ["Mult(1, 1)", "Zero"])
        self.assertIn("*(ptr+1)+=*ptr*1;\n*ptr=0;\n", data["c_source"])
        self.assertTrue(data["c_source"].startswith("#include <stdio.h>\n"))
        self.assertEqual(data["stats"]["matches"], {"move_loop": 1})

    def test_compile_respects_optimization_level(self) -> None:
        data = self._compile(code="+++", optimize=0)
        self.assertEqual(data["instructions"], ["Add(1)", "Add(1)", "Add(1)"])
        self.assertEqual(data["stats"]["matches"], {})

    def test_compile_accepts_eof_policy_spelling(self) -> None:
        data = self._compile(code=",", eof="NEG_ONE", bits=16)
        self.assertIn("inbuf=getchar();*ptr=(inbuf==(int16_t)(EOF))?-1:inbuf;", data["c_source"])

    def test_invalid_bits_is_bad_request(self) -> None:
        response = self.client.post("/api/compile", json={"code": "+", "bits": 7})
        self.assertEqual(response.status_code, 400, response.text)
        self.assertIn("bit count", response.json()["detail"])

    def test_invalid_optimization_level_is_bad_request(self) -> None:
        response = self.client.post("/api/compile", json={"code": "+", "optimize": 9})
        self.assertEqual(response.status_code, 400, response.text)


class RunApiTests(unittest.TestCase):
    def setUp(self) -> None:
        self.client = TestClient(create_app())

    def test_run_hello_world(self) -> None:
        response = self.client.post("/api/run", json={"code": HELLO_WORLD})
        self.assertEqual(response.status_code, 200, response.text)
        payload = response.json()
        self.assertEqual(payload["output"], "Hello World!\n")
        self.assertGreater(payload["steps"], 0)

    def test_run_with_input(self) -> None:
        response = self.client.post(
            "/api/run",
            json={"code": ",[.,]", "input": "ab", "eof": "zero"},
        )
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["output"], "ab")

    def test_step_limit_conflict(self) -> None:
        response = self.client.post("/api/run", json={"code": "+[]", "max_steps": 10})
        self.assertEqual(response.status_code, 409, response.text)
        self.assertIn("detail", response.json())

    def test_tape_underflow_is_unprocessable(self) -> None:
        response = self.client.post("/api/run", json={"code": "<+"})
        self.assertEqual(response.status_code, 422, response.text)

    def test_unbalanced_loop_is_unprocessable(self) -> None:
        response = self.client.post("/api/run", json={"code": "+["})
        self.assertEqual(response.status_code, 422, response.text)


if __name__ == "__main__":
    unittest.main()
