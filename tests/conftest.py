import pytest


class Recorder:
    """Line sink that remembers everything written to it."""

    def __init__(self):
        self.lines: list[str] = []

    def __call__(self, line: str) -> None:
        self.lines.append(line)

    def clear(self) -> None:
        self.lines = []


@pytest.fixture
def recorder():
    """A fresh output sink for a filter or session."""
    return Recorder()


@pytest.fixture
def go_test_passing():
    """Output of a package whose tests all pass, as go test -v prints it."""
    return [
        "=== RUN   TestAdd",
        "    add_test.go:12: adding 1 and 2",
        "--- PASS: TestAdd (0.00s)",
        "=== RUN   TestTable",
        "=== RUN   TestTable/empty",
        "=== RUN   TestTable/single",
        "--- PASS: TestTable (0.00s)",
        "    --- PASS: TestTable/empty (0.00s)",
        "    --- PASS: TestTable/single (0.00s)",
        "PASS",
    ]


@pytest.fixture
def go_test_failing():
    """Output of a package with one failing sub-test."""
    return [
        "=== RUN   TestAdd",
        "--- PASS: TestAdd (0.00s)",
        "=== RUN   TestDiv",
        "=== RUN   TestDiv/by_one",
        "    --- PASS: TestDiv/by_one (0.00s)",
        "=== RUN   TestDiv/by_zero",
        "    div_test.go:30: expected error, got nil",
        "    --- FAIL: TestDiv/by_zero (0.00s)",
        "--- FAIL: TestDiv (0.00s)",
        "FAIL",
        "exit status 1",
    ]
