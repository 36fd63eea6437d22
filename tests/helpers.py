"""Shared helpers for the test suite."""

import json
from pathlib import Path

RESOURCES = Path(__file__).parent / "resources"

SECRET = "It's a Secret to Everybody"


def load_event(name: str) -> dict:
    """Load a sample webhook payload from test resources."""
    with open(RESOURCES / f"{name}.json", "r", encoding="utf-8") as f:
        return json.load(f)


def sha(n: int) -> str:
    """A distinct, well-formed 40-character commit sha."""
    return f"{n:040x}"


class FakeClock:
    """Settable clock in seconds, matching ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: int) -> None:
        self.now += ms / 1000
