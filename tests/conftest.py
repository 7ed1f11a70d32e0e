# tests/conftest.py
import pytest


class ScriptedSource:
    """Random source replaying fixed draws, then failing."""

    def __init__(self, draws):
        self.draws = list(draws)

    def random(self) -> float:
        if not self.draws:
            raise RuntimeError("scripted source exhausted")
        return self.draws.pop(0)


@pytest.fixture
def scripted():
    return ScriptedSource
