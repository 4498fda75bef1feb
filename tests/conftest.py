"""Shared fixtures: virtual clock, in-memory scores, scripted stimuli."""

import pytest


class ScriptedGenerator:
    """Stand-in RoundGenerator that hands out a fixed list of stimuli."""

    def __init__(self, stimuli):
        self.stimuli = list(stimuli)
        self.levels = []

    def next_stimulus(self, level=1):
        self.levels.append(level)
        return self.stimuli.pop(0)


@pytest.fixture
def scheduler():
    from reactivity.scheduler import ManualScheduler

    return ManualScheduler()


@pytest.fixture
def store():
    from reactivity.scores import MemoryScoreStore

    return MemoryScoreStore()


@pytest.fixture
def scripted():
    return ScriptedGenerator
