"""
Shared fixtures for the match planner tests.
"""

import sys
from pathlib import Path

import pytest

# Add the matchplan package to the path
sys.path.append(str(Path(__file__).parent.parent))

from matchplan.models import Participant


def make_participants(*ids, seeded=False):
    """Participants labelled by id, optionally seeded in argument order."""
    return [
        Participant(pid, pid, seed=i if seeded else None)
        for i, pid in enumerate(ids, start=1)
    ]


@pytest.fixture
def four():
    return make_participants("A", "B", "C", "D")


@pytest.fixture
def three():
    return make_participants("A", "B", "C")


@pytest.fixture
def five():
    return make_participants("P1", "P2", "P3", "P4", "P5")
