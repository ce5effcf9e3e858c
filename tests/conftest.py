import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import random

import pytest

from trisolaris.data.scenarios import SimulationPreset, generate


@pytest.fixture
def figure8():
    return generate(SimulationPreset.STABLE_FIGURE_8, 1200, 800)


@pytest.fixture
def seeded_rng():
    return random.Random(1234)
