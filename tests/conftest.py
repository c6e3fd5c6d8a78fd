import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import random

import pygame
import pytest

import flappy


class FakeClock:
    """Millisecond clock the tests move by hand."""

    def __init__(self, now=0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture(scope="session", autouse=True)
def pygame_headless():
    pygame.font.init()
    yield
    pygame.quit()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def surface():
    return pygame.Surface((flappy.WIDTH, flappy.HEIGHT))


@pytest.fixture
def game(surface, clock):
    return flappy.Game(surface, scheduler=flappy.FrameScheduler(clock), rng=random.Random(1234))


@pytest.fixture
def running_game(game):
    game.activate()
    return game
