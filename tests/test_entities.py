import math
import random

import pytest

from flappy import (
    COIN_GRAVITY,
    COIN_SPEED_MAX,
    COIN_SPEED_MIN,
    COIN_UPWARD_BIAS,
    GRAVITY,
    JUMP_VELOCITY,
    ROTATION_MAX,
    ROTATION_MIN,
    Bird,
    Coin,
    Obstacle,
    clamp,
)


def test_clamp():
    assert clamp(5, 0, 3) == 3
    assert clamp(-1, 0, 3) == 0
    assert clamp(2, 0, 3) == 2


def test_bird_update_applies_gravity_before_moving():
    bird = Bird(y=200, velocity=1.5)
    bird.update()
    assert bird.velocity == 1.5 + GRAVITY
    assert bird.y == 200 + 1.5 + GRAVITY


def test_flap_overwrites_velocity():
    bird = Bird(velocity=3)
    bird.flap()
    assert bird.velocity == JUMP_VELOCITY


def test_rotation_is_smoothed_towards_velocity():
    bird = Bird()
    bird.update()
    assert bird.rotation == pytest.approx(0.2 * (GRAVITY * 2))


def test_rotation_is_clamped():
    falling = Bird(velocity=100)
    for _ in range(20):
        falling.update()
    assert falling.rotation == ROTATION_MAX

    rising = Bird(velocity=-50, rotation=-20)
    rising.update()
    assert rising.rotation == ROTATION_MIN


def test_rotation_does_not_touch_physics():
    a = Bird(rotation=0)
    b = Bird(rotation=40)
    a.update()
    b.update()
    assert (a.y, a.velocity) == (b.y, b.velocity)


@pytest.mark.parametrize("y, out", [(-0.1, True), (0, False), (600, False), (600.5, True), (300, False)])
def test_bird_bounds(y, out):
    assert Bird(y=y).is_out_of_bounds() is out


def test_obstacle_scrolls_left():
    obstacle = Obstacle(400, 100)
    obstacle.update()
    assert obstacle.x == 398


@pytest.mark.parametrize("x, gone", [(-51, True), (-50, False), (-49, False), (0, False)])
def test_obstacle_off_screen(x, gone):
    assert Obstacle(x, 100).is_off_screen() is gone


def test_collision_above_gap():
    # bird top 30 is above the gap starting at 100
    assert Obstacle(40, 100).collides_with(Bird(y=50, size=20))


def test_collision_below_gap():
    # bird bottom 280 is below the gap ending at 250
    assert Obstacle(40, 100).collides_with(Bird(y=260, size=20))


@pytest.mark.parametrize("y", [120, 175, 230])
def test_no_collision_inside_gap(y):
    assert not Obstacle(40, 100).collides_with(Bird(y=y, size=20))


@pytest.mark.parametrize("x", [70, -20])
def test_no_collision_without_horizontal_overlap(x):
    # edges touching exactly do not overlap
    assert not Obstacle(x, 100).collides_with(Bird(y=50, size=20))


def test_passed_once_trailing_edge_is_behind_bird():
    assert not Obstacle(0, 100).is_passed_by(Bird())
    assert Obstacle(-1, 100).is_passed_by(Bird())


def test_segments_surround_gap():
    top, bottom = Obstacle(100, 200).segments()
    assert (top.x, top.y, top.width, top.height) == (100, 0, 50, 200)
    assert (bottom.x, bottom.y, bottom.width, bottom.height) == (100, 350, 50, 250)


def test_coin_burst_speed_and_bias():
    rng = random.Random(7)
    for _ in range(50):
        coin = Coin.burst(rng, 200, 300)
        speed = math.hypot(coin.vx, coin.vy + COIN_UPWARD_BIAS)
        assert COIN_SPEED_MIN - 1e-9 <= speed <= COIN_SPEED_MAX + 1e-9
        assert (coin.x, coin.y) == (200, 300)


def test_coin_update():
    coin = Coin(x=100, y=100, vx=2, vy=-3, size=8, angle=10, spin=5)
    coin.update()
    assert (coin.x, coin.y) == (102, 97)
    assert coin.vy == -3 + COIN_GRAVITY
    assert coin.angle == 15


def test_coin_gravity_is_weaker_than_bird():
    assert 0 < COIN_GRAVITY < GRAVITY


@pytest.mark.parametrize(
    "x, y, gone",
    [(200, 601, True), (-1, 300, True), (401, 300, True), (200, -50, False), (200, 300, False)],
)
def test_coin_off_screen(x, y, gone):
    assert Coin(x=x, y=y, vx=0, vy=0, size=8).is_off_screen() is gone
