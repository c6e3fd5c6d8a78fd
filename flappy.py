# flappy.py
# -------------------------------------------------------------
# Flappy Bird in a single file (Python + pygame)
# License: MIT
# -------------------------------------------------------------
# Requirements:
#   - Python 3.10+
#   - pygame >= 2.3
# Run:
#   - pip install -e .
#   - flappy            (or: python flappy.py --seed 42)
# -------------------------------------------------------------

import argparse
import heapq
import itertools
import logging
import math
import os
import random
import sys
from dataclasses import dataclass, field
from functools import partial

import pygame

logger = logging.getLogger("flappy")

# -------------------------------------------------------------
# Global constants
# -------------------------------------------------------------
WIDTH, HEIGHT = 400, 600  # logical playfield
FPS = 60
TITLE = "Flappy Bird"

# Colours (R, G, B)
SKY = (135, 206, 235)
BIRD_GOLD = (255, 215, 0)
BIRD_ORANGE = (255, 140, 0)
PIPE_GREEN = (46, 204, 113)
PIPE_DARK = (39, 174, 96)
COIN_GOLD = (255, 193, 37)
COIN_DARK = (184, 134, 11)
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)

# Bird physics (units per frame)
BIRD_X = 50
BIRD_START_Y = 200
BIRD_SIZE = 20
GRAVITY = 0.5
JUMP_VELOCITY = -8

# Tilt: purely cosmetic, in degrees
ROTATION_MIN, ROTATION_MAX = -30, 45
ROTATION_KEEP = 0.8
ROTATION_FOLLOW = 0.2
ROTATION_PER_VELOCITY = 2

# Obstacles
OBSTACLE_WIDTH = 50
GAP_HEIGHT = 150
SCROLL_SPEED = 2
SPAWN_INTERVAL_MS = 2000

# Coin burst
COIN_MILESTONE = 10
COIN_COUNT = 20
COIN_SPEED_MIN, COIN_SPEED_MAX = 2.0, 6.0
COIN_UPWARD_BIAS = 4.0
COIN_GRAVITY = 0.2
COIN_SIZE_MIN, COIN_SIZE_MAX = 6.0, 12.0
COIN_SPIN_MAX = 12.0  # degrees per frame

# UI
BIG_FONT_SIZE = 48
MID_FONT_SIZE = 28
SMALL_FONT_SIZE = 24

# Assets (optional, looked up in --assets)
BIRD_SPRITE = "bird.png"
OBSTACLE_SPRITE = "obstacle.png"

# Game states
NOT_STARTED, RUNNING, OVER = "NOT_STARTED", "RUNNING", "OVER"


class SurfaceUnavailableError(RuntimeError):
    """Raised when the game is built without a drawing surface."""


# -------------------------------------------------------------
# Utilities
# -------------------------------------------------------------
def clamp(value: float, a: float, b: float) -> float:
    """Constrain value to [a, b]."""
    return max(a, min(b, value))


def has_size(image) -> bool:
    """True when image is loaded and has a non-zero intrinsic size."""
    return image is not None and image.get_width() > 0 and image.get_height() > 0


def setup_logging(level: str = "info") -> None:
    """Configure the flappy logger with a compact one-line format."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname).1s] %(name)s: %(message)s", "%H:%M:%S"))
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))


# -------------------------------------------------------------
# Assets
# -------------------------------------------------------------
@dataclass
class Assets:
    bird: pygame.Surface | None = None
    obstacle: pygame.Surface | None = None


def load_image(path: str):
    """Load an image, or return None when it is missing or unreadable."""
    if not os.path.isfile(path):
        logger.debug("no sprite at %s, using shapes", path)
        return None
    try:
        image = pygame.image.load(path)
    except pygame.error as exc:
        logger.warning("failed to load %s: %s", path, exc)
        return None
    if pygame.display.get_surface() is not None:
        image = image.convert_alpha()
    return image


def load_assets(directory: str | None) -> Assets:
    if not directory:
        return Assets()
    return Assets(
        bird=load_image(os.path.join(directory, BIRD_SPRITE)),
        obstacle=load_image(os.path.join(directory, OBSTACLE_SPRITE)),
    )


# -------------------------------------------------------------
# Scheduling
# -------------------------------------------------------------
class FrameScheduler:
    """Frame requests and one-shot timers, run cooperatively by the main loop.

    Only one frame request is pending at a time; each frame callback asks for
    the next one. Timers fire from ``fire_timers`` in due order, and a timer
    armed while firing is never run in the same pass.
    """

    def __init__(self, clock=None):
        self.clock = clock or pygame.time.get_ticks
        self._handles = itertools.count(1)
        self._frame = None
        self._timers = []

    @property
    def frame_pending(self) -> bool:
        return self._frame is not None

    @property
    def pending_timers(self) -> int:
        return len(self._timers)

    def request_frame(self, callback) -> int:
        handle = next(self._handles)
        self._frame = (handle, callback)
        return handle

    def cancel_frame(self, handle: int) -> None:
        if self._frame is not None and self._frame[0] == handle:
            self._frame = None

    def run_frame(self) -> bool:
        """Run the pending frame callback; False when nothing was requested."""
        if self._frame is None:
            return False
        _, callback = self._frame
        self._frame = None
        callback()
        return True

    def call_later(self, delay_ms: float, callback) -> int:
        handle = next(self._handles)
        heapq.heappush(self._timers, (self.clock() + delay_ms, handle, callback))
        return handle

    def fire_timers(self) -> int:
        now = self.clock()
        due = []
        while self._timers and self._timers[0][0] <= now:
            due.append(heapq.heappop(self._timers))
        for _, _, callback in due:
            callback()
        return len(due)


# -------------------------------------------------------------
# Entities
# -------------------------------------------------------------
@dataclass
class Bird:
    x: float = BIRD_X
    y: float = BIRD_START_Y
    velocity: float = 0.0
    rotation: float = 0.0
    size: float = BIRD_SIZE

    def flap(self):
        """Overwrite the vertical velocity with the jump impulse."""
        self.velocity = JUMP_VELOCITY

    def update(self):
        """One frame of gravity, then the cosmetic tilt."""
        self.velocity += GRAVITY
        self.y += self.velocity
        target = self.velocity * ROTATION_PER_VELOCITY
        self.rotation = clamp(self.rotation * ROTATION_KEEP + target * ROTATION_FOLLOW, ROTATION_MIN, ROTATION_MAX)

    def is_out_of_bounds(self) -> bool:
        return self.y < 0 or self.y > HEIGHT

    def draw(self, surf: pygame.Surface, sprite=None):
        center = (int(self.x), int(self.y))
        if has_size(sprite):
            side = int(self.size * 2)
            image = pygame.transform.rotate(pygame.transform.scale(sprite, (side, side)), -self.rotation)
            surf.blit(image, image.get_rect(center=center))
            return
        pygame.draw.circle(surf, BIRD_GOLD, center, int(self.size))
        # Beak follows the tilt (screen y grows downwards)
        heading = math.radians(self.rotation)
        cos_h, sin_h = math.cos(heading), math.sin(heading)
        base = self.size - 2
        tip = self.size + 8
        points = [
            (self.x + cos_h * tip, self.y + sin_h * tip),
            (self.x + cos_h * base - sin_h * 5, self.y + sin_h * base + cos_h * 5),
            (self.x + cos_h * base + sin_h * 5, self.y + sin_h * base - cos_h * 5),
        ]
        pygame.draw.polygon(surf, BIRD_ORANGE, points)


class Obstacle:
    def __init__(self, x: float, gap_y: float, width: float = OBSTACLE_WIDTH, gap_height: float = GAP_HEIGHT):
        self.x = x
        self.gap_y = gap_y
        self.width = width
        self.gap_height = gap_height
        self.passed = False  # scored once

    def update(self, speed: float = SCROLL_SPEED):
        self.x -= speed

    def is_off_screen(self) -> bool:
        return self.x < -self.width

    def is_passed_by(self, bird: Bird) -> bool:
        """Trailing edge is behind the bird."""
        return self.x + self.width < bird.x

    def collides_with(self, bird: Bird) -> bool:
        r = bird.size
        overlaps_x = bird.x + r > self.x and bird.x - r < self.x + self.width
        misses_gap = bird.y - r < self.gap_y or bird.y + r > self.gap_y + self.gap_height
        return overlaps_x and misses_gap

    def segments(self):
        """(top, bottom) rectangles around the gap."""
        bottom_y = self.gap_y + self.gap_height
        top = pygame.Rect(int(self.x), 0, self.width, int(self.gap_y))
        bottom = pygame.Rect(int(self.x), int(bottom_y), self.width, int(HEIGHT - bottom_y))
        return top, bottom

    def draw(self, surf: pygame.Surface, sprite=None):
        top, bottom = self.segments()
        for rect, flipped in ((top, True), (bottom, False)):
            if rect.height <= 0:
                continue
            if has_size(sprite):
                image = pygame.transform.scale(sprite, rect.size)
                if flipped:
                    image = pygame.transform.flip(image, False, True)
                surf.blit(image, rect)
                continue
            pygame.draw.rect(surf, PIPE_GREEN, rect)
            # Dark rim on the edge facing the gap
            rim_y = rect.bottom - 8 if flipped else rect.top
            pygame.draw.rect(surf, PIPE_DARK, (rect.x, rim_y, rect.width, min(8, rect.height)))


@dataclass
class Coin:
    x: float
    y: float
    vx: float
    vy: float
    size: float
    angle: float = 0.0
    spin: float = 0.0

    @classmethod
    def burst(cls, rng: random.Random, x: float, y: float) -> "Coin":
        """A coin thrown in a random direction, biased upwards."""
        heading = rng.uniform(0, 2 * math.pi)
        speed = rng.uniform(COIN_SPEED_MIN, COIN_SPEED_MAX)
        return cls(
            x=x,
            y=y,
            vx=math.cos(heading) * speed,
            vy=math.sin(heading) * speed - COIN_UPWARD_BIAS,
            size=rng.uniform(COIN_SIZE_MIN, COIN_SIZE_MAX),
            angle=rng.uniform(0, 360),
            spin=rng.uniform(-COIN_SPIN_MAX, COIN_SPIN_MAX),
        )

    def update(self):
        self.x += self.vx
        self.y += self.vy
        self.vy += COIN_GRAVITY
        self.angle += self.spin

    def is_off_screen(self) -> bool:
        return self.y > HEIGHT or self.x < 0 or self.x > WIDTH

    def draw(self, surf: pygame.Surface):
        # Spinning coin: the visible face narrows as it turns edge-on
        face = max(1, int(self.size * 2 * abs(math.cos(math.radians(self.angle)))))
        rect = pygame.Rect(0, 0, face, int(self.size * 2))
        rect.center = (int(self.x), int(self.y))
        pygame.draw.ellipse(surf, COIN_GOLD, rect)
        if face > 4:
            pygame.draw.ellipse(surf, COIN_DARK, rect, 2)


@dataclass
class Session:
    """Everything that a restart throws away."""

    bird: Bird = field(default_factory=Bird)
    obstacles: list = field(default_factory=list)
    coins: list = field(default_factory=list)
    score: int = 0
    state: str = NOT_STARTED
    celebrated: bool = False


# -------------------------------------------------------------
# Rendering
# -------------------------------------------------------------
class Renderer:
    def __init__(self, surface: pygame.Surface, assets: Assets | None = None):
        if surface is None:
            raise SurfaceUnavailableError("no drawing surface to render on")
        if not pygame.font.get_init():
            pygame.font.init()
        self.surface = surface
        self.assets = assets or Assets()
        self.font_big = pygame.font.SysFont(None, BIG_FONT_SIZE)
        self.font_mid = pygame.font.SysFont(None, MID_FONT_SIZE)
        self.font_small = pygame.font.SysFont(None, SMALL_FONT_SIZE)

    def draw(self, session: Session):
        """Draw the session as it stands; never changes it."""
        self.surface.fill(SKY)
        session.bird.draw(self.surface, self.assets.bird)
        for obstacle in session.obstacles:
            obstacle.draw(self.surface, self.assets.obstacle)
        for coin in session.coins:
            coin.draw(self.surface)
        self.draw_score(session.score)

        if session.state == NOT_STARTED:
            self.draw_center_text("Press Space to Start", self.font_mid, dy=40)
        elif session.state == OVER:
            self.draw_game_over()

    def draw_text_shadow(self, text: str, font: pygame.font.Font, x: int, y: int, center=True):
        """Draw white text with a black shadow for readability."""
        surf = font.render(text, True, WHITE)
        shadow = font.render(text, True, BLACK)
        rect = surf.get_rect()
        if center:
            rect.center = (x, y)
        else:
            rect.topleft = (x, y)
        self.surface.blit(shadow, rect.move(2, 2))
        self.surface.blit(surf, rect)

    def draw_score(self, score: int):
        self.draw_text_shadow(f"Score: {score}", self.font_small, 10, 10, center=False)

    def draw_game_over(self):
        self.draw_center_text("Game Over!", self.font_big, dy=0)
        self.draw_center_text("Press Space to Restart", self.font_small, dy=50)

    def draw_center_text(self, text: str, font: pygame.font.Font, dy: int = 0):
        self.draw_text_shadow(text, font, WIDTH // 2, HEIGHT // 2 + dy, center=True)


# -------------------------------------------------------------
# Game loop controller
# -------------------------------------------------------------
class Game:
    def __init__(self, screen: pygame.Surface, scheduler: FrameScheduler | None = None,
                 rng: random.Random | None = None, assets: Assets | None = None):
        self.renderer = Renderer(screen, assets)
        self.scheduler = scheduler or FrameScheduler()
        self.rng = rng or random.Random()
        self.session = Session()
        self.closed = False
        self._frame_handle = self.scheduler.request_frame(self._on_frame)

    # ----------------------- input -------------------------
    def handle_event(self, event: pygame.event.Event):
        """Only the space bar drives the game; closing the window tears it down."""
        if event.type == pygame.QUIT:
            self.close()
        elif event.type == pygame.KEYDOWN and event.key == pygame.K_SPACE:
            self.activate()

    def activate(self):
        state = self.session.state
        if state == NOT_STARTED:
            self.start()
        elif state == RUNNING:
            self.session.bird.flap()
        else:
            self.reset()
            self.start()

    # ---------------------- lifecycle ----------------------
    def start(self):
        """Begin play and arm the spawner; the first obstacle comes next frame."""
        self.session.state = RUNNING
        self.scheduler.call_later(0, partial(self._spawn_tick, self.session))
        logger.info("game started")

    def reset(self):
        """Replace the session with a fresh one in NOT_STARTED."""
        self.session = Session()
        logger.info("game reset")

    def end_game(self, reason: str):
        if self.session.state != RUNNING:
            return
        self.session.state = OVER
        logger.info("game over (%s), score %d", reason, self.session.score)

    def close(self):
        """Tear the view down: no further frames are run."""
        if self.closed:
            return
        self.scheduler.cancel_frame(self._frame_handle)
        self.closed = True
        logger.info("view closed")

    # ----------------------- logic -------------------------
    def _spawn_tick(self, session: Session):
        # Stale timers from an earlier session, or after game over, do nothing
        if session is not self.session or session.state != RUNNING:
            return
        self.spawn_obstacle()
        self.scheduler.call_later(SPAWN_INTERVAL_MS, partial(self._spawn_tick, session))

    def spawn_obstacle(self) -> Obstacle:
        gap_y = self.rng.random() * (HEIGHT - GAP_HEIGHT)
        obstacle = Obstacle(WIDTH, gap_y)
        self.session.obstacles.append(obstacle)
        logger.debug("obstacle spawned, gap at %.1f", gap_y)
        return obstacle

    def step(self):
        """Advance one frame: physics, spawner, collisions and scoring, coins."""
        running = self.session.state == RUNNING
        if running:
            bird = self.session.bird
            bird.update()
            if bird.is_out_of_bounds():
                self.end_game("out of bounds")
        self.scheduler.fire_timers()
        if running:
            self.update_obstacles()
            self.update_coins()

    def update_obstacles(self):
        session = self.session
        bird = session.bird
        for obstacle in session.obstacles:
            obstacle.update()
            if session.state == RUNNING and obstacle.collides_with(bird):
                self.end_game("collision")
            if not obstacle.passed and obstacle.is_passed_by(bird):
                obstacle.passed = True
                session.score += 1
                logger.debug("score %d", session.score)
        session.obstacles = [o for o in session.obstacles if not o.is_off_screen()]

    def update_coins(self):
        session = self.session
        if session.score == COIN_MILESTONE and not session.celebrated:
            session.celebrated = True
            session.coins.extend(Coin.burst(self.rng, WIDTH / 2, HEIGHT / 2) for _ in range(COIN_COUNT))
            logger.info("score %d reached, coin burst", COIN_MILESTONE)
        for coin in session.coins:
            coin.update()
        session.coins = [c for c in session.coins if not c.is_off_screen()]

    def _on_frame(self):
        self.step()
        self.renderer.draw(self.session)
        self._frame_handle = self.scheduler.request_frame(self._on_frame)


# -------------------------------------------------------------
# Main loop
# -------------------------------------------------------------
def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Flappy Bird with pygame.")
    parser.add_argument("--fps", type=int, default=FPS, help="Frames per second.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for gaps and coin bursts.")
    parser.add_argument("--assets", default=None, help="Directory holding bird.png and obstacle.png.")
    parser.add_argument("--log-level", default="info", help="debug, info, warning or error.")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.log_level)

    pygame.init()
    pygame.display.set_caption(TITLE)
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    clock = pygame.time.Clock()

    game = Game(screen, rng=random.Random(args.seed), assets=load_assets(args.assets))

    while game.scheduler.frame_pending:
        clock.tick(args.fps)

        for event in pygame.event.get():
            game.handle_event(event)

        if game.scheduler.run_frame():
            pygame.display.flip()

    pygame.quit()


if __name__ == "__main__":
    main()
