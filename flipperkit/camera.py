"""The eye of the table: view switching, nudging, tilt and camera motion."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from flipperkit.signals import Signal

DIFF_FACTOR = 0.05
NUDGE_TICKS = 75
NUDGE_RETURN_TICK = 40
NUDGE_TILT_COST = 125
TILT_LIMIT = 200
TILT_WARNING_LIMIT = 150

VIEW_KEYS = ("F5", "F6", "F7", "F8")
BOTTOM_NUDGE_KEY = "bottomnudge"
LEFT_NUDGE_KEY = "leftnudge"
RIGHT_NUDGE_KEY = "rightnudge"

# (translation, rotation) for each view
VIEWS: dict[int, tuple[tuple[float, float, float], tuple[float, float, float]]] = {
    0: ((-1.75, 40.0, 40.0), (0.15, 0.0, 0.0)),   # locked
    1: ((-1.75, 35.0, 37.0), (0.14, 0.0, 0.0)),   # soft pan & scan
    2: ((-1.75, 32.0, 34.0), (0.14, 0.0, 0.0)),   # moving pan & scan
    3: ((-1.75, 40.0, 10.0), (0.23, 0.0, 0.0)),   # top
    4: ((0.0, 70.05, 0.0), (0.25, 0.0, 0.0)),     # full
}

_REVERSE_NUDGE = {
    Signal.BNUDGE: Signal.TNUDGE,
    Signal.LNUDGE: Signal.RNUDGE,
    Signal.RNUDGE: Signal.LNUDGE,
}

SendFn = Callable[[int, int], None]


@dataclass
class Body:
    """Position and rotation of a scene group."""

    translation: list[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    rotation: list[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])

    def add_translation(self, x: float, y: float, z: float) -> None:
        self.translation = [a + b for a, b in zip(self.translation, (x, y, z))]

    def add_rotation(self, x: float, y: float, z: float) -> None:
        self.rotation = [a + b for a, b in zip(self.rotation, (x, y, z))]


class EyeBehavior:
    """Moves the camera after the balls and handles nudging and tilt.

    ``key_down(name)`` tells whether a key is held; ``balls()`` yields the
    positions of the active balls in ball order.
    """

    def __init__(self, body: Body, send: SendFn, key_down: Callable[[str], bool],
                 balls: Callable[[], Iterable[tuple[float, float, float]]],
                 sounds: Any = None) -> None:
        self.body = body
        self.send = send
        self.key_down = key_down
        self.balls = balls
        self.sounds = sounds
        self.sound = -1
        self.view = 0
        self._reset()

    def _reset(self) -> None:
        self.nudge_tick = 0
        self.nudge_type = 0
        self.tilt_tick = 0
        self.x_nudge = 0.0
        self.z_nudge = 0.0
        self.tilted = False

    def on_signal(self, signal: int) -> None:
        if signal == Signal.RESET_ALL:
            self._reset()

    def _nudge(self, signal: Signal, x: float, z: float) -> None:
        self.x_nudge = x
        self.z_nudge = z
        self.tilt_tick += NUDGE_TILT_COST
        self.nudge_tick = NUDGE_TICKS
        self.nudge_type = signal
        self.send(signal, 0)
        if self.sounds is not None:
            self.sounds.play_sample(self.sound, False)

    def _handle_nudge(self) -> None:
        if self.nudge_tick < 1:
            if not self.tilted:
                if self.key_down(BOTTOM_NUDGE_KEY):
                    self._nudge(Signal.BNUDGE, self.x_nudge, 2.0)
                elif self.key_down(LEFT_NUDGE_KEY):
                    self._nudge(Signal.LNUDGE, -2.0, self.z_nudge)
                elif self.key_down(RIGHT_NUDGE_KEY):
                    self._nudge(Signal.RNUDGE, 2.0, self.z_nudge)
        elif self.nudge_tick == NUDGE_RETURN_TICK:
            reverse = _REVERSE_NUDGE.get(self.nudge_type)
            if reverse is not None:
                self.send(reverse, 0)
            self.x_nudge = 0.0
            self.z_nudge = 0.0
            self.nudge_type = 0
        if self.nudge_tick > 0:
            self.nudge_tick -= 1

    def _handle_tilt(self) -> None:
        if self.tilt_tick > TILT_LIMIT:
            self.tilted = True
            self.send(Signal.TILT, 0)
            self.tilt_tick = 0
        elif self.tilt_tick > TILT_WARNING_LIMIT:
            self.send(Signal.TILT_WARNING, 0)
        if self.tilt_tick > 0:
            self.tilt_tick -= 1

    def _ball_focus(self) -> tuple[float, float, float]:
        bx = by = bz = 0.0
        count = 0
        for x, y, z in self.balls():
            if count == 0:
                bx, by, bz = x, y, z
            else:
                bx += x
                by = max(by, y)
                bz = max(bz, z)
            count += 1
        if count:
            bx /= count
        return bx, by, bz

    def on_tick(self) -> None:
        for view, key in enumerate(VIEW_KEYS):
            if self.key_down(key):
                self.view = view
                break

        self._handle_nudge()
        self._handle_tilt()

        bx, by, bz = self._ball_focus()
        cx, cy, cz = self.body.translation
        crx, cry, crz = self.body.rotation
        view = self.view if self.view in VIEWS else 0
        (tx, ty, tz), (rx, ry, rz) = VIEWS[view]

        if view == 1:
            target = (tx + bx * 0.075 + self.x_nudge, ty + by * 0.3, tz + bz * 0.15 + self.z_nudge)
            rot_target = (rx - bz * 0.00015, ry, rz)
        elif view == 2:
            target = (tx + bx * 0.08 + self.x_nudge, ty + by * 0.3, tz + bz * 0.3 + self.z_nudge)
            rot_target = (rx - bz * 0.0003, ry, rz)
        elif view == 3:
            target = (tx + bx * 0.15 + self.x_nudge, ty + by * 0.4, tz + bz * 0.6 + self.z_nudge)
            rot_target = None
        else:
            target = (tx + self.x_nudge, ty, tz + self.z_nudge)
            rot_target = None

        self.body.add_translation((target[0] - cx) * DIFF_FACTOR,
                                  (target[1] - cy) * DIFF_FACTOR,
                                  (target[2] - cz) * DIFF_FACTOR)
        if rot_target is None:
            self.body.rotation = [rx, ry, rz]
        else:
            self.body.add_rotation((rot_target[0] - crx) * DIFF_FACTOR,
                                   (rot_target[1] - cry) * DIFF_FACTOR,
                                   (rot_target[2] - crz) * DIFF_FACTOR)