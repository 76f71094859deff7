"""Flipper arm and bumper behaviors."""

from __future__ import annotations

from enum import IntFlag
from typing import Any, Callable

from flipperkit.camera import Body
from flipperkit.signals import Signal

ARM_MAX_COUNT = 10
ARM_ANGLE_STEP = 0.01
ARM_SIGNAL_COUNT = 2
BUMPER_LIGHT_TICKS = 20
BUMPER_REARM_LIMIT = 10
RIGHT_FLIP_KEY = "rightflip"
LEFT_FLIP_KEY = "leftflip"

SendFn = Callable[[int, int], None]


class UserProperty(IntFlag):
    """Game roles a scene group can have, used to pick collision responses."""

    NONE = 0
    WALLS = 1
    WALLS_ONE = 2
    BUMPER = 4
    PLUNGER = 8
    ACTIVE_ARM = 16
    UNACTIVE_ARM = 32
    BALL = 64
    LOCK = 128
    TRAP = 256
    TRAP_BOUNCE = 512


class ArmBehavior:
    """A flipper that swings while its key is held."""

    def __init__(self, body: Body, send: SendFn, key_down: Callable[[str], bool],
                 right: bool = True, sounds: Any = None) -> None:
        self.body = body
        self.send = send
        self.key_down = key_down
        self.right = right
        self.sounds = sounds
        self.sound = -1
        self.count = 0
        self.tilted = False
        self.on = False
        self.rest_y = 0.0
        self._first = True
        self.user_properties = UserProperty.NONE

    def _set_active(self, active: bool) -> None:
        props = self.user_properties & ~(UserProperty.ACTIVE_ARM | UserProperty.UNACTIVE_ARM)
        props |= UserProperty.ACTIVE_ARM if active else UserProperty.UNACTIVE_ARM
        self.user_properties = props

    def on_signal(self, signal: int) -> None:
        if signal == Signal.RESET_ALL:
            self.tilted = False
            self.count = 0
            self._set_active(False)
            self.body.rotation = [0.0, self.rest_y, 0.0]
            self.on = False
        elif signal == Signal.TILT:
            self.tilted = True

    def do_arm(self, pressed: bool) -> None:
        """Advance the swing by one tick given whether the flipper key is held."""
        if pressed and not self.tilted:
            if self.count < ARM_MAX_COUNT:
                self.count += 1
                self._set_active(True)
                if self.count == ARM_SIGNAL_COUNT:
                    self.send(Signal.RIGHTARM_ON if self.right else Signal.LEFTARM_ON, 0)
                    if self.sounds is not None:
                        self.sounds.play_sample(self.sound, False)
            else:
                self._set_active(False)
        else:
            self._set_active(False)
            if self.count > 0:
                self.count -= 1

    def on_tick(self) -> None:
        if self._first:
            self.rest_y = self.body.rotation[1]
            self._first = False
        if self.right:
            self.do_arm(self.key_down(RIGHT_FLIP_KEY))
            angle = self.rest_y + ARM_ANGLE_STEP * self.count
        else:
            self.do_arm(self.key_down(LEFT_FLIP_KEY))
            angle = self.rest_y - ARM_ANGLE_STEP * self.count
        self.body.rotation = [0.0, angle, 0.0]


class BumperBehavior:
    """A bumper that lights up and signals when a ball hits it."""

    def __init__(self, body: Body, send: SendFn, bump_signal: int, sounds: Any = None) -> None:
        self.body = body
        self.send = send
        self.bump_signal = bump_signal
        self.sounds = sounds
        self.sound = -1
        self.power = 0.5
        self.tilted = False
        self.light_counter = -1
        self.light_on = False

    def on_tick(self) -> None:
        if self.light_counter > -1:
            self.light_counter -= 1
        if self.light_counter == 0:
            self.light_on = False

    def on_signal(self, signal: int) -> None:
        if signal == Signal.RESET_ALL:
            self.tilted = False
            self.light_on = False
            self.light_counter = -1
        elif signal == Signal.TILT:
            self.tilted = True

    def on_collision(self, other_properties: int) -> None:
        """React to a collision with a group having the given user properties."""
        if self.tilted:
            return
        if not other_properties & UserProperty.BALL:
            return
        if self.light_counter > BUMPER_REARM_LIMIT:
            return
        self.light_counter = BUMPER_LIGHT_TICKS
        self.light_on = True
        self.send(self.bump_signal, 0)
        if self.sounds is not None:
            self.sounds.play_sample(self.sound, False)