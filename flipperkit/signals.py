"""Signal and variable identifiers shared by the table scripts."""

from __future__ import annotations

from enum import IntEnum

FIRST_SIGNAL = 10000
FIRST_VARIABLE = 20000


class Signal(IntEnum):
    """Signals built into the game; named ones are reserved by the registry."""

    NULL = 0
    RESET_ALL = 1
    TILT = 2
    TILT_WARNING = 3
    GAME_OVER = 4
    GAME_START = 5
    GAME_PAUSE = 6
    BALL_ON = 7
    BALL_OFF = 8
    LEFTARM_ON = 9
    RIGHTARM_ON = 10
    BNUDGE = 11
    TNUDGE = 12
    LNUDGE = 13
    RNUDGE = 14


_BUILTIN_NAMES: dict[str, Signal] = {
    "null": Signal.NULL,
    "reset": Signal.RESET_ALL,
    "tilt": Signal.TILT,
    "game_over": Signal.GAME_OVER,
    "game_start": Signal.GAME_START,
    "game_pause": Signal.GAME_PAUSE,
}
_BUILTIN_IDS: dict[int, str] = {int(sig): name for name, sig in _BUILTIN_NAMES.items()}


class SignalRegistry:
    """Maps signal and variable names to numeric identifiers, allocating on demand."""

    def __init__(self) -> None:
        self._signals: dict[str, int] = {}
        self._signal_names: dict[int, str] = {}
        self._variables: dict[str, int] = {}
        self._variable_names: dict[int, str] = {}
        self._next_signal = FIRST_SIGNAL
        self._next_variable = FIRST_VARIABLE

    def signal_id(self, name: str | None) -> int:
        """Return the identifier for a signal name, allocating a new one if unknown."""
        if name is None:
            return Signal.NULL
        builtin = _BUILTIN_NAMES.get(name)
        if builtin is not None:
            return builtin
        ident = self._signals.get(name)
        if ident is None:
            ident = self._next_signal
            self._next_signal += 1
            self._signals[name] = ident
            self._signal_names[ident] = name
        return ident

    def signal_name(self, ident: int) -> str | None:
        """Return the name of a signal, or None if it has none."""
        if ident < 0:
            return "null"
        builtin = _BUILTIN_IDS.get(ident)
        if builtin is not None:
            return builtin
        return self._signal_names.get(ident)

    def variable_id(self, name: str | None) -> int:
        """Return the identifier for a variable name, allocating a new one if unknown."""
        if name is None:
            return -1
        ident = self._variables.get(name)
        if ident is None:
            ident = self._next_variable
            self._next_variable += 1
            self._variables[name] = ident
            self._variable_names[ident] = name
        return ident

    def variable_name(self, ident: int) -> str | None:
        """Return the name of a variable, or None if it is unknown."""
        return self._variable_names.get(ident)

    def clear(self) -> None:
        """Forget every allocated signal and variable; call before loading a new table."""
        self._signals.clear()
        self._signal_names.clear()
        self._variables.clear()
        self._variable_names.clear()
        self._next_signal = FIRST_SIGNAL
        self._next_variable = FIRST_VARIABLE