"""Table rule modules: lookup by file name and the shared ball launching rule."""

from __future__ import annotations

from typing import Any, Callable, Mapping

from flipperkit.signals import Signal, SignalRegistry

LAUNCH_POSITION = (19.5, 0.0, 30.0)
BUMP_SCORE = 450

SendFn = Callable[[int, int], None]


class AllBallsBusy(RuntimeError):
    """No ball was free to be launched."""


class ModuleLoadError(LookupError):
    """A rule module could not be found."""


def sanitize_path(path: str) -> str:
    """Remove every '../' so a module path cannot leave its directory."""
    while "../" in path:
        path = path.replace("../", "", 1)
    return path


def launch_next_ball(table: Any, send: SendFn, start_signal: int) -> int | None:
    """Launch a ball when none is in play and the game is not over.

    The table provides ``active()``, ``current_ball``, ``max_balls``,
    ``is_ball_dead(ball)`` and ``activate_ball(ball, x, y, z)``.
    Returns the launched ball, or None when nothing had to be launched.
    """
    if table.active() != 0 or table.current_ball >= table.max_balls:
        return None
    current = table.current_ball
    candidates: list[int] = []
    if current == 0:
        candidates.append(0)
    if current in (0, 1):
        candidates.append(1)
    if current in (0, 1, 2):
        candidates.extend((2, 0, 1))
    for ball in candidates:
        if table.is_ball_dead(ball):
            if current == 0 and ball == 0 and candidates[0] == 0 and candidates.index(ball) == 0:
                send(start_signal, 0)
            send(Signal.BALL_ON, 0)
            table.activate_ball(ball, *LAUNCH_POSITION)
            return ball
    raise AllBallsBusy("all balls busy")


class ProfessorBehavior:
    """Rules of the professor table: launch balls, count lost balls, score bumps."""

    def __init__(self, table: Any, score: Any, registry: SignalRegistry, send: SendFn) -> None:
        self.table = table
        self.score = score
        self.registry = registry
        self.send = send
        self.last_launched: int | None = None
        self.clear()

    def on_tick(self) -> None:
        launched = launch_next_ball(self.table, self.send, self.registry.signal_id("game_start"))
        if launched is not None:
            self.last_launched = launched

    def on_signal(self, signal: int) -> None:
        table = self.table
        if signal == Signal.RESET_ALL:
            self.clear()
        elif signal == Signal.BALL_OFF:
            if table.active() == 1:
                self.send(self.registry.signal_id("multiball_off"), 0)
            if table.active() == 0:
                self.send(self.registry.signal_id("allballs_off"), 0)
                if table.current_ball < table.max_balls:
                    table.current_ball += 1
                    if table.current_ball == table.max_balls:
                        self.send(Signal.GAME_OVER, 0)
        elif signal == self.registry.signal_id("bump"):
            self.score.add_score(BUMP_SCORE)

    def clear(self) -> None:
        """Forget the last launched ball."""
        self.last_launched = None


class ModuleRegistry:
    """Creates rule behaviors from module file names."""

    def __init__(self, factories: Mapping[str, Callable[[], Any]]) -> None:
        self._factories = dict(factories)
        self._instances: dict[str, Any] = {}

    def read(self, filename: str) -> Any:
        """Return the behavior registered under the file's base name."""
        name = sanitize_path(str(filename)).rpartition("/")[2]
        instance = self._instances.get(name)
        if instance is not None:
            return instance
        factory = self._factories.get(name)
        if factory is None:
            raise ModuleLoadError(f"Could not open module: {filename}")
        instance = factory()
        if instance is None:
            raise ModuleLoadError(f"Could not allocate behavior object: {filename}")
        self._instances[name] = instance
        return instance