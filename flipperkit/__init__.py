"""Pinball table file loading, signal registry, sound bookkeeping, flipper, bumper and camera behaviours."""

__version__ = "0.1.0"
__all__ = [
    "signals",
    "tokens",
    "sound",
    "modules",
    "scene_shapes",
    "camera",
    "scene",
    "behaviors",
]