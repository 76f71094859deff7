"""Sample and music management on top of a pluggable audio mixer."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)

AUDIO_FREQUENCY = 22050
AUDIO_CHANNELS = 2
VOLUME_SCALE = 8


class AudioError(Exception):
    """The audio device could not be opened."""


@dataclass
class AudioBackend:
    """A silent mixer that keeps track of what it was asked to play.

    Subclass it and override its methods to drive a real audio device.
    """

    is_open: bool = False
    sound_volume: int = 0
    music_volume: int = 0
    music: Any = None
    music_loop: bool = False
    music_paused: bool = False
    played: list[tuple[Any, bool]] = field(default_factory=list)
    music_history: list[tuple[Any, bool]] = field(default_factory=list)

    def open(self) -> None:
        """Open the device; raise AudioError if that is not possible."""
        self.is_open = True

    def close(self) -> None:
        """Close the device and drop whatever music is playing."""
        self.is_open = False
        self.music = None
        self.music_paused = False

    def load_sample(self, filename: str) -> Any:
        """Return a handle for a sample file, or None if it cannot be loaded."""
        path = Path(filename)
        return path if path.is_file() else None

    def load_music(self, filename: str) -> Any:
        """Return a handle for a music file, or None if it cannot be loaded."""
        path = Path(filename)
        return path if path.is_file() else None

    def play_sample(self, sample: Any, loop: bool) -> None:
        """Start a sample on a free channel."""
        self.played.append((sample, loop))

    def play_music(self, music: Any, loop: bool) -> None:
        """Start a music stream."""
        self.music = music
        self.music_loop = loop
        self.music_paused = False
        self.music_history.append((music, loop))

    def halt_music(self) -> None:
        """Stop the music stream."""
        self.music = None
        self.music_paused = False

    def pause_music(self) -> None:
        """Pause the music stream."""
        if self.music is not None:
            self.music_paused = True

    def resume_music(self) -> None:
        """Resume a paused music stream."""
        self.music_paused = False

    def set_volumes(self, sound: int, music: int) -> None:
        """Set the mixer volumes for samples and music."""
        self.sound_volume = sound
        self.music_volume = music


class SoundLibrary:
    """Loads samples and music once and plays them by identifier."""

    def __init__(self, backend: AudioBackend | None = None) -> None:
        self.backend = backend if backend is not None else AudioBackend()
        self.sound_volume = 0
        self.music_volume = 0
        self._inited = False
        self._looping_music = -1
        self._samples: list[Any] = []
        self._music: list[Any] = []
        self._sample_ids: dict[str, int] = {}
        self._music_ids: dict[str, int] = {}
        self._sample_names: list[str] = []
        self._music_names: list[str] = []

    @property
    def is_initialized(self) -> bool:
        return self._inited

    @property
    def looping_music(self) -> int:
        """Identifier of the music last started, or -1."""
        return self._looping_music

    def init_sound(self) -> None:
        """Open the audio device; raise AudioError on failure."""
        try:
            self.backend.open()
        except AudioError:
            self._inited = False
            raise
        log.info("Opened audio at %d Hz, %s", AUDIO_FREQUENCY,
                 "stereo" if AUDIO_CHANNELS > 1 else "mono")
        self._inited = True

    def stop_sound(self) -> None:
        """Close the audio device if it is open."""
        if not self._inited:
            return
        self.backend.close()
        self._inited = False
        self._looping_music = -1

    def apply_volume(self, sound_volume: int, music_volume: int) -> tuple[int, int]:
        """Apply volumes, opening or closing the device as needed.

        Returns the volumes in effect; both become 0 if the device cannot be opened.
        """
        self.sound_volume = sound_volume
        self.music_volume = music_volume
        if sound_volume == 0 and music_volume == 0:
            if self._inited:
                self.stop_sound()
        elif not self._inited:
            try:
                self.init_sound()
            except AudioError as exc:
                self.sound_volume = 0
                self.music_volume = 0
                log.error(
                    "Error opening audio device (%s); check that no other "
                    "application is occupying audio resources.", exc)
            else:
                if music_volume == 0:
                    self.backend.halt_music()
                    self._looping_music = -1
                self.backend.set_volumes(sound_volume * VOLUME_SCALE,
                                         music_volume * VOLUME_SCALE)
        return self.sound_volume, self.music_volume

    def load_sample(self, filename: str) -> int:
        """Return the identifier of a sample, loading it on first use."""
        filename = str(filename)
        cached = self._sample_ids.get(filename)
        if cached is not None:
            return cached
        wave = self.backend.load_sample(filename)
        ident = len(self._samples)
        self._samples.append(wave)
        self._sample_ids[filename] = ident
        self._sample_names.append(filename)
        if wave is None and self._inited:
            log.error("Unable to load sample %s, inserting an empty one", filename)
        return ident

    def load_music(self, filename: str) -> int:
        """Return the identifier of a music file, loading it on first use."""
        filename = str(filename)
        cached = self._music_ids.get(filename)
        if cached is not None:
            return cached
        music = self.backend.load_music(filename)
        ident = len(self._music)
        self._music.append(music)
        self._music_ids[filename] = ident
        self._music_names.append(filename)
        if music is None:
            log.error("Unable to load music %s, inserting an empty stream", filename)
        return ident

    def sound_name(self, sound: int) -> str | None:
        """Return the file name of a sample, or None if the identifier is unknown."""
        if 0 <= sound < len(self._sample_names):
            return self._sample_names[sound]
        log.warning("could not find sound name for %d", sound)
        return None

    def music_name(self, music: int) -> str | None:
        """Return the file name of a music, or None if the identifier is unknown."""
        if 0 <= music < len(self._music_names):
            return self._music_names[music]
        log.warning("could not find music name for %d", music)
        return None

    def play_sample(self, sound: int, loop: bool = False) -> None:
        """Play a sample if sound is on and the identifier is valid."""
        if not self._inited or self.sound_volume == 0:
            return
        if not 0 <= sound < len(self._samples):
            return
        sample = self._samples[sound]
        if sample is not None:
            self.backend.play_sample(sample, loop)

    def play_music(self, music: int, loop: bool = False) -> None:
        """Play a music; a looping music already playing is left alone."""
        if not self._inited or self.music_volume == 0:
            return
        if not 0 <= music < len(self._music):
            return
        if loop and self._looping_music == music:
            return
        self._looping_music = music
        self.backend.halt_music()
        stream = self._music[music]
        if stream is not None:
            self.backend.play_music(stream, loop)

    def stop_music(self) -> None:
        if not self._inited:
            return
        self.backend.halt_music()
        self._looping_music = -1

    def pause_music(self) -> None:
        if self._inited:
            self.backend.pause_music()

    def resume_music(self) -> None:
        if self._inited:
            self.backend.resume_music()


def adjust_sound(group: Any) -> None:
    """Let the positional sound attached to a scene group adjust itself."""
    sound = getattr(group, "sound", None)
    if sound is not None:
        sound.adjust()