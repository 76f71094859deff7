from pathlib import Path

import pytest

from flipperkit.sound import (
    VOLUME_SCALE,
    AudioBackend,
    AudioError,
    SoundLibrary,
    adjust_sound,
)


class FailingBackend(AudioBackend):
    def open(self):
        raise AudioError("device busy")


@pytest.fixture
def wav(tmp_path):
    path = tmp_path / "bump.wav"
    path.write_bytes(b"RIFF")
    return str(path)


@pytest.fixture
def ogg(tmp_path):
    path = tmp_path / "theme.ogg"
    path.write_bytes(b"OggS")
    return str(path)


def test_load_sample_is_cached(wav, tmp_path):
    lib = SoundLibrary(AudioBackend())
    first = lib.load_sample(wav)
    assert lib.load_sample(wav) == first
    other = tmp_path / "flip.wav"
    other.write_bytes(b"x")
    second = lib.load_sample(str(other))
    assert second == first + 1
    assert lib.sound_name(first) == wav
    assert lib.sound_name(second) == str(other)


def test_unknown_names_are_none(ogg):
    lib = SoundLibrary()
    music = lib.load_music(ogg)
    assert lib.music_name(music) == ogg
    assert lib.music_name(music + 1) is None
    assert lib.sound_name(0) is None


def test_play_sample_needs_initialised_device(wav):
    backend = AudioBackend()
    lib = SoundLibrary(backend)
    sound = lib.load_sample(wav)
    lib.play_sample(sound, False)
    assert backend.played == []
    lib.apply_volume(10, 0)
    lib.play_sample(sound, True)
    assert backend.played == [(Path(wav), True)]


def test_play_sample_ignores_bad_ids_and_missing_files(tmp_path, wav):
    backend = AudioBackend()
    lib = SoundLibrary(backend)
    lib.apply_volume(10, 10)
    missing = lib.load_sample(str(tmp_path / "missing.wav"))
    lib.play_sample(missing, False)
    lib.play_sample(missing + 5, False)
    lib.play_sample(-1, False)
    assert backend.played == []


def test_apply_volume_opens_and_scales(wav):
    backend = AudioBackend()
    lib = SoundLibrary(backend)
    assert lib.apply_volume(10, 3) == (10, 3)
    assert lib.is_initialized
    assert backend.is_open
    assert backend.sound_volume == 10 * VOLUME_SCALE
    assert backend.music_volume == 3 * VOLUME_SCALE


def test_apply_zero_volume_closes_device():
    backend = AudioBackend()
    lib = SoundLibrary(backend)
    lib.apply_volume(5, 5)
    assert lib.apply_volume(0, 0) == (0, 0)
    assert not lib.is_initialized
    assert not backend.is_open


def test_failing_device_turns_volume_off():
    lib = SoundLibrary(FailingBackend())
    assert lib.apply_volume(5, 5) == (0, 0)
    assert not lib.is_initialized
    with pytest.raises(AudioError):
        lib.init_sound()
    assert not lib.is_initialized


def test_looping_music_is_not_restarted(ogg):
    backend = AudioBackend()
    lib = SoundLibrary(backend)
    lib.apply_volume(5, 5)
    music = lib.load_music(ogg)
    lib.play_music(music, True)
    lib.play_music(music, True)
    assert backend.music_history == [(Path(ogg), True)]
    assert lib.looping_music == music
    lib.stop_music()
    assert lib.looping_music == -1
    assert backend.music is None
    lib.play_music(music, True)
    assert len(backend.music_history) == 2


def test_music_off_does_not_play(ogg):
    backend = AudioBackend()
    lib = SoundLibrary(backend)
    lib.apply_volume(5, 0)
    lib.play_music(lib.load_music(ogg), False)
    assert backend.music_history == []


def test_pause_and_resume(ogg):
    backend = AudioBackend()
    lib = SoundLibrary(backend)
    lib.apply_volume(5, 5)
    lib.play_music(lib.load_music(ogg), False)
    lib.pause_music()
    assert backend.music_paused
    lib.resume_music()
    assert not backend.music_paused


def test_stop_sound_resets_state(ogg):
    lib = SoundLibrary(AudioBackend())
    lib.apply_volume(5, 5)
    lib.play_music(lib.load_music(ogg), True)
    lib.stop_sound()
    assert not lib.is_initialized
    assert lib.looping_music == -1


class _Sound:
    def __init__(self):
        self.adjusted = 0

    def adjust(self):
        self.adjusted += 1


class _Group:
    def __init__(self, sound):
        self.sound = sound


def test_adjust_sound_calls_attached_sound():
    sound = _Sound()
    adjust_sound(_Group(sound))
    adjust_sound(_Group(None))
    assert sound.adjusted == 1