import pytest

from flipperkit.camera import VIEWS, Body, EyeBehavior
from flipperkit.signals import Signal
from flipperkit.sound import AudioBackend, SoundLibrary


class Keys:
    def __init__(self):
        self.held = set()

    def __call__(self, name):
        return name in self.held


def make_eye(balls=()):
    sent = []
    keys = Keys()
    body = Body()
    eye = EyeBehavior(body, lambda sig, delay: sent.append(sig), keys, lambda: list(balls))
    return eye, body, keys, sent


def test_body_accumulates():
    body = Body()
    body.add_translation(1, 2, 3)
    body.add_translation(1, 2, 3)
    body.add_rotation(0.5, 0, 0)
    assert body.translation == [2, 4, 6]
    assert body.rotation == [0.5, 0, 0]


def test_locked_view_converges():
    eye, body, _, _ = make_eye()
    for _ in range(1000):
        eye.on_tick()
    (tx, ty, tz), rot = VIEWS[0]
    assert body.translation == pytest.approx([tx, ty, tz], abs=1e-6)
    assert body.rotation == list(rot)


def test_view_keys_switch_view():
    eye, body, keys, _ = make_eye()
    keys.held.add("F7")
    eye.on_tick()
    assert eye.view == 2
    keys.held = {"F8"}
    eye.on_tick()
    assert eye.view == 3
    assert body.rotation == list(VIEWS[3][1])


def test_ball_position_pulls_camera():
    plain, plain_body, _, _ = make_eye()
    with_ball, ball_body, _, _ = make_eye([(10.0, 0.0, 0.0)])
    plain.view = with_ball.view = 3
    for _ in range(500):
        plain.on_tick()
        with_ball.on_tick()
    assert ball_body.translation[0] > plain_body.translation[0]


def test_nudge_and_return():
    eye, body, keys, sent = make_eye()
    keys.held.add("bottomnudge")
    eye.on_tick()
    keys.held.clear()
    assert sent == [Signal.BNUDGE]
    for _ in range(35):
        eye.on_tick()
    assert sent.count(Signal.TNUDGE) == 1
    assert eye.z_nudge == 0.0


def test_repeated_nudging_tilts():
    eye, _, keys, sent = make_eye()
    keys.held.add("leftnudge")
    for _ in range(400):
        eye.on_tick()
    assert Signal.TILT_WARNING in sent
    assert Signal.TILT in sent
    assert sent.index(Signal.TILT_WARNING) < sent.index(Signal.TILT)
    assert eye.tilted
    nudges_after_tilt = sent[sent.index(Signal.TILT):].count(Signal.LNUDGE)
    assert nudges_after_tilt == 0
    eye.on_signal(Signal.RESET_ALL)
    assert not eye.tilted
    sent.clear()
    eye.on_tick()
    assert sent == [Signal.LNUDGE]


def test_nudge_plays_sound(tmp_path):
    wav = tmp_path / "nudge.wav"
    wav.write_bytes(b"data")
    backend = AudioBackend()
    sounds = SoundLibrary(backend)
    sounds.apply_volume(8, 8)
    keys = Keys()
    eye = EyeBehavior(Body(), lambda s, d: None, keys, lambda: [], sounds)
    eye.sound = sounds.load_sample(str(wav))
    keys.held.add("rightnudge")
    eye.on_tick()
    assert backend.played == [(wav, False)]
    assert eye.x_nudge == 2.0