import numpy as np
import pytest
import soundfile as sf

from pin_reel import audio
from pin_reel.audio import AudioDestination, create_audio_track, master_envelope, synthesize, write_audio_track
from pin_reel.errors import SynthesisError


def test_master_envelope_endpoints():
    sr = 1000
    env = master_envelope(4.0, sr)
    assert len(env) == 4000
    assert env[0] == 0.0
    assert env[-1] == 0.0
    assert env[2000] == pytest.approx(0.5)
    assert env[500] == pytest.approx(0.25, abs=1e-3)


def test_master_envelope_fades_out_linearly():
    env = master_envelope(4.0, 1000)
    assert env[2900] == pytest.approx(0.5)
    assert env[3000] == pytest.approx(0.5, abs=1e-3)
    assert env[3500] == pytest.approx(0.25, abs=1e-3)
    steps = np.diff(env[3000:])
    assert (steps < 0).all()
    assert np.allclose(steps, steps[0])
    assert steps[0] == pytest.approx(-0.5 / 1000, rel=1e-2)


def test_master_envelope_short_track_overlaps():
    env = master_envelope(1.0, 1000)
    assert env.max() < 0.3
    assert env[0] == 0.0 and env[-1] == 0.0


@pytest.mark.parametrize("style", ["luxury", "focus", "pulse", "lofi"])
def test_styles_fade_to_silence(style):
    sr = 8000
    y = synthesize(style, 3.0, sr, rng=np.random.default_rng(0))
    assert y.dtype == np.float32
    assert len(y) == 3 * sr
    assert abs(y[0]) < 1e-6
    assert abs(y[-1]) < 1e-6
    rms_mid = np.sqrt(np.mean(y[sr : 2 * sr] ** 2))
    rms_tail = np.sqrt(np.mean(y[-sr // 20 :] ** 2))
    assert rms_tail < rms_mid


def test_mute_is_noop():
    dest = AudioDestination(sample_rate=8000)
    create_audio_track("mute", dest, 5.0)
    assert len(dest.samples) == 0
    assert len(synthesize("mute", 5.0, 8000)) == 0


def test_unknown_style():
    with pytest.raises(ValueError):
        synthesize("jazz", 1.0, 8000)


def test_seeded_noise_is_reproducible():
    a = synthesize("focus", 1.5, 8000, rng=np.random.default_rng(42))
    b = synthesize("focus", 1.5, 8000, rng=np.random.default_rng(42))
    c = synthesize("focus", 1.5, 8000, rng=np.random.default_rng(43))
    assert np.array_equal(a, b)
    assert not np.array_equal(a, c)


def test_luxury_is_low_passed():
    sr = 8000
    y = synthesize("luxury", 4.0, sr)
    power = np.abs(np.fft.rfft(y)) ** 2
    freqs = np.fft.rfftfreq(len(y), 1.0 / sr)
    low = power[freqs < 500].sum()
    high = power[freqs >= 500].sum()
    assert low > 100 * high


def test_pulse_kicks_every_half_second():
    librosa = pytest.importorskip("librosa")
    sr = 22050
    y = synthesize("pulse", 5.0, sr)
    onsets = librosa.onset.onset_detect(y=y.astype(np.float64), sr=sr, units="time")
    assert len(onsets) >= 6
    gaps = np.diff(onsets)
    assert np.median(gaps) == pytest.approx(0.5, abs=0.05)


def test_kick_decays():
    k = audio.kick(8000)
    assert len(k) == 4000
    head = np.abs(k[:400]).max()
    tail = np.abs(k[-400:]).max()
    assert tail < head * 0.1


def test_destination_mixes_and_grows():
    dest = AudioDestination(sample_rate=1000)
    dest.add(np.ones(10))
    dest.add(np.ones(20))
    assert len(dest.samples) == 20
    assert dest.samples[0] == 2.0 and dest.samples[15] == 1.0
    assert dest.duration == pytest.approx(0.02)


def test_create_audio_track_length():
    dest = AudioDestination(sample_rate=8000)
    create_audio_track("lofi", dest, 2.0, rng=np.random.default_rng(1))
    assert len(dest.samples) == 16000


def test_synthesis_failure_is_wrapped(monkeypatch):
    def boom(t, sr, rng):
        raise ValueError("bad filter")

    monkeypatch.setitem(audio._STYLES, "luxury", boom)
    with pytest.raises(SynthesisError):
        synthesize("luxury", 1.0, 8000)


def test_write_audio_track(tmp_path):
    path = tmp_path / "lux.wav"
    write_audio_track("luxury", str(path), 1.5, sr=8000)
    data, sr = sf.read(str(path))
    assert sr == 8000
    assert len(data) == 12000
