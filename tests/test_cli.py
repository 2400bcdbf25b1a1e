import io
import zipfile

import pytest
import soundfile as sf
from PIL import Image

from pin_reel.__main__ import main, parse_args


def _png(tmp_path, name="pin.png", size=(100, 150)):
    path = tmp_path / name
    Image.new("RGB", size, (120, 90, 60)).save(path)
    return str(path)


def test_preset_overrides_defaults(tmp_path):
    preset = tmp_path / "preset.yaml"
    preset.write_text("speed: 1.5\naudio: pulse\n")
    img = _png(tmp_path)

    args = parse_args(["slideshow", img, "--preset", str(preset)])
    assert args.speed == 1.5
    assert args.audio == "pulse"

    args_cli = parse_args(["slideshow", img, "--preset", str(preset), "--speed", "3"])
    assert args_cli.speed == 3.0


def test_validate_reports_errors(tmp_path, capsys):
    with pytest.raises(SystemExit):
        main(["slideshow", str(tmp_path / "missing.png"), "--speed", "-1", "--validate"])
    err = capsys.readouterr().err
    assert "--speed" in err
    assert "image not found" in err


def test_validate_edit_dim(tmp_path, capsys):
    with pytest.raises(SystemExit):
        main(["edit", _png(tmp_path), "--dim", "0.95", "--validate"])
    assert "--dim" in capsys.readouterr().err


def test_validate_passes(tmp_path):
    main(["edit", _png(tmp_path), "--dim", "0.4", "--validate"])


def test_edit_writes_png(tmp_path):
    out = tmp_path / "out.png"
    main(["edit", _png(tmp_path), "--text", "Hello", "--mockup", "browser", "--output", str(out)])
    img = Image.open(out)
    assert img.width == 100
    assert img.height > 150


def test_edit_never_overwrites(tmp_path):
    out = tmp_path / "out.png"
    out.write_bytes(b"keep")
    main(["edit", _png(tmp_path), "--output", str(out)])
    assert out.read_bytes() == b"keep"
    assert len(list(tmp_path.glob("out_*.png"))) == 1


def test_audio_writes_wav(tmp_path):
    out = tmp_path / "pulse.wav"
    main(["audio", "pulse", "--duration", "1", "--sample-rate", "8000", "--output", str(out)])
    data, sr = sf.read(str(out))
    assert sr == 8000
    assert len(data) == 8000


def test_pack_from_manifest(tmp_path):
    _png(tmp_path, "one.png")
    manifest = tmp_path / "pack.yaml"
    manifest.write_text(
        "topic: Garden Ideas\n"
        "assets:\n"
        "  - title: Raised beds\n"
        "    image: one.png\n"
        "    tags: [garden, diy]\n"
    )
    main(["pack", str(manifest), "--output", str(tmp_path) + "/"])
    blob = (tmp_path / "garden-ideas_PROJECT_PACK.zip").read_bytes()
    names = zipfile.ZipFile(io.BytesIO(blob)).namelist()
    assert "images/raised-beds_1.png" in names


def test_bad_edit_value_exits(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["edit", _png(tmp_path), "--dim", "0.95"])
    assert "edit failed" in str(exc.value)
