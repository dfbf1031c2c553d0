import sys

import numpy as np

from utils import set_seed, get_hardware_note, TeeOutput


def test_set_seed_is_reproducible():
    set_seed(7)
    first = np.random.rand(3)
    set_seed(7)
    assert np.array_equal(first, np.random.rand(3))


def test_set_seed_defaults_to_config_seed():
    assert set_seed() == 42


def test_get_hardware_note():
    assert isinstance(get_hardware_note(), str)


def test_tee_output_writes_file_and_restores_stdout(tmp_path, capsys):
    path = tmp_path / "log.txt"
    before = sys.stdout
    with TeeOutput(str(path)):
        print("hello tee")
    assert sys.stdout is before
    assert "hello tee" in path.read_text(encoding="utf-8")
    assert "hello tee" in capsys.readouterr().out


def test_tee_output_nested(tmp_path):
    outer, inner = tmp_path / "outer.txt", tmp_path / "inner.txt"
    with TeeOutput(str(outer)):
        with TeeOutput(str(inner)):
            print("both")
        print("outer only")
    assert "both" in inner.read_text(encoding="utf-8")
    assert "outer only" not in inner.read_text(encoding="utf-8")
    assert "both" in outer.read_text(encoding="utf-8")
    assert "outer only" in outer.read_text(encoding="utf-8")
