import io
import logging

import pytest

from conftest import make_mesh
from gmdtools import DiskFileSystem, Model, set_preferences
from gmdtools.checkgmd import check_file, find_files
from gmdtools.checkgmd import main as check_main
from gmdtools.dumpgmd import dump_model
from gmdtools.dumpgmd import main as dump_main


@pytest.fixture(autouse=True)
def drop_log_handlers():
    yield
    logger = logging.getLogger("gmdtools")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


def write_model(model, path):
    fs = DiskFileSystem(base_path=str(path.parent))
    assert Model.save(model, path.name, fs=fs)
    return path


def test_dump_model(model):
    out = io.StringIO()
    dump_model(model, out)
    text = out.getvalue()
    assert "  bones: 2" in text
    assert "bone 1:\n  name: child\n  parent: 0\n" in text
    assert "  flags: 00000005" in text
    assert "    0 2\n" in text
    assert "    vertex 0: 0 weights" in text
    assert "    vertex 2: 2 weights" in text
    assert "      bone 1: influence 0.400000;" in text


def test_dump_main(model, tmp_path, capsys):
    path = write_model(model, tmp_path / "spider.gmd")
    assert dump_main([str(path)]) == 0
    out = capsys.readouterr().out
    assert out.startswith("GMD:\n  name: spider\n  author: Unknown\n  app_name: ogTools\n")


def test_dump_main_missing_file(tmp_path, capsys):
    assert dump_main([str(tmp_path / "missing.gmd")]) == 1
    assert capsys.readouterr().out == ""


def test_dump_main_usage(capsys):
    with pytest.raises(SystemExit) as e:
        dump_main([])
    assert e.value.code == 2
    assert "usage: gmd-dump" in capsys.readouterr().err


def test_dump_main_log_file(model, tmp_path):
    path = write_model(model, tmp_path / "spider.gmd")
    log_file = tmp_path / "dump.log"
    assert dump_main([str(path), "--verbose", "--log-file", str(log_file)]) == 0
    assert "Loaded" in log_file.read_text()


def test_dump_main_uses_search_paths(model, tmp_path, monkeypatch, capsys):
    assets = tmp_path / "assets"
    assets.mkdir()
    write_model(model, assets / "spider.gmd")
    monkeypatch.chdir(tmp_path)
    assert dump_main(["spider.gmd"]) == 1
    set_preferences(search_paths=[str(assets)])
    assert dump_main(["spider.gmd"]) == 0
    assert "  bones: 2" in capsys.readouterr().out


def test_find_files(tmp_path):
    (tmp_path / "b.gmd").write_bytes(b"")
    (tmp_path / "a.gmd").write_bytes(b"")
    (tmp_path / "notes.txt").write_bytes(b"")
    extra = tmp_path / "other.bin"
    found = list(find_files([str(tmp_path), str(extra)]))
    assert found == [str(tmp_path / "a.gmd"), str(tmp_path / "b.gmd"), str(extra)]


def test_check_file(model, tmp_path):
    fs = DiskFileSystem()
    good = write_model(model, tmp_path / "good.gmd")
    out = io.StringIO()
    assert check_file(str(good), fs, out)
    assert out.getvalue() == ""

    mesh = make_mesh()
    mesh.indices[1] = 40
    bad = write_model(Model(bones=model.bones, meshes=[mesh]), tmp_path / "bad.gmd")
    out = io.StringIO()
    assert not check_file(str(bad), fs, out)
    assert out.getvalue().startswith("(FAIL) mesh 0 (body) has 1 indices outside 0..2")
    assert str(bad) in out.getvalue()


def test_check_file_reports_load_errors(tmp_path):
    path = tmp_path / "junk.gmd"
    path.write_bytes(b"JUNK" + b"\x00"*8)
    out = io.StringIO()
    assert not check_file(str(path), DiskFileSystem(), out)
    assert "not a model file" in out.getvalue()


def test_check_main(model, tmp_path, capsys):
    write_model(model, tmp_path / "good.gmd")
    assert check_main([str(tmp_path)]) == 0
    assert "1 files checked, 0 failed" in capsys.readouterr().out

    (tmp_path / "junk.gmd").write_bytes(b"JUNK")
    assert check_main([str(tmp_path)]) == 1
    out = capsys.readouterr().out
    assert "(FAIL)" in out
    assert "2 files checked, 1 failed" in out


def test_check_main_usage(capsys):
    with pytest.raises(SystemExit) as e:
        check_main([])
    assert e.value.code == 2
    assert "usage: gmd-check" in capsys.readouterr().err


def test_check_main_log_file(tmp_path):
    (tmp_path / "junk.gmd").write_bytes(b"JUNK")
    log_file = tmp_path / "check.log"
    assert check_main([str(tmp_path / "junk.gmd"), "--log-file", str(log_file)]) == 1
    assert "not a model file" in log_file.read_text()


def test_check_main_uses_search_paths(model, tmp_path, monkeypatch, capsys):
    assets = tmp_path / "assets"
    assets.mkdir()
    write_model(model, assets / "spider.gmd")
    monkeypatch.chdir(tmp_path)
    set_preferences(search_paths=[str(assets)])
    assert check_main(["spider.gmd"]) == 0
    assert "1 files checked, 0 failed" in capsys.readouterr().out
