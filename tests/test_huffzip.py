import os
import stat

import pytest

import huffzip


def test_compress_then_decompress(tmp_path, capsys):
    src = tmp_path / "input.txt"
    packed = tmp_path / "input.huf"
    restored = tmp_path / "restored.txt"
    src.write_bytes(b"aaaabbbccd" * 50)

    assert huffzip.main(["-c", str(src), str(packed)]) == 0
    assert f"File compressed successfully. Output file: {packed}" in capsys.readouterr().out

    assert huffzip.main(["-d", str(packed), str(restored)]) == 0
    assert f"File decompressed successfully. Output file: {restored}" in capsys.readouterr().out
    assert restored.read_bytes() == src.read_bytes()


def test_empty_file(tmp_path):
    src = tmp_path / "empty"
    src.write_bytes(b"")
    stats = huffzip.compress_file(src, tmp_path / "empty.huf")
    assert stats.input_bytes == 0 and stats.output_bytes == 3

    huffzip.decompress_file(tmp_path / "empty.huf", tmp_path / "out")
    assert (tmp_path / "out").read_bytes() == b""


def test_stats_flag(tmp_path, capsys):
    src = tmp_path / "a.bin"
    src.write_bytes(b"A" * 1000)
    assert huffzip.main(["-c", str(src), str(tmp_path / "a.huf"), "--stats"]) == 0
    out = capsys.readouterr().out
    assert "Input: 1000 bytes, output: 133 bytes" in out


def test_missing_input(tmp_path, capsys):
    out = tmp_path / "out.huf"
    assert huffzip.main(["-c", str(tmp_path / "nope"), str(out)]) == 1
    assert "Error" in capsys.readouterr().err
    assert not out.exists()


def test_bad_container_leaves_destination_untouched(tmp_path, capsys):
    bogus = tmp_path / "bogus.huf"
    bogus.write_bytes(b"\x05\x00\x01")
    out = tmp_path / "out.txt"
    out.write_bytes(b"keep me")

    assert huffzip.main(["-d", str(bogus), str(out)]) == 1
    assert "not a valid compressed file" in capsys.readouterr().err
    assert out.read_bytes() == b"keep me"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["bogus.huf", "out.txt"]


def test_unwritable_destination(tmp_path):
    src = tmp_path / "in.txt"
    src.write_bytes(b"data")
    assert huffzip.main(["-c", str(src), str(tmp_path / "missing_dir" / "out.huf")]) == 1


def test_write_all_bytes_replaces_atomically(tmp_path):
    target = tmp_path / "file.bin"
    target.write_bytes(b"old")
    huffzip.write_all_bytes(target, b"new")
    assert target.read_bytes() == b"new"
    assert [p.name for p in tmp_path.iterdir()] == ["file.bin"]


@pytest.mark.parametrize("argv", [
    [],
    ["in", "out"],
    ["-c", "in"],
    ["-c", "-d", "in", "out"],
    ["-x", "in", "out"],
    ["-c", "in", "out", "extra"],
])
def test_usage_errors_exit_nonzero(argv, capsys):
    with pytest.raises(SystemExit) as exc:
        huffzip.main(argv)
    assert exc.value.code != 0
    assert "usage" in capsys.readouterr().err


@pytest.mark.skipif(os.name != "posix", reason="POSIX file modes")
def test_existing_destination_keeps_its_mode(tmp_path):
    src = tmp_path / "in.txt"
    src.write_bytes(b"mode check" * 10)
    dst = tmp_path / "out.huf"
    dst.write_bytes(b"old")
    dst.chmod(0o644)

    huffzip.compress_file(src, dst)
    assert stat.S_IMODE(dst.stat().st_mode) == 0o644


@pytest.mark.skipif(os.name != "posix", reason="POSIX file modes")
def test_new_destination_follows_umask(tmp_path):
    src = tmp_path / "in.txt"
    src.write_bytes(b"mode check" * 10)
    dst = tmp_path / "out.huf"

    old_mask = os.umask(0o022)
    try:
        huffzip.compress_file(src, dst)
    finally:
        os.umask(old_mask)
    assert stat.S_IMODE(dst.stat().st_mode) == 0o644
