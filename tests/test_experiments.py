import csv

import pytest

import experiments as exp


def test_entropy_bits():
    assert exp.entropy_bits({}) == 0.0
    assert exp.entropy_bits({65: 100}) == 0.0
    assert exp.entropy_bits({1: 5, 2: 5, 3: 5, 4: 5}) == pytest.approx(2.0)


def test_average_code_bits_matches_balanced_tree():
    ft = {1: 5, 2: 5, 3: 5, 4: 5}
    codes = {1: "00", 2: "01", 3: "10", 4: "11"}
    assert exp.average_code_bits(ft, codes) == 2.0
    assert exp.average_code_bits({}, {}) == 0.0


def test_profiles_are_seeded_and_sized():
    for name, make in exp.PROFILES.items():
        assert len(make(300, 4)) == 300
        assert make(300, 4) == make(300, 4)
    assert max(exp.PROFILES["skewed"](1000, 1)) < 16


def test_run_one_within_one_bit_of_entropy():
    row = exp.run_one("skewed", exp.PROFILES["skewed"](4000, 9))
    assert row.roundtrip_ok == 1
    assert row.entropy_bits <= row.avg_code_bits < row.entropy_bits + 1
    assert row.redundancy_bits == pytest.approx(row.avg_code_bits - row.entropy_bits)


def test_run_one_accounts_for_every_container_byte():
    row = exp.run_one("text", exp.PROFILES["text"](3000, 0), runs=2)
    assert row.header_bytes + row.payload_bytes == row.container_bytes
    assert row.header_bytes == 3 + 5 * row.unique_symbols
    assert 0 <= row.pad_bits <= 7
    assert row.payload_bytes * 8 - row.pad_bits == round(row.avg_code_bits * row.size_bytes)


def test_run_one_single_symbol():
    row = exp.run_one("single", exp.PROFILES["single"](64, 0))
    assert row.roundtrip_ok == 1
    assert row.unique_symbols == 1
    assert row.entropy_bits == 0.0
    assert row.avg_code_bits == 1.0
    assert row.payload_bytes == 8 and row.pad_bits == 0


def test_main_writes_csv_and_charts(tmp_path, capsys):
    extra = tmp_path / "sample.txt"
    extra.write_bytes(b"aaaabbbccd" * 20)
    outdir = tmp_path / "out"

    rc = exp.main([
        "--outdir", str(outdir),
        "--profiles", "skewed,single",
        "--sizes", "256,512",
        "--runs", "1",
        str(extra),
    ])
    assert rc == 0
    assert "Wrote 5 rows" in capsys.readouterr().out

    with (outdir / "metrics.csv").open(newline="") as f:
        rows = list(csv.DictReader(f))
    assert [r["dataset"] for r in rows] == ["skewed", "skewed", "single", "single", "sample.txt"]
    assert all(r["roundtrip_ok"] == "1" for r in rows)
    assert (outdir / "code_length_vs_entropy.png").exists()
    assert (outdir / "container_breakdown.png").exists()


def test_main_no_plots(tmp_path):
    rc = exp.main(["--outdir", str(tmp_path), "--profiles", "single", "--sizes", "32", "--no_plots"])
    assert rc == 0
    assert (tmp_path / "metrics.csv").exists()
    assert not (tmp_path / "container_breakdown.png").exists()


def test_main_rejects_unknown_profile(tmp_path):
    with pytest.raises(SystemExit) as exc:
        exp.main(["--outdir", str(tmp_path), "--profiles", "nonsense"])
    assert exc.value.code == 2
