import pytest

import run_mac
from core.registry import Registry
from algorithms import load_builtin_algorithms
from config import SAMPLE_CONFIGS, SAMPLE_MESSAGES
from generate_report import build_jobs, randomize


def test_run_mac_prints_hex_tag(capsys):
    rc = run_mac.main(["hmac", "-o", "digest:sha256", "-o", "key:", "--data", ""])
    assert rc == 0
    out = capsys.readouterr().out.strip()
    assert out == "b613679a0814d9ec772f95d778c35fc5ff1697c493715653c6c712144292c5ad"


def test_run_mac_reads_file(tmp_path, capsys):
    path = tmp_path / "msg.bin"
    path.write_bytes(b"Cryptographic Forum Research Group")
    rc = run_mac.main(["poly1305", "-o",
                       "hexkey:85d6be7857556d337f4452fe42d506a80103808afb0db2fd4abff6af4149f51b",
                       "--in", str(path), "--chunk-size", "3"])
    assert rc == 0
    assert capsys.readouterr().out.strip() == "a8061dc1305136c6c22b8baf0c0127a9"


def test_run_mac_errors_exit_nonzero(capsys):
    assert run_mac.main(["nosuchmac", "--data", "x"]) == 1
    assert run_mac.main(["hmac", "-o", "key:k", "--data", "x"]) == 1
    assert run_mac.main(["hmac", "-o", "nocolon", "--data", "x"]) == 1
    assert run_mac.main([]) == 2


def test_run_mac_list(capsys):
    assert run_mac.main(["--list"]) == 0
    out = capsys.readouterr().out
    assert "kmac128" in out
    assert "1.0.9797.3.4" in out


def test_build_jobs_covers_every_sample():
    registry = load_builtin_algorithms(Registry())
    jobs = build_jobs(2, False, registry)
    assert len(jobs) == 2 * len(SAMPLE_CONFIGS) * len(SAMPLE_MESSAGES) * 2
    assert {j.algorithm for j in jobs} == set(SAMPLE_CONFIGS)


def test_randomize_keeps_lengths():
    controls = [("cipher", "aes-128-gcm"), ("hexkey", "00" * 16), ("hexiv", "00" * 12)]
    out = randomize(controls)
    assert out[0] == controls[0]
    assert len(out[1][1]) == 32
    assert len(out[2][1]) == 24
    assert out[1][1] != "00" * 16


@pytest.mark.parametrize("algorithm", sorted(SAMPLE_CONFIGS))
def test_sample_configs_compute(algorithm):
    from core.api import compute_mac
    registry = load_builtin_algorithms(Registry())
    tag = compute_mac(algorithm, SAMPLE_MESSAGES[1], *SAMPLE_CONFIGS[algorithm], registry=registry)
    assert len(tag) > 0
