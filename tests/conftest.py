import sys
from pathlib import Path

import pytest

# Ensure project root is importable while running tests.
repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from algorithms import load_builtin_algorithms  # noqa: E402
from core.registry import Registry  # noqa: E402


@pytest.fixture
def registry():
    return load_builtin_algorithms(Registry())


@pytest.fixture
def aes_key():
    # RFC 4493 example key
    return bytes.fromhex("2b7e151628aed2a6abf7158809cf4f3c")


@pytest.fixture
def kmac_key():
    # NIST SP 800-185 sample key
    return bytes(range(0x40, 0x60))
