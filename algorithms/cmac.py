"""
algorithms/cmac.py

CMAC (NIST SP 800-38B) over a CBC-mode block cipher: set SET_CIPHER (e.g.
"aes-128-cbc") first, then a key of exactly the cipher's key length. The tag
is one cipher block. Running computations can be forked with copy.
"""

from core.algorithm import CipherMac
from core.controls import Command
from core.descriptor import MacDescriptor, SizePolicy


class CmacState(CipherMac):
    cipher_mode = "cbc"


CMAC = MacDescriptor(
    name="cmac",
    mac_id=894,
    impl=CmacState,
    size_policy=SizePolicy.delegated(),
    controls=frozenset({Command.SET_KEY, Command.SET_CIPHER, Command.SET_ENGINE}),
    description="cipher-based MAC over a CBC block cipher",
)
