"""
Byte utilities shared by the MAC layer

Includes:
- Key and IV generation
- Hex encoding helpers
- Wiping of retained sensitive buffers
"""

import secrets
from typing import Optional
from config import KEY_SIZE, IV_SIZE

#Key generation
def generate_key(size: int = KEY_SIZE) -> bytes:
    return secrets.token_bytes(size)

#IV generation
def generate_iv(size: int = IV_SIZE) -> bytes:
    return secrets.token_bytes(size)

def bytes_to_hex(b: Optional[bytes]) -> Optional[str]:
    return None if b is None else bytes(b).hex()

def hex_to_bytes(h: Optional[str]) -> Optional[bytes]:
    if h is None:
        return None
    # openssl-style hex strings may separate octets with ':'
    return bytes.fromhex(h.replace(":", ""))

def retain(data: bytes) -> bytearray:
    """Copy caller bytes into a buffer the owner can wipe later."""
    return bytearray(data)

def wipe(buf: Optional[bytearray]) -> None:
    """Overwrite a retained buffer with zeros in place."""
    if buf is None:
        return
    for i in range(len(buf)):
        buf[i] = 0
