"""
Configuration file for the MAC computation layer

This file specifies all key parameters used across the project:
- Engine defaults
- Algorithm size limits and default output sizes
- Generated key material
- Batch report settings
- Logging
"""

import os

#Engine settings
DEFAULT_ENGINE = "openssl" #Engine used when SET_ENGINE is never applied

#Default output sizes (bytes)
POLY1305_TAG_SIZE = 16
GMAC_TAG_SIZE = 16
KMAC128_DEFAULT_SIZE = 32
KMAC256_DEFAULT_SIZE = 64
BLAKE2B_DEFAULT_SIZE = 64
BLAKE2S_DEFAULT_SIZE = 32

#Algorithm limits (bytes)
KMAC_MIN_KEY = 4
KMAC_MAX_KEY = 512
KMAC_MAX_CUSTOM = 512
KMAC_MAX_OUTPUT = 0xFFFFFF // 8
POLY1305_KEY_SIZE = 32
BLAKE2B_MAX_KEY = 64
BLAKE2B_MAX_SALT = 16
BLAKE2B_MAX_PERSON = 16
BLAKE2S_MAX_KEY = 32
BLAKE2S_MAX_SALT = 8
BLAKE2S_MAX_PERSON = 8
GCM_MIN_IV = 8 #cryptography rejects shorter GCM nonces
GCM_MAX_IV = 128

#Generated key material
KEY_SIZE = 32 #Bytes for generated keys when the algorithm does not fix one
IV_SIZE = 12 #Bytes for generated GMAC IVs

#Batch report settings
# Make data paths absolute (based on repository layout) so runs write to a
# consistent place regardless of the current working directory.
_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
DATA_DIR = os.path.join(_ROOT, 'data', 'results')
REPORT_FILENAME = "mac_report.csv"
SAVE_INTERVAL = 100 #Flush report to file every N records
THREAD_COUNT = 4 #Worker threads for batch jobs
ROUNDS = 10 #Messages per algorithm configuration
CHUNK_SIZE = 7 #Update chunk size used by batch jobs (0 = single update)

SAMPLE_MESSAGES = (
    b"",
    b"The quick brown fox",
    b"The quick brown fox jumps over the lazy dog",
    bytes(range(256)),
)

#Per-algorithm string controls used by the report generator
SAMPLE_CONFIGS = {
    "hmac": [("digest", "sha256"), ("hexkey", "000102030405060708090a0b0c0d0e0f")],
    "cmac": [("cipher", "aes-128-cbc"), ("hexkey", "2b7e151628aed2a6abf7158809cf4f3c")],
    "gmac": [("cipher", "aes-128-gcm"), ("hexkey", "000102030405060708090a0b0c0d0e0f"),
             ("hexiv", "000102030405060708090a0b")],
    "kmac128": [("hexkey", "404142434445464748494a4b4c4d4e4f"), ("custom", "report")],
    "kmac256": [("hexkey", "404142434445464748494a4b4c4d4e4f"), ("size", "32")],
    "poly1305": [("hexkey", "85d6be7857556d337f4452fe42d506a80103808afb0db2fd4abff6af4149f51b")],
    "blake2bmac": [("hexkey", "000102030405060708090a0b0c0d0e0f"), ("size", "32")],
    "blake2smac": [("hexkey", "000102030405060708090a0b0c0d0e0f"), ("custom", "report")],
}

#Logging
LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
