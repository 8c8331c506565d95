"""BIP-340 Schnorr primitives over secp256k1.

Verification takes hex straight from the wire, so every parse failure is
reported as an ordinary ``False`` rather than an exception.
"""
from __future__ import annotations

import re

import secp256k1

from relaygate.utils.logger_util import get_logger

logger = get_logger(__name__)

_SIG_HEX = re.compile(r"[0-9a-fA-F]{128}")
_XONLY_HEX = re.compile(r"[0-9a-fA-F]{64}")
# BIP-340 keys are x-only; the even-y point is implied
_EVEN_Y = b"\x02"


def verify_schnorr(message: bytes, sig_hex: str, pubkey_hex: str) -> bool:
    """Check a 64-byte Schnorr signature over a 32-byte message."""
    if len(message) != 32:
        return False
    if not isinstance(sig_hex, str) or not _SIG_HEX.fullmatch(sig_hex):
        return False
    if not isinstance(pubkey_hex, str) or not _XONLY_HEX.fullmatch(pubkey_hex):
        return False
    try:
        pubkey = secp256k1.PublicKey(_EVEN_Y + bytes.fromhex(pubkey_hex), raw=True)
        return bool(pubkey.schnorr_verify(message, bytes.fromhex(sig_hex), None, raw=True))
    except Exception as exc:
        # the bindings raise bare Exception for points not on the curve
        logger.debug("schnorr verification error: %s", exc)
        return False


def xonly_pubkey_hex(private_key: bytes) -> str:
    """Hex x-only public key for a 32-byte secret."""
    sk = secp256k1.PrivateKey(private_key, raw=True)
    return sk.pubkey.serialize()[1:].hex()


def sign_digest(private_key: bytes, digest: bytes) -> str:
    """Schnorr-sign a 32-byte digest; returns the signature as lowercase hex."""
    sk = secp256k1.PrivateKey(private_key, raw=True)
    return sk.schnorr_sign(digest, None, raw=True).hex()
