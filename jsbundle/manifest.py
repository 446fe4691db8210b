"""Manifest codecs.

A manifest is the ordered list of script names a page registered.  Codecs
turn it into a short token that can travel in a URL and back again.  Two
interchangeable strategies are provided:

``EncryptedManifestCodec``
    Encrypts the joined names with AES using a key and a static IV derived
    from the configured secret.  Any process sharing the secret can decode
    the token, so no shared state is needed between workers.  Identical
    manifests always produce identical tokens, which reveals when two pages
    use the same script list.

``HashedManifestCodec``
    Uses the MD5 digest of the joined names as token and remembers the
    mapping in memory.  The table is never pruned and does not survive a
    restart: tokens issued by a previous process decode to an empty list.

Callers interact with the :class:`ManifestCodec` interface regardless of the
strategy selected through :func:`load_codec`.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import threading
from typing import Iterable

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .config import BundleOptions
from .errors import ManifestDecodeError

logger = logging.getLogger(__name__)

SEPARATOR = ";"


def _join(names: Iterable[str]) -> str:
    names = list(names)
    for name in names:
        if SEPARATOR in name:
            raise ValueError(f"script name may not contain {SEPARATOR!r}: {name}")
    return SEPARATOR.join(names)


def _split(joined: str) -> list[str]:
    if not joined:
        return []
    return joined.split(SEPARATOR)


class ManifestCodec:
    """Simple interface all manifest codecs must implement."""

    name: str = ""

    def encode(self, names: Iterable[str]) -> str:  # pragma: no cover - interface only
        raise NotImplementedError

    def decode(self, token: str) -> list[str]:  # pragma: no cover - interface only
        raise NotImplementedError


class EncryptedManifestCodec(ManifestCodec):
    """Reversible codec keyed by a shared secret."""

    name = "encrypted"

    def __init__(self, secret_key: str) -> None:
        secret = secret_key.encode("utf-8")
        self._key = hashlib.sha256(secret).digest()
        # static IV: equal manifests must map to equal tokens
        self._iv = hashlib.md5(secret).digest()

    def _cipher(self) -> Cipher:
        return Cipher(algorithms.AES(self._key), modes.CBC(self._iv))

    def encode(self, names: Iterable[str]) -> str:
        plaintext = _join(names).encode("utf-8")
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext) + padder.finalize()
        encryptor = self._cipher().encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return base64.urlsafe_b64encode(ciphertext).decode("ascii")

    def _decrypt(self, token: str) -> str:
        try:
            ciphertext = base64.urlsafe_b64decode(token.encode("ascii"))
            decryptor = self._cipher().decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
            return plaintext.decode("utf-8")
        except (binascii.Error, ValueError, TypeError) as exc:
            raise ManifestDecodeError(str(exc)) from exc

    def decode(self, token: str) -> list[str]:
        try:
            return _split(self._decrypt(token))
        except ManifestDecodeError as exc:
            logger.info("Discarding undecodable manifest token %r: %s", token[:64], exc)
            return []


class HashedManifestCodec(ManifestCodec):
    """One-way codec backed by an in-process lookup table.

    The table grows with every distinct manifest and is never pruned.
    """

    name = "hashed"

    def __init__(self) -> None:
        self._manifests: dict[str, list[str]] = {}
        self._lock = threading.Lock()

    def encode(self, names: Iterable[str]) -> str:
        names = list(names)
        digest = hashlib.md5(_join(names).encode("utf-8")).hexdigest()
        with self._lock:
            self._manifests[digest] = names
        return digest

    def decode(self, token: str) -> list[str]:
        with self._lock:
            names = self._manifests.get(token)
        if names is None:
            logger.info("Unknown manifest token %r", token[:64])
            return []
        return list(names)

    def __len__(self) -> int:
        with self._lock:
            return len(self._manifests)


def load_codec(options: BundleOptions) -> ManifestCodec:
    codec_type = options.codec.lower()
    if codec_type == EncryptedManifestCodec.name:
        return EncryptedManifestCodec(options.secret_key)
    if codec_type == HashedManifestCodec.name:
        return HashedManifestCodec()
    raise ValueError(f"unknown manifest codec: {options.codec}")


__all__ = [
    "ManifestCodec",
    "EncryptedManifestCodec",
    "HashedManifestCodec",
    "load_codec",
]
