"""Signature verification for uploaded benchmark content.

Verification is a gate in front of storage: a verifier decides whether the
uploader knows the shared secret.  :class:`AcceptAllVerifier` admits every
upload; :class:`HmacVerifier` checks an HMAC-SHA256 hex digest of the
content.
"""

from __future__ import annotations

import hashlib
import hmac


class Verifier:
    """Interface for signature verifiers."""

    def verify(self, signature: str, content: str | bytes, secret: str) -> bool:
        raise NotImplementedError


class AcceptAllVerifier(Verifier):
    """Admits every upload regardless of signature."""

    def verify(self, signature: str, content: str | bytes, secret: str) -> bool:
        return True


class HmacVerifier(Verifier):
    """HMAC-SHA256 of the content keyed with the shared secret, hex encoded."""

    @staticmethod
    def sign(content: str | bytes, secret: str) -> str:
        if isinstance(content, str):
            content = content.encode("utf-8")
        return hmac.new(secret.encode("utf-8"), content, hashlib.sha256).hexdigest()

    def verify(self, signature: str, content: str | bytes, secret: str) -> bool:
        if not signature or not secret:
            return False
        return hmac.compare_digest(self.sign(content, secret), signature.strip().lower())


def verifier_for(secret: str) -> Verifier:
    """Pick the HMAC verifier when a secret is configured, else accept all."""
    return HmacVerifier() if secret else AcceptAllVerifier()
