"""Stripe webhook signature verification."""

import hashlib
import hmac
import time

from signalrouter.domain.errors import AuthenticityError

SIGNATURE_HEADER = "Stripe-Signature"
SIGNATURE_SCHEME = "v1"


def _parse_header(header: str) -> tuple[int, list[str]]:
    timestamp: int | None = None
    signatures: list[str] = []
    for item in header.split(","):
        key, sep, value = item.strip().partition("=")
        if not sep:
            continue
        if key == "t":
            try:
                timestamp = int(value)
            except ValueError as exc:
                raise AuthenticityError("signature timestamp is not an integer") from exc
        elif key == SIGNATURE_SCHEME:
            signatures.append(value)
    if timestamp is None:
        raise AuthenticityError("signature header has no timestamp")
    if not signatures:
        raise AuthenticityError(f"signature header has no {SIGNATURE_SCHEME} signature")
    return timestamp, signatures


def compute_signature(secret: str, timestamp: int, body: bytes) -> str:
    signed = f"{timestamp}.".encode("utf-8") + body
    return hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()


def sign_header(secret: str, body: bytes, timestamp: int | None = None) -> str:
    """Build a ``Stripe-Signature`` header value for ``body``."""

    ts = int(time.time()) if timestamp is None else timestamp
    return f"t={ts},{SIGNATURE_SCHEME}={compute_signature(secret, ts, body)}"


def verify_stripe_signature(
    body: bytes,
    header: str | None,
    secret: str,
    tolerance_seconds: int = 300,
    now: float | None = None,
) -> None:
    """Raise ``AuthenticityError`` unless ``header`` signs ``body`` with ``secret``."""

    if not header:
        raise AuthenticityError(f"missing {SIGNATURE_HEADER} header")
    timestamp, signatures = _parse_header(header)
    expected = compute_signature(secret, timestamp, body).encode("ascii")
    if not any(
        hmac.compare_digest(expected, candidate.encode("utf-8", "surrogateescape")) for candidate in signatures
    ):
        raise AuthenticityError("no signature matches the expected signature for payload")
    current = time.time() if now is None else now
    if tolerance_seconds > 0 and current - timestamp > tolerance_seconds:
        raise AuthenticityError("signature timestamp outside the tolerance zone")
