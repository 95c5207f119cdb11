import pytest

from signalrouter.domain.errors import AuthenticityError
from signalrouter.services.security import compute_signature, sign_header, verify_stripe_signature

SECRET = "whsec_test_secret"
BODY = b'{"id": "evt_1", "type": "payout.failed"}'
NOW = 1770379200


def test_valid_signature_passes() -> None:
    header = sign_header(SECRET, BODY, timestamp=NOW)
    verify_stripe_signature(BODY, header, SECRET, now=NOW + 10)


def test_any_matching_v1_signature_passes() -> None:
    good = compute_signature(SECRET, NOW, BODY)
    header = f"t={NOW},v1=deadbeef,v1={good},v0=ignored"
    verify_stripe_signature(BODY, header, SECRET, now=NOW)


@pytest.mark.parametrize(
    "header",
    [
        None,
        "",
        "v1=abc",
        f"t={NOW}",
        "t=soon,v1=abc",
    ],
)
def test_malformed_header_is_rejected(header) -> None:
    with pytest.raises(AuthenticityError):
        verify_stripe_signature(BODY, header, SECRET, now=NOW)


def test_tampered_body_is_rejected() -> None:
    header = sign_header(SECRET, BODY, timestamp=NOW)
    with pytest.raises(AuthenticityError):
        verify_stripe_signature(BODY.replace(b"payout", b"charge"), header, SECRET, now=NOW)


def test_wrong_secret_is_rejected() -> None:
    header = sign_header("whsec_other", BODY, timestamp=NOW)
    with pytest.raises(AuthenticityError):
        verify_stripe_signature(BODY, header, SECRET, now=NOW)


def test_stale_timestamp_is_rejected() -> None:
    header = sign_header(SECRET, BODY, timestamp=NOW)
    with pytest.raises(AuthenticityError, match="tolerance"):
        verify_stripe_signature(BODY, header, SECRET, tolerance_seconds=300, now=NOW + 301)


@pytest.mark.parametrize("signature", ["\xe9", "é" * 64, "\udcff"])
def test_non_ascii_signature_is_rejected(signature) -> None:
    with pytest.raises(AuthenticityError):
        verify_stripe_signature(BODY, f"t={NOW},v1={signature}", SECRET, now=NOW)
