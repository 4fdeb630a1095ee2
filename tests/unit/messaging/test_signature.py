import hmac, hashlib
from src.shared.security import compute_hub_signature, verify_hub_signature

def test_valid_signature():
    secret = "s3cr3t"
    body = b'{"hello":"world"}'
    sig = "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    assert verify_hub_signature(body, secret, sig) is True

def test_invalid_signature():
    secret = "s3cr3t"
    body = b'{"hello":"world"}'
    sig = "sha256=deadbeef"
    assert verify_hub_signature(body, secret, sig) is False

def test_compute_matches_hmac_over_exact_bytes():
    body = b'{"a":1}'
    assert compute_hub_signature(body, "k") == "sha256=" + hmac.new(b"k", body, hashlib.sha256).hexdigest()
    # one byte of whitespace changes the digest
    assert compute_hub_signature(b'{"a": 1}', "k") != compute_hub_signature(body, "k")

def test_missing_header_or_prefix_is_rejected():
    body = b"{}"
    digest = hmac.new(b"k", body, hashlib.sha256).hexdigest()
    assert verify_hub_signature(body, "k", None) is False
    assert verify_hub_signature(body, "k", digest) is False
    assert verify_hub_signature(body, "", "sha256=" + digest) is False
