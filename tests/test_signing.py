import hashlib
import hmac

import pytest

from endfield.signing import compute_sign, sign_header_json


def test_sign_header_json_is_compact_and_ordered():
    assert sign_header_json("1700000000") == '{"platform":"3","timestamp":"1700000000","dId":"","vName":"1.0.0"}'


def test_compute_sign_matches_documented_transform():
    message = (
        "/api/v1/game/player/binding1700000000"
        '{"platform":"3","timestamp":"1700000000","dId":"","vName":"1.0.0"}'
    )
    inner = hmac.new(b"mysecret", message.encode(), hashlib.sha256).hexdigest()
    expected = hashlib.md5(inner.encode()).hexdigest()

    assert compute_sign("/api/v1/game/player/binding", "1700000000", "mysecret", "3", "1.0.0") == expected


def test_compute_sign_is_deterministic():
    args = ("/web/v1/game/endfield/attendance", "1700000123", "salt", "3", "1.0.0")
    first = compute_sign(*args)
    assert first == compute_sign(*args)
    assert len(first) == 32
    assert first == first.lower()


@pytest.mark.parametrize("index, value", [
    (0, "/api/v1/other"),
    (1, "1700000001"),
    (2, "other-secret"),
    (3, "1"),
    (4, "1.0.1"),
])
def test_compute_sign_changes_with_any_argument(index, value):
    args = ["/api/v1/game/player/binding", "1700000000", "mysecret", "3", "1.0.0"]
    base = compute_sign(*args)
    args[index] = value
    assert compute_sign(*args) != base


@pytest.mark.parametrize("secret", ["", None])
def test_compute_sign_without_secret_returns_none(secret):
    assert compute_sign("/api/v1/game/player/binding", "1700000000", secret) is None


def test_empty_body_does_not_change_signature():
    assert compute_sign("/p", "1", "s", body="") == compute_sign("/p", "1", "s")
