import pytest

from hoist.bootstrap.errors import ExtractionError
from hoist.bootstrap.keys import extract_public_key


def test_token_after_marker():
    assert extract_public_key("Public key: AGE1ABCXYZ more text") == "AGE1ABCXYZ"


def test_marker_on_later_line():
    out = "age-keygen: warning: writing secret key to a world-readable file\nPublic key: age1xyz\n"
    assert extract_public_key(out) == "age1xyz"


@pytest.mark.parametrize("out", ["", "bash: age-keygen: command not found", "public key: age1lower"])
def test_missing_marker_raises(out):
    with pytest.raises(ExtractionError) as exc:
        extract_public_key(out)
    assert exc.value.output == out


def test_marker_without_value_raises():
    with pytest.raises(ExtractionError):
        extract_public_key("Public key:   \n")


def test_long_output_is_truncated_in_error():
    with pytest.raises(ExtractionError) as exc:
        extract_public_key("x" * 2000)
    assert len(exc.value.output) < 600
