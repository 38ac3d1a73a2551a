# src/hoist/bootstrap/keys.py

from __future__ import annotations

from hoist.bootstrap.errors import ExtractionError

PUBLIC_KEY_MARKER = "Public key:"


def extract_public_key(output: str, marker: str = PUBLIC_KEY_MARKER) -> str:
    """
    Return the token that immediately follows ``marker`` in ``output``.

    >>> extract_public_key("Public key: AGE1ABCXYZ more text")
    'AGE1ABCXYZ'
    """
    pos = output.find(marker)
    if pos < 0:
        raise ExtractionError(f"'{marker}' not found in key generator output", _excerpt(output))

    tokens = output[pos + len(marker):].split()
    if not tokens:
        raise ExtractionError(f"Nothing follows '{marker}' in key generator output", _excerpt(output))
    return tokens[0]


def _excerpt(output: str, limit: int = 500) -> str:
    return output if len(output) <= limit else output[:limit] + "..."
