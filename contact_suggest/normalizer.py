"""Address canonicalization: raw header strings to lookup keys and names."""

from __future__ import annotations


def normalize_address(raw: str | None) -> tuple[str, str | None]:
    """Split a raw address into ``(normalized_email, display_name)``.

    Accepts both ``addr@domain`` and ``"Display Name" <addr@domain>``.
    The email is trimmed and lowercased; the name keeps its case but loses
    double quotes.  A name that is empty, or that equals the whole input,
    is reported as ``None``.

    Never raises: unusable input produces an empty email, which callers
    reject via :func:`is_valid_email`.
    """
    if not raw:
        return "", None

    trimmed = raw.strip()
    if "<" not in trimmed:
        return trimmed.lower(), None

    prefix, remainder = trimmed.split("<", 1)
    address = remainder.split(">", 1)[0].strip()

    name: str | None = prefix.strip().replace('"', "").strip()
    if not name or name == trimmed:
        name = None

    return address.lower(), name


def is_valid_email(email: str) -> bool:
    """An address is usable as a suggestion key only if it contains '@'."""
    return bool(email) and "@" in email
