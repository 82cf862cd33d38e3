from hashlib import sha256


def compute_identifier(value: str) -> str:
    """SHA-256 hex digest of the exact UTF-8 content of ``value``."""
    return sha256(value.encode("utf-8")).hexdigest()
