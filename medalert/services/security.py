import hashlib


def hash_password(password: str) -> str:
    """SHA-256 hex digest of the password.

    Unsalted: the backend compares digests directly, so two accounts with the
    same password store the same hash. Moving to a salted KDF needs a matching
    backend change and a migration of stored hashes.
    """
    return hashlib.sha256((password or "").encode("utf-8")).hexdigest()
