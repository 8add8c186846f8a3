import secrets
import string

_ALPHABET = string.digits + string.ascii_lowercase


def generate_record_id(length: int = 9) -> str:
    """Short opaque base36 token used as the primary key of ledger records."""
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))
