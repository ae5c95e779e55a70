"""License key generation."""

import secrets

# No I, O, 0, 1, l, o: keys are read off e-mails and typed by hand.
LICENSE_KEY_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789abcdefghijkmnopqrstuvwxyz"
DEFAULT_LICENSE_KEY_LENGTH = 24


def generate_license_key(length: int = DEFAULT_LICENSE_KEY_LENGTH) -> str:
    """Return a random license key of exactly ``length`` characters.

    Uses the ``secrets`` CSPRNG; ``secrets.choice`` draws uniformly, so there is
    no modulo bias toward the start of the alphabet.
    """
    if length <= 0:
        raise ValueError("license key length must be positive")
    return "".join(secrets.choice(LICENSE_KEY_ALPHABET) for _ in range(length))
