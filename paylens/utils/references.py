"""Correlation reference generation."""

import random
import string
import time


def generate_reference(gateway_name: str) -> str:
    """Generate a merchant reference for requests that arrive without one.

    Not guaranteed to be globally unique: the suffix is non-cryptographic.

    Returns:
        str: Reference like 'peachpayments-1705314600000-k9m2x7'
    """
    timestamp = int(time.time() * 1000)
    random_part = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"{gateway_name.lower()}-{timestamp}-{random_part}"
