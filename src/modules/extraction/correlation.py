# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

import secrets
import string

ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase

# Largest multiple of the alphabet size not above 256; bytes at or above it are rejected to keep the draw unbiased
_ACCEPT_BELOW = 256 - 256 % len(ALPHABET)


def generate_correlation_id(length: int = 30) -> str:
    """
    Return a random id of `length` symbols from the 62-symbol alphabet 0-9a-zA-Z.
    Uses rejection sampling over cryptographic random bytes, so every symbol is equally likely.
    """
    if length <= 0:
        raise ValueError("length must be positive")

    symbols: list[str] = []
    while len(symbols) < length:
        for byte in secrets.token_bytes(length * 2):
            if byte >= _ACCEPT_BELOW:
                continue
            symbols.append(ALPHABET[byte % len(ALPHABET)])
            if len(symbols) == length:
                break
    return "".join(symbols)
