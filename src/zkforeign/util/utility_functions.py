"""Utility functions."""


def check_positive_integer(n: int, name: str) -> None:
    """Check that `n` is a positive integer.

    Args:
        n (int): The value to check.
        name (str): The name of the value, used in the error message.

    Raises:
        ValueError: If `n` is not a positive integer.
    """
    if isinstance(n, bool) or not isinstance(n, int) or n <= 0:
        msg = f"{name} must be a positive integer, got {n!r}"
        raise ValueError(msg)


def bigint_to_bytes(n: int) -> bytes:
    """Encode the non-negative integer `n` in little-endian with the minimal number of bytes.

    Example:
        >>> bigint_to_bytes(0)
        b''
        >>> bigint_to_bytes(0x0102)
        b'\\x02\\x01'
    """
    return n.to_bytes((n.bit_length() + 7) // 8, "little")


def bytes_to_bigint(data: bytes) -> int:
    """Decode little-endian bytes into an integer."""
    return int.from_bytes(data, "little")


def bigint_to_bits(n: int, length: int) -> list[int]:
    """Return the `length` least significant bits of `n`, least significant first."""
    return [(n >> i) & 1 for i in range(length)]


def divide_and_round(numerator: int, denominator: int) -> int:
    """Compute `numerator / denominator` rounded to the nearest integer, rounding half up.

    Example:
        >>> divide_and_round(7, 2)
        4
        >>> divide_and_round(-7, 2)
        -3
        >>> divide_and_round(5, -3)
        -2
    """
    if denominator == 0:
        msg = "Division by zero"
        raise ZeroDivisionError(msg)
    if denominator < 0:
        numerator, denominator = -numerator, -denominator
    return (2 * numerator + denominator) // (2 * denominator)


def sqrt_mod(n: int, p: int) -> int | None:
    """Compute a square root of `n` modulo the odd prime `p` with the Tonelli-Shanks algorithm.

    Args:
        n (int): The value to take the square root of.
        p (int): The modulus.

    Returns:
        A square root of `n` modulo `p`, or `None` if `n` is not a square.
    """
    n %= p
    if n == 0:
        return 0
    if pow(n, (p - 1) // 2, p) != 1:
        return None
    if p % 4 == 3:
        return pow(n, (p + 1) // 4, p)

    # p - 1 = q * 2^s with q odd
    q, s = p - 1, 0
    while q % 2 == 0:
        q //= 2
        s += 1
    z = 2
    while pow(z, (p - 1) // 2, p) != p - 1:
        z += 1

    m, c, t, r = s, pow(z, q, p), pow(n, q, p), pow(n, (q + 1) // 2, p)
    while t != 1:
        i, t_squared = 1, t * t % p
        while t_squared != 1:
            t_squared = t_squared * t_squared % p
            i += 1
        b = pow(c, 1 << (m - i - 1), p)
        m, c, t, r = i, b * b % p, t * b * b % p, r * b % p
    return r


def cube_roots_of_unity(p: int) -> tuple[int, int]:
    """Return the two non-trivial cube roots of unity modulo the prime `p`.

    Raises:
        ValueError: If `p` is not congruent to 1 modulo 3.
    """
    if p % 3 != 1:
        msg = f"There are no non-trivial cube roots of unity modulo {p}"
        raise ValueError(msg)
    g = 2
    while (root := pow(g, (p - 1) // 3, p)) == 1:
        g += 1
    return root, root * root % p
