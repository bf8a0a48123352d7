MAX_N           = 32
MAX_LOG2N       = 5
COMPONENT_WIDTH = 4
SAMPLE_WIDTH    = 2 * COMPONENT_WIDTH


class ConfigurationError(ValueError):
    """Transform size is not a power of two in the range (1, MAX_N]"""


def is_valid_size(n):
    return 1 < n <= MAX_N and n & (n - 1) == 0


def log2_size(n):
    if not is_valid_size(n):
        raise ConfigurationError(f"N must be a power of two between 2 and {MAX_N}, got {n}")
    return n.bit_length() - 1
