"""
Bit-exact model of the FP4 minifloat

    bit 3     sign
    bits 2:1  exponent
    bit 0     mantissa

exponent == 0 encodes zero (mantissa 0) or the subnormal 0.5 (mantissa 1),
any other exponent encodes (-1)^s * 1.m * 2^(e-1). There is no infinity:
results beyond 6.0 saturate to the largest magnitude, results below 0.5
flush to +0. Negative zero is never produced.
"""

ZERO           = 0b0000
ONE            = 0b0010
MAX_MAGNITUDE  = 0b0111
SIGN_MASK      = 0b1000
MAGNITUDE_MASK = 0b0111


def fields(code):
    """Split a code into (sign, exponent, mantissa)"""
    return (code >> 3) & 1, (code >> 1) & 0b11, code & 1

def encode(sign, exponent, mantissa):
    return (sign << 3) | (exponent << 1) | mantissa

def is_zero(code):
    return code & MAGNITUDE_MASK == 0

def negate(code):
    return ZERO if is_zero(code) else code ^ SIGN_MASK

def _saturate(sign):
    return (sign << 3) | MAX_MAGNITUDE


def to_float(code):
    sign, exponent, mantissa = fields(code)
    if exponent == 0:
        magnitude = mantissa * 0.5
    else:
        magnitude = (1 + mantissa / 2) * 2 ** (exponent - 1)
    return -magnitude if sign else magnitude

# Non-negative codes ordered by magnitude
_MAGNITUDES = [ (to_float(code), code) for code in range(MAX_MAGNITUDE + 1) ]

def from_float(value):
    """Round to the nearest representable value, ties away from zero"""
    magnitude = abs(value)
    _, code = min(_MAGNITUDES, key=lambda mc: (abs(mc[0] - magnitude), -mc[0]))
    if value < 0 and code != ZERO:
        code |= SIGN_MASK
    return code


def multiply(a, b):
    sa, ea, ma = fields(a)
    sb, eb, mb = fields(b)
    sign = sa ^ sb

    if is_zero(a) or is_zero(b):
        return ZERO

    # 2-bit significands {hidden, mantissa}, subnormals have no hidden bit
    product  = ((int(ea != 0) << 1) | ma) * ((int(eb != 0) << 1) | mb)
    exponent = ea + eb - 1
    if product >= 8:
        product >>= 1
        exponent += 1

    if exponent < 0:
        return ZERO
    if exponent > 3:
        return _saturate(sign)

    if exponent == 0:
        mantissa = (product >> 1) & 1
    else:
        mantissa = int(product >= 5)
    return encode(sign, exponent, mantissa)


def _significand(exponent, mantissa):
    # {hidden, mantissa, guard}
    return (int(exponent != 0) << 2) | (mantissa << 1)

def add_sub(a, b, subtract=False):
    sa, ea, ma = fields(a)
    sb, eb, mb = fields(b)
    sb ^= int(subtract)

    # Magnitude order is the integer order of the low three bits
    if (b & MAGNITUDE_MASK) > (a & MAGNITUDE_MASK):
        (sa, ea, ma), (sb, eb, mb) = (sb, eb, mb), (sa, ea, ma)

    exp_l = max(ea, 1)
    exp_s = max(eb, 1)
    sig_l = _significand(ea, ma)
    sig_s = _significand(eb, mb)

    shift = exp_l - exp_s
    sig_s = sig_s >> shift if shift < 3 else 0

    raw = sig_l - sig_s if sa != sb else sig_l + sig_s
    if raw == 0:
        return ZERO

    lead     = raw.bit_length() - 1
    exponent = exp_l + lead - 2
    if exponent < 0:
        return ZERO
    if exponent == 0:
        return encode(sa, 0, 1)
    if exponent > 3:
        return _saturate(sa)

    mantissa = (raw >> (lead - 1)) & 1 if lead > 0 else 0
    return encode(sa, exponent, mantissa)
