import numpy as np

from . import fp4


def pack(real, imag):
    """Complex sample word: real FP4 in bits 7:4, imaginary FP4 in bits 3:0"""
    return ((real & 0xF) << 4) | (imag & 0xF)

def unpack(word):
    return (word >> 4) & 0xF, word & 0xF

def to_complex(word):
    real, imag = unpack(word)
    return complex(fp4.to_float(real), fp4.to_float(imag))

def from_complex(value):
    value = complex(value)
    return pack(fp4.from_float(value.real), fp4.from_float(value.imag))

def to_complex_array(words):
    return np.array([ to_complex(w) for w in words ], dtype=np.complex128)

def from_complex_array(values):
    return [ from_complex(v) for v in np.asarray(values, dtype=np.complex128) ]


def complex_multiply(a, b):
    ar, ai = unpack(a)
    br, bi = unpack(b)
    real = fp4.add_sub(fp4.multiply(ar, br), fp4.multiply(ai, bi), subtract=True)
    imag = fp4.add_sub(fp4.multiply(ar, bi), fp4.multiply(ai, br), subtract=False)
    return pack(real, imag)

def complex_add_sub(a, b, subtract=False):
    ar, ai = unpack(a)
    br, bi = unpack(b)
    return pack(fp4.add_sub(ar, br, subtract), fp4.add_sub(ai, bi, subtract))
