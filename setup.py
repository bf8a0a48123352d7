from setuptools import setup, find_namespace_packages

setup(
    name="fp4_fft",
    version="0.1.0",
    description="Radix-2 DIT FFT over FP4 minifloat complex samples, Amaranth gateware and reference model",
    packages=find_namespace_packages(include=["fp4_fft", "fp4_fft.*"]),
    python_requires=">=3.9",
    install_requires=[
        "amaranth>=0.5,<0.6",
        "numpy",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
