"""
Build script for isotrace.

Install with `pip install -e .`, or `pip install -e .[test]` to also get
the test dependencies.
"""
from setuptools import setup, find_packages

setup(
    name="isotrace",
    version="0.1.0",
    description=(
        "Simulation of isotope patterns of stable isotope tracer experiments"
    ),
    python_requires=">=3.10",
    packages=find_packages(include=["isotrace", "isotrace.*"]),
    install_requires=[
        "numpy",
        "molmass",
        "IsoSpecPy",
    ],
    extras_require={
        "dataframe": ["pandas"],
        "test": ["pytest", "pandas"],
    },
)
