"""Setup script for bank-queue-sim."""

from setuptools import setup, find_packages

setup(
    name="bank-queue-sim",
    version="0.1.0",
    description="A tick-driven M/M/1 single-teller bank queue simulation engine",
    author="Bank Queue Sim",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        "simpy",
        "numpy",
        "pandas",
        "matplotlib",
    ],
    extras_require={
        "tests": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": [
            "run-simulation=scripts.run_simulation:main",
        ],
    },
)
