"""Setup configuration for schedctl."""

from setuptools import setup, find_packages

setup(
    name="schedctl",
    version="1.0.0",
    description="Retry-aware job scheduler with exponential backoff",
    author="Your Name",
    packages=find_packages(include=["schedctl", "schedctl.*"]),
    install_requires=[
        "click>=8.1.7",
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
    },
    entry_points={
        "console_scripts": [
            "schedctl=schedctl.cli:cli",
        ],
    },
    python_requires=">=3.8",
)
