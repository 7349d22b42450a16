#!/usr/bin/env python3
"""Setup script for lintic."""

from setuptools import find_packages
from setuptools import setup

with open("README.md", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="lintic",
    version="1.0.0",
    description="AI-powered RuboCop fixes for GitHub pull requests",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Lintic Team",
    url="https://github.com/shindi-renuo/lintic",
    license="MIT",
    packages=find_packages(include=["lintic", "lintic.*"]),
    python_requires=">=3.9",
    install_requires=[
        "PyYAML>=6.0",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "lintic=lintic.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Software Development :: Quality Assurance",
    ],
    keywords="rubocop lint github pull-request ai ollama",
)
