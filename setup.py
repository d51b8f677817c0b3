#!/usr/bin/env python
from setuptools import setup, find_packages

setup(
    name="probchain",
    version="0.1.0",
    description="Metropolis-Hastings and Gibbs samplers for conjugate-normal Bayesian models",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",

    # finds probchain/ and probchain.core, but not tests or examples
    packages=find_packages(exclude=["tests*", "examples*", "docs*"]),

    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.20",
        "scipy>=1.7",
        "prefect>=3.0",
    ],
    extras_require={
        "dev": [
            "pytest",
        ],
    },

    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],

    include_package_data=False,
)
