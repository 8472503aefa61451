"""
species-predictor - species prediction from sequencing reads

Subsample reads, assemble with SPAdes and identify the longest contig with NCBI BLAST.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

setup(
    name="species-predictor",
    version="1.0.0",
    author="Austin P. Morrissey",
    author_email="austin.morrissey@proton.me",
    description="Species prediction from sequencing reads via assembly and NCBI BLAST",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/species-predictor",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.8",
    install_requires=[
        "biopython>=1.79",
        "requests>=2.26.0",
        "urllib3>=1.26.0",
        "click>=8.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=6.0",
            "pytest-cov>=2.0",
            "black>=21.0",
            "mypy>=0.900",
        ],
    },
    entry_points={
        "console_scripts": [
            "species-predict=species_predictor.cli:main",
        ],
    },
)
