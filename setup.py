#!/usr/bin/env python3
"""
Setup script for the Compensated Statistics Library

Streaming descriptive statistics with compensated summation and
extended precision arithmetic.
"""

from pathlib import Path

from setuptools import setup, find_packages

# Package metadata
PACKAGE_NAME = "compensated-statistics"
VERSION = "1.0.0"
DESCRIPTION = "Mergeable streaming statistics with compensated summation and extended precision arithmetic"
AUTHOR = "Compensated Statistics Contributors"
AUTHOR_EMAIL = "contributors@compensated-statistics.org"
URL = "https://github.com/your-username/compensated-statistics"
LICENSE = "MIT"


# Read long description from README
def read_readme():
    readme_path = Path(__file__).parent / "README.md"
    if readme_path.exists():
        with open(readme_path, "r", encoding="utf-8") as f:
            return f.read()
    return DESCRIPTION


# Package requirements
def get_requirements():
    """Get package requirements."""
    base_requirements = [
        "numpy>=1.19.0",
        "torch>=1.9.0",
        "scipy>=1.7",
    ]

    test_requirements = [
        "pytest>=6.0",
        "pytest-cov>=2.0",
    ]

    dev_requirements = test_requirements + [
        "black>=21.0",
        "flake8>=3.8",
        "mypy>=0.900",
        "sphinx>=4.0",
        "sphinx-rtd-theme>=1.0",
    ]

    return {
        "base": base_requirements,
        "test": test_requirements,
        "dev": dev_requirements,
    }


# Setup configuration
def main():
    """Main setup function."""
    requirements = get_requirements()

    extras_require = {
        "test": requirements["test"],
        "dev": requirements["dev"],
    }

    setup(
        name=PACKAGE_NAME,
        version=VERSION,
        description=DESCRIPTION,
        long_description=read_readme(),
        long_description_content_type="text/markdown",
        author=AUTHOR,
        author_email=AUTHOR_EMAIL,
        url=URL,
        license=LICENSE,

        # Package configuration
        packages=find_packages(exclude=["tests", "tests.*"]),

        # Dependencies
        install_requires=requirements["base"],
        extras_require=extras_require,
        python_requires=">=3.9",

        # Metadata for PyPI
        classifiers=[
            "Development Status :: 5 - Production/Stable",
            "Intended Audience :: Science/Research",
            "Intended Audience :: Developers",
            "License :: OSI Approved :: MIT License",
            "Programming Language :: Python :: 3",
            "Programming Language :: Python :: 3.9",
            "Programming Language :: Python :: 3.10",
            "Programming Language :: Python :: 3.11",
            "Programming Language :: Python :: 3.12",
            "Topic :: Scientific/Engineering :: Mathematics",
            "Topic :: Software Development :: Libraries :: Python Modules",
            "Operating System :: OS Independent",
        ],
        keywords=[
            "numerical", "statistics", "summation", "kahan", "floating-point",
            "precision", "streaming", "moments", "parallel",
        ],

        # Project URLs
        project_urls={
            "Documentation": f"{URL}/docs",
            "Source": URL,
            "Tracker": f"{URL}/issues",
        },
        zip_safe=False,
    )


if __name__ == "__main__":
    main()
