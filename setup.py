#!/usr/bin/env python
"""
Setup script for the SKU drilldown package.
"""

from setuptools import setup, find_packages

# Core dependencies required for the package
requirements = [
    "pandas>=1.0.0",
    "numpy>=1.18.0",
    "jinja2>=2.11.0",
    "pyyaml>=5.1.0",
]

setup(
    name="sku_drilldown",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=requirements,
    extras_require={
        "dev": ["pytest>=6.0.0", "pytest-cov>=2.10.0", "black>=20.8b1"],
    },
    package_data={
        "sku_drilldown": ["configs/*.yaml"],
    },
    description="Hierarchical aggregation engine for category/sub-category/item sales drilldowns",
    author="Analytics Team",
    author_email="analytics@example.com",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Programming Language :: Python :: 3",
    ],
    python_requires=">=3.8",
    include_package_data=True,
)
