"""
Setup script for BSP Partition package
"""
from setuptools import setup, find_packages
from pathlib import Path

# Чтение README для long_description
this_directory = Path(__file__).parent
readme_path = this_directory / "README.md"
if readme_path.exists():
    long_description = readme_path.read_text(encoding='utf-8')
else:
    long_description = "BSP Partition - Exact BSP tree over disjoint convex solids"

setup(
    name="bsp-partition",
    version="0.1.0",
    author="Your Name",
    author_email="your.email@example.com",
    description="Exact binary space partitioning of 3D space into disjoint convex solids",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/bsp-partition",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Mathematics",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",

    # Зависимости
    install_requires=[
        "numpy>=1.21.0",
        "psutil>=5.8.0",
    ],

    # Опциональные зависимости
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=3.0.0",
            "black>=22.0.0",
            "flake8>=4.0.0",
            "mypy>=0.950",
        ],
    },

    # Точка входа для CLI
    entry_points={
        "console_scripts": [
            "bsp-partition=main:main",
        ],
    },

    include_package_data=True,
    zip_safe=False,
)
