from setuptools import setup, find_packages

setup(
    name="superbank",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pandas",
        "numpy",
        "openpyxl",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-dependency",
        ],
    },
    entry_points={
        "console_scripts": [
            "superbank=superbank.cli:main",
        ],
    },
    author="Price Hatfield",
    description="Normalizes transactions from many bank statement formats into one Super Bank view with analytics",
    python_requires=">=3.8",
)
