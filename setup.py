from setuptools import setup, find_packages

setup(
    name="sneakyeq",
    version="0.1.0",
    description="Sneaky equality and memoization by tracking which fields a computation reads",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.11",
    install_requires=[],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
)
