"""
LittleBT: relational persistence for a Bigtable emulator

LittleBT stores the rows and table catalog of a wide-column (Bigtable style)
emulator in a relational database, so emulator state survives restarts.
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh.readlines() if line.strip() and not line.startswith("#")]

setup(
    name="LittleBT",
    version="0.1.0",
    description="Relational persistence layer for a Bigtable emulator",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=['littlebt', 'littlebt.*'], exclude=['tests*']),
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "littlebt=littlebt.cli:littlebt",
        ],
    },
    python_requires=">=3.10",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Database",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
    keywords="bigtable, emulator, postgresql, storage",
)
