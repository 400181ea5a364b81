import re
from pathlib import Path

from setuptools import find_packages, setup

_HERE = Path(__file__).parent


def _read_version() -> str:
    match = re.search(
        r'^__version__ = "([^"]+)"',
        (_HERE / "pysrc" / "dtt" / "_pydtt.py").read_text(),
        re.MULTILINE,
    )
    assert match is not None
    return match[1]


setup(
    name="dtt",
    version=_read_version(),
    description=(
        "Timezone-aware date and time values with fixed UTC offsets, "
        "parsing, formatting, and calendar arithmetic"
    ),
    license="MIT",
    python_requires=">=3.9",
    package_dir={"": "pysrc"},
    packages=find_packages("pysrc"),
    package_data={"dtt": ["py.typed"]},
    install_requires=[],
    extras_require={
        "test": [
            "pytest>=7",
            "hypothesis>=6",
            "pytest-benchmark>=4",
        ],
        "docs": [
            "sphinx",
            "furo",
            "myst-parser",
            "sphinx-copybutton",
            "enum-tools[sphinx]",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Typing :: Typed",
    ],
)
