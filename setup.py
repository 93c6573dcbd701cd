import textwrap

from glob import glob
from pathlib import Path

from setuptools import find_packages
from setuptools import setup

NAME = "hid-usage-tables"
version = Path("lib/hid_usage_tables/version").read_text().strip()

setup(
    name=NAME,
    version=version,
    description="Generate Python usage pages from the HID Usage Tables specification.",
    long_description=textwrap.dedent(
        """
        hid-usage-tables downloads the HID Usage Tables specification published by the USB-IF,
        extracts the JSON attachment embedded in the PDF and generates Python enumerations and
        lookup classes for every usage page, plus a registry of all usage pages.
        The document and the attachment are cached so that later runs work offline."""
    ),
    license="GPLv2",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: GNU General Public License v2 (GPLv2)",
        "Natural Language :: English",
        "Programming Language :: Python :: 3 :: Only",
        "Operating System :: OS Independent",
        "Topic :: Software Development :: Code Generators",
        "Topic :: System :: Hardware :: Hardware Drivers",
    ],
    python_requires=">=3.8",
    install_requires=[
        "PyYAML (>= 3.12)",
        "pypdf (>= 4.0)",
        "requests (>= 2.20)",
    ],
    extras_require={
        "test": ["pytest", "pytest-mock", "pytest-cov"],
        "dev": ["ruff"],
    },
    package_dir={"": "lib"},
    packages=find_packages(where="lib"),
    package_data={"hid_usage_tables": ["version"]},
    include_package_data=True,
    scripts=glob("bin/*"),
)
