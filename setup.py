#!/usr/bin/env python

"""
Install radtags with:
 `pip install .`

Or, for developers, install w/ test dependencies in editable mode:
 `pip install -e .[test]`
"""

import re
from setuptools import setup, find_packages


# Fetch version from radtags/__init__.py.
INITFILE = "radtags/__init__.py"
CUR_VERSION = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]",
                        open(INITFILE, "r", encoding="utf-8").read(),
                        re.M).group(1)

setup(
    name="radtags",
    version=CUR_VERSION,
    description="Per-sample clustering of RAD-seq reads into candidate marker tags",
    long_description=open('README.rst', encoding="utf-8").read(),
    long_description_content_type='text/x-rst',
    packages=find_packages(exclude=["*.tests"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "pandas",
        "pydantic>=2",
        "loguru",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={'console_scripts': ['radtags = radtags.__main__:cli']},
    license='GPL',
    classifiers=[
        'Programming Language :: Python',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ],
)
