#!/usr/bin/env python3
"""
Packaging for build-guard.

Installs the guard modules from src/ and the `build-guard` console script.
The native module itself is built separately from native/ (that is the
build command the guard runs when the module is missing or out of date).

Usage: pip install -e .[test]
"""

from setuptools import setup

VERSION = '1.0.0'

setup(
    name='native-build-guard',
    version=VERSION,
    description='Rebuilds the platform-specific native module when it cannot be imported',
    package_dir={'': 'src'},
    py_modules=['build_guard', 'env_manager', 'main', 'native_build', 'native_loader'],
    python_requires='>=3.9',
    install_requires=[
        # Needed by native/setup.py, which the guard runs to rebuild the module.
        'nanobind>=2.0',
        'setuptools>=61',
    ],
    extras_require={
        'test': ['pytest>=7'],
    },
    entry_points={
        'console_scripts': ['build-guard=main:main'],
    },
    zip_safe=False,
)
