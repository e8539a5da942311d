#!/usr/bin/env python3
"""
CMake-free build of the guard_native extension.

- Finds nanobind by importing it (no CMake queries)
- Compiles nanobind from source unless a static library is lying around
- Bakes the project version into the binary so build-guard can spot skew

Usage (this is what build-guard runs): python setup.py build_ext --inplace
"""

import importlib.metadata
import os
import sysconfig
from pathlib import Path

from setuptools import Extension, setup

DISTRIBUTION = os.environ.get("BUILD_GUARD_DISTRIBUTION", "native-build-guard")


def get_native_version():
    """Version to bake into the binary: env override, else installed metadata."""
    version = os.environ.get("GUARD_NATIVE_VERSION", "").strip()
    if version:
        return version
    try:
        return importlib.metadata.version(DISTRIBUTION)
    except importlib.metadata.PackageNotFoundError as e:
        raise SystemExit(
            f"Cannot determine the version of {DISTRIBUTION!r}. "
            "Install the project (pip install -e ..) or set GUARD_NATIVE_VERSION."
        ) from e


def get_nanobind_paths():
    """Get nanobind include directories and source files - NO CMake needed."""
    try:
        import nanobind
    except ImportError as e:
        raise SystemExit("Could not find nanobind. Please install it: pip install nanobind") from e

    nanobind_dir = Path(nanobind.__file__).parent
    include_dir = nanobind_dir / 'include'
    robin_map_dir = nanobind_dir / 'ext' / 'robin_map' / 'include'
    src_dir = nanobind_dir / 'src'

    if not include_dir.exists():
        raise RuntimeError(f"nanobind include directory not found at {include_dir}")
    if not src_dir.exists():
        raise RuntimeError(f"nanobind src directory not found at {src_dir}")

    nanobind_sources = sorted(src_dir.glob('*.cpp'))
    if not nanobind_sources:
        raise RuntimeError(f"No nanobind source files found in {src_dir}")

    return [str(include_dir), str(robin_map_dir)], [str(s) for s in nanobind_sources]


def find_nanobind_library():
    """Find a pre-built nanobind static library next to this script, if any."""
    native_root = Path(__file__).parent
    for path in (native_root / 'libnanobind-static.a',
                 native_root / 'build' / 'libnanobind-static.a'):
        if path.exists():
            return str(path)
    return None


native_version = get_native_version()
nanobind_includes, nanobind_sources = get_nanobind_paths()
print(f"Building guard_native {native_version} for nanobind at: {nanobind_includes[0]}")

nanobind_lib = find_nanobind_library()
if nanobind_lib:
    print(f"Using pre-built nanobind static library: {nanobind_lib}")
    ext_sources = ['guard_native.cpp']
    extra_objects = [nanobind_lib]
else:
    print("Compiling nanobind from source (no CMake needed)")
    ext_sources = ['guard_native.cpp'] + nanobind_sources
    extra_objects = []

ext = Extension(
    'guard_native',
    sources=ext_sources,
    include_dirs=nanobind_includes + [sysconfig.get_path('include')],
    language='c++',
    define_macros=[('GUARD_NATIVE_VERSION', native_version)],
    extra_compile_args=['-std=c++17', '-O2'],
    extra_objects=extra_objects or None,
)

setup(
    name='guard-native',
    version=native_version,
    description='Native module checked by build-guard',
    ext_modules=[ext],
    zip_safe=False,
)
