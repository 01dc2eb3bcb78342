"""
Game Boy CPU core - Setup

The modules run as plain Python (Cython pure-Python mode). Set
GBCORE_CYTHONIZE=1 to compile the hot paths:

1. registers.py → registers.so (simplest)
2. memory.py → memory.so
3. cpu.py → cpu.so (most executed code)
"""
import os

from setuptools import find_packages, setup

# PyBoy-style compiler directives
compiler_directives = {
    "boundscheck": False,        # no array bounds checks
    "cdivision": True,           # C integer division
    "wraparound": False,         # no negative indexing
    "infer_types": True,
    "initializedcheck": False,
    "nonecheck": False,
    "overflowcheck": False,
    "language_level": "3",
}

modules_to_compile = [
    "src/gbcore/registers.py",
    "src/gbcore/memory.py",
    "src/gbcore/cpu.py",
]

ext_modules = []
include_dirs = []
if os.getenv("GBCORE_CYTHONIZE"):
    from Cython.Build import cythonize
    import numpy as np

    ext_modules = cythonize(
        modules_to_compile,
        compiler_directives=compiler_directives,
        annotate=True,  # HTML annotation files for optimization work
    )
    include_dirs = [np.get_include()]

setup(
    name="gbcore",
    version="0.1.0",
    description="Game Boy (LR35902) CPU and memory emulation core",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.8",
    install_requires=[
        "Cython>=3.0",
        "numpy",
        "pygame",
    ],
    extras_require={
        "test": ["pytest"],
    },
    ext_modules=ext_modules,
    include_dirs=include_dirs,
    zip_safe=False,
)
