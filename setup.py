"""
Minimal setup.py for the sokol build system

Runtime Requirements:
- A C compiler (clang/gcc, or clang with --target for cross builds)
- ar (or llvm-ar on Windows)
- For web targets: the Emscripten SDK (installed on first use into deps/emsdk)
- For the shaders step: sokol-tools-bin checked out next to the project

Parallel Build Support:
- Uses all CPU cores by default
- Override with --jobs N or: export SOKOL_BUILD_MAX_JOBS=N

Cross-Compilation Support:
- Pass --target <triple>, or set CC to a prefixed cross compiler
  (e.g. CC=aarch64-linux-gnu-gcc) or CROSS_COMPILE
"""

from pathlib import Path

from setuptools import setup, find_packages

# Read README for long description
readme_path = Path("README.md")
long_description = ""
if readme_path.exists():
    with open(readme_path, "r", encoding="utf-8") as f:
        long_description = f.read()

setup(
    name="sokol-build",
    version="1.0.0",
    description="Build orchestration for the sokol C library, its samples and shaders",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["sokol_build", "sokol_build.*"]),
    package_data={
        "sokol_build": [
            "config/*.yaml",
        ]
    },
    include_package_data=True,
    entry_points={
        "console_scripts": [
            "sokol-build=sokol_build.main:main",
        ],
    },
    zip_safe=False,
    python_requires=">=3.10",
    install_requires=[
        "pyyaml",
        "pydantic>=2",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-cov",
            "black",
            "flake8",
            "mypy",
        ],
        "test": [
            "pytest",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Operating System :: Microsoft :: Windows",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS",
        "Topic :: Software Development :: Build Tools",
    ],
)
