# SPDX-FileCopyrightText: 2025 LockGate contributors
# SPDX-License-Identifier: MIT

from setuptools import find_packages, setup

setup(
    name="lockgate",
    version="0.1.0",
    description="LockGate: secure session and device-lock state for the mobile client",
    author="LockGate contributors",
    license="MIT",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
        "click<9.0,>=8.1",
        "cryptography<43.0,>=38.0.4",
        "argon2-cffi<24.0,>=23.1",
        "requests<3.0,>=2.32",
    ],
    extras_require={
        "test": [
            "pytest>=8.0.0",
            "pytest-timeout>=2.3.0",
            "hypothesis>=6.0.0",
        ],
        "dev": [
            "ruff>=0.2.0",
            "black>=23.1.0",
            "mypy>=1.8.0",
            "bandit>=1.7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "lockgate=lockgate.cli:main",
        ],
    },
)
