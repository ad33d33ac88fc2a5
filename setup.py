from __future__ import annotations

from setuptools import find_packages, setup  # type: ignore


setup(
    name="tfgraph",
    version="0.1.0",
    description="Transform-tree resolver and HTTP backend for streamed robot telemetry",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "numpy",
        "fastapi",
        "uvicorn",
        "httpx",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "tfgraph=tfgraph.__main__:main",
        ],
    },
)
