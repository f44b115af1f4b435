"""Setup script for cmdb-graph."""

from setuptools import find_packages, setup

setup(
    name="cmdb-graph",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "kuzu>=0.6.0",
        "httpx>=0.24.0",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "cmdb-graph=cmdb_graph.cli:main",
        ],
    },
)
