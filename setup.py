from setuptools import find_packages, setup

setup(
    name="totem-storage",
    version="0.1.0",
    description="Totem storage core - document store accessor and file-backed key/value store",
    author="Totem Accounting",
    packages=find_packages(include=["totem", "totem.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "pymongo",  # MongoDB
        "mongomock",  # In-memory MongoDB backend
        "pydantic>=2",  # Config validation
        "typer",  # CLI
        "click",  # Typer exceptions caught by the CLI entry point
        "rich",  # Terminal formatting
    ],
    extras_require={
        "test": [
            "pytest>=7.0",  # Testing framework
            "pytest-asyncio>=0.21",  # Async test support
            "pytest-timeout>=2.1",  # Test timeouts
            "pytest-xdist>=3.0",  # Parallel test execution
        ],
    },
    entry_points={
        "console_scripts": [
            "totemc=totem.cli:main",
        ],
    },
)
