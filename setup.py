from setuptools import setup, find_packages

setup(
    name="knife-tools",
    version="1.0.0",
    description="Subcommand discovery, plugin manifest caching and dispatch for the knife CLI",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "PyYAML>=6.0",
        "rich>=13.0",
        "argcomplete>=3.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "knife = knife_core.cli.knife:main",
            "knife-config = common.shared.loader:cli_main",
        ],
    },
)
