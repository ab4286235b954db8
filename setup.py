"""Setup script for enroll."""

from pathlib import Path

from setuptools import find_packages, setup

readme = Path(__file__).parent / "README.md"

setup(
    name="enroll-cli",
    version="0.1.0",
    description="Register a license server with the remote account service",
    long_description=readme.read_text() if readme.exists() else "",
    long_description_content_type="text/markdown",
    python_requires=">=3.10",
    packages=find_packages(include=["enroll", "enroll.*"]),
    install_requires=[
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "dependency-injector>=4.41",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        'tomli>=2.0; python_version < "3.11"',
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
    },
    entry_points={
        "console_scripts": [
            "enroll=enroll.__main__:main",
        ],
    },
)
