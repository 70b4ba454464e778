from setuptools import setup, find_packages

setup(
    name="autocheck",
    version="1.0.0",
    description="Automated grading of C++ unit-test style assignments",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "click>=8.1.7",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "autocheck=autocheck.cli:main",
        ],
    },
    python_requires=">=3.8",
)
