import re

import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

with open("pysolix/__init__.py", "r") as fh:
    version_tuple = re.search(r"^version_tuple = \((\d+), (\d+), (\d+)\)", fh.read(), re.M).groups()

setuptools.setup(
    name="pysolix",
    version=".".join(version_tuple),
    author="pysolix contributors",
    description="Python module to export Anker Solix cloud telemetry as Prometheus metrics",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["*.tests", "*.tests.*", "tests"]),
    python_requires=">=3.8",
    install_requires=[
        'requests',
        'cryptography>=3.1',
        'prometheus_client',
        'python-dotenv',
    ],
    extras_require={
        'test': ['pytest'],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
