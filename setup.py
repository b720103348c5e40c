#!/usr/bin/python
# -*- encoding: utf-8 -*-
import ast
import re

from setuptools import find_packages
from setuptools import setup

## The version number is kept in one place only, as
## davstorage.__version__, and picked up from there.
_version_re = re.compile(r"__version__\s+=\s+(.*)")
with open("davstorage/__init__.py", "rb") as f:
    version = str(
        ast.literal_eval(_version_re.search(f.read().decode("utf-8")).group(1))
    )

if __name__ == "__main__":
    test_packages = [
        "pytest",
        "coverage",
        "pyyaml",
    ]

    setup(
        name="davstorage",
        version=version,
        description="WebDAV storage driver with a capability based storage interface",
        long_description=open("README.md").read(),
        long_description_content_type="text/markdown",
        classifiers=[
            "Development Status :: 4 - Beta",
            "Intended Audience :: Developers",
            "License :: OSI Approved :: Apache Software License",
            "Operating System :: OS Independent",
            "Programming Language :: Python",
            "Programming Language :: Python :: 3",
            "Topic :: Internet :: WWW/HTTP",
            "Topic :: System :: Filesystems",
            "Topic :: Software Development :: Libraries " ":: Python Modules",
        ],
        keywords="webdav storage nextcloud owncloud",
        license="Apache-2.0",
        python_requires=">=3.8",
        packages=find_packages(exclude=["tests", "tests.*"]),
        include_package_data=True,
        zip_safe=False,
        install_requires=[
            "lxml",
            "requests",
            "typing_extensions",
        ],
        extras_require={
            "test": test_packages,
            "yaml": ["pyyaml"],
        },
    )
