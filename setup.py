#!/usr/bin/env python
# encoding: utf-8
# pip install wheel
# python3 setup.py sdist bdist_wheel
# python3 -m twine upload --repository pypi dist/*
from setuptools import setup

setup(
    name="PyTMXRender",
    version="1.0",
    description="Loads tiled tmx maps and compiles them into render-ready data",
    author="bitcraft",
    author_email="leif.theden@gmail.com",
    packages=["tmxrender"],
    license="LGPLv3",
    long_description="https://github.com/bitcraft/PyTMX",
    python_requires=">=3.9",
    install_requires=["zstandard>=0.19"],
    extras_require={
        "test": ["pytest"],
    },
    classifiers=[
        "Intended Audience :: Developers",
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: GNU Lesser General Public License v3 (LGPLv3)",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Games/Entertainment",
        "Topic :: Multimedia :: Graphics",
    ],
)
