#!/usr/bin/env python
"""Build shim; all project metadata lives in pyproject.toml."""

import setuptools

if __name__ == "__main__":
    setuptools.setup()
