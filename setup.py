#!/usr/bin/env python3
"""Setup script for the GoHighLevel MCP Server."""
from setuptools import setup, find_packages

setup(
    name="ghl-mcp-server",
    version="1.0.0",
    description="Remote Model Context Protocol server for GoHighLevel over HTTP and SSE",
    author="GHL MCP Server Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "flask>=2.0.0",
        "flask-cors>=3.0.10",
        "pyyaml>=5.4",
        "requests>=2.25.0",
    ],
    extras_require={
        "test": [
            "pytest>=6.2.5",
            "coverage>=5.5",
        ],
    },
    entry_points={
        "console_scripts": [
            "ghl-mcp=ghl_mcp.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
    ],
)
