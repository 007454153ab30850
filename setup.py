"""Setup script for flatbridge."""

from setuptools import find_packages, setup

setup(
    name="flatbridge",
    version="0.1.0",
    description="One-shot transfers between ClickHouse and delimited flat files",
    author="flatbridge Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pandas>=2.0.0",  # Delimited file parsing and writing
        "clickhouse-connect>=0.7.0",  # ClickHouse HTTP client
        "fastapi>=0.100.0",  # HTTP API
        "uvicorn>=0.23.0",  # ASGI server
        "python-multipart>=0.0.6",  # Multipart upload parsing
        "pydantic>=2.0.0",  # Request/response schemas
        "typer>=0.9.0",  # CLI framework
        "rich>=13.0.0",  # CLI output
        "pyyaml>=6.0",  # Configuration handling
    ],
    package_data={
        "flatbridge": ["py.typed"],
    },
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.1.0",
            "httpx>=0.24.0",
            "black>=22.1.0",
            "isort>=5.10.1",
            "flake8>=4.0.1",
            "mypy>=1.0.0",  # Type checking
        ],
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.1.0",
            "httpx>=0.24.0",  # FastAPI TestClient
        ],
    },
    entry_points={
        "console_scripts": [
            "flatbridge=flatbridge.cli.main:app",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Database",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
)
