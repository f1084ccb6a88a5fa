"""Setup script for the wiki-intel package."""

from setuptools import setup, find_packages

setup(
    name="wiki-intel",
    version="1.0.0",
    packages=find_packages(include=["wiki_intel", "wiki_intel.*"]),
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.110",
        "httpx>=0.27",
        "pydantic>=2.6",
        "pydantic-settings>=2.2",
        "prometheus-client>=0.20",
        "python-dotenv>=1.0",
        "structlog>=24.1",
        "uvicorn>=0.29",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "pytest-httpx>=0.30",
        ],
    },
    description="wiki-intel - Wikipedia & Wikidata knowledge entrypoints for agents",
    author="wiki-intel Team",
)
