"""
Setup script for prep-engine.

prep-engine is the rules core of an adaptive exam-preparation assistant:

1. Adaptive levels - per-topic mastery that moves one level at a time
2. Revision scheduling - forgetting-curve review dates and urgency
3. Study planning - burnout-aware weekly plans weighted by exam proximity

The 'prep' command is the terminal entry point.
"""

from setuptools import find_packages, setup

setup(
    name="prep-engine",
    version="0.1.0",
    description="Adaptive exam-prep engine - mastery levels, spaced revision and weekly plans",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["prep_engine", "prep_engine.*"]),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy[asyncio]>=2.0.0",
        "aiosqlite>=0.19.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
        "postgres": [
            "asyncpg>=0.29.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "prep=prep_engine.cli.main:run",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Console",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
    ],
    keywords="exam-prep spaced-repetition mastery study-planner cli",
)
