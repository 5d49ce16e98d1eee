"""
Setup script for mindvault-planner.

MindVault Planner turns a syllabus (chapters), exam dates, calendar
blockers and a learner's friction profile into a day-by-day study plan:

1. Adaptive scheduling - deadline-aware priorities with interleaving
2. Friction feedback - task outcomes tune future plans
3. Delivery - JSON and iCalendar export, optional AI commentary

The 'mindvault' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="mindvault-planner",
    version="1.0.0",
    description="Adaptive study scheduler with friction feedback and interleaving",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="MindVault",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # HTTP
        "httpx>=0.25.0",
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
    },
    entry_points={
        "console_scripts": [
            "mindvault=mindvault.cli.planner_cli:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
    ],
    keywords="study planner scheduler spaced-repetition cli education",
)
