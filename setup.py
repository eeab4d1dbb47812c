"""Setup script for doc_search package"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

# Read requirements
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
if requirements_file.exists():
    requirements = [
        line.strip()
        for line in requirements_file.read_text().splitlines()
        if line.strip() and not line.startswith("#")
    ]

setup(
    name="doc-search",
    version="1.0.0",
    description="Two-tier documentation index with section-level retrieval",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "anthropic": [
            "anthropic>=0.39.0",
        ],
        "dev": [
            "pytest>=8.3.0",
            "pytest-cov>=6.0.0",
            "black>=24.12.0",
            "ruff>=0.9.2",
            "mypy>=1.15.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "doc-search=doc_search.cli.main:cli",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Text Processing :: Markup :: Markdown",
    ],
)
