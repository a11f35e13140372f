"""
Setup script for the ranked-turbo package.

Installs the settlement pipeline (src/ranked_turbo) and the
``ranked-turbo`` operator command.
"""

from setuptools import setup, find_packages

setup(
    name="ranked-turbo",
    version="1.0.0",
    description="Ranked match rating settlement for custom game hosts",
    author="Ranked Turbo Maintainers",
    license="Proprietary",
    python_requires=">=3.10",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "httpx>=0.25.0",
        "python-dotenv>=1.0.0",
        "pydantic>=2.5.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
        "dev": [
            "pytest>=7.0",
            "build",
            "wheel",
        ],
    },
    entry_points={
        "console_scripts": [
            "ranked-turbo=ranked_turbo.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
