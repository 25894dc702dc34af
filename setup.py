from pathlib import Path
from setuptools import setup, find_packages

SHORT_DESCRIPTION = """Python package to split rating matrices for the evaluation of recommendation algorithms."""

this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

setup(
    name="recsplit",
    version="0.1.0",
    python_requires=">=3.8",
    packages=find_packages(include=["recsplit", "recsplit.*"]),
    install_requires=[
        "numpy>=1.21.2",
        "scipy>=1.6.0, ==1.*",
        "scikit-learn>=1.1.1, ==1.*",
        "pandas>=2.1.4, ==2.*",
        "PyYAML>=6.0.1, ==6.*",
        "tqdm>=4.46.0, ==4.*",
        "click>=8.0.0",
    ],
    extras_require={
        "test": ["pytest>=6.2.4", "pytest-cov>=2.12.1"],
    },
    entry_points={
        "console_scripts": ["recsplit=recsplit.cli:main"],
    },
    description=SHORT_DESCRIPTION,
    long_description=long_description,
    long_description_content_type="text/markdown",
)
