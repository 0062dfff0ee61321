"""
SQL Relationship Generator - Setup Configuration
"""
from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [
        line.strip()
        for line in fh.readlines()
        if line.strip() and not line.startswith("#")
    ]

# Optional database drivers (SQLite uses the standard library driver)
mysql_requirements = ["mysql-connector-python>=8.0.0"]
postgresql_requirements = ["psycopg2-binary>=2.9.0"]

# Development requirements
dev_requirements = [
    "pytest>=7.0.0",
    "pytest-cov>=4.0.0",
    "black>=23.0.0",
    "isort>=5.12.0",
    "flake8>=6.0.0",
    "mypy>=1.0.0",
]

setup(
    name="sql-relgen",
    version="1.0.0",
    author="SQL Relgen Contributors",
    author_email="",
    description="Schema introspection and relationship descriptor generation for code generators",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Database",
        "Topic :: Software Development :: Code Generators",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "mysql": mysql_requirements,
        "postgresql": postgresql_requirements,
        "all-databases": mysql_requirements + postgresql_requirements,
        "dev": dev_requirements,
        "all": mysql_requirements + postgresql_requirements + dev_requirements,
    },
    include_package_data=True,
    keywords=[
        "sql",
        "schema",
        "introspection",
        "orm",
        "code-generation",
        "database",
    ],
)
