from setuptools import setup, find_packages

setup(
    name="barter",
    version="0.1.0",
    description="Skill swap requests, conversations and ratings API",
    packages=find_packages(include=["barter", "barter.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy>=2.0",
        "psycopg2-binary",
        "python-jose[cryptography]",
        "pydantic[email]>=2",
        "pydantic-settings",
        "python-dotenv",
        "alembic",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
)
