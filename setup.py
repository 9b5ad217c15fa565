# setup.py
from setuptools import find_packages, setup

setup(
    name="whop-scam-reports",
    version="0.1.0",
    packages=find_packages(include=["scam_reports", "scam_reports.*"]),
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn[standard]>=0.27",
        "python-multipart>=0.0.9",
        "pydantic>=2.6",
        "pydantic-settings>=2.2",
        "sqlalchemy[asyncio]>=2.0",
        "asyncpg>=0.29",
        "alembic>=1.13",
        "psycopg[binary]>=3.1",
        "httpx>=0.27",
        "PyJWT[crypto]>=2.8",
        "structlog>=24.1",
        "sentry-sdk>=1.40",
        "limits>=3.7",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "aiosqlite>=0.20",
            "python-dotenv>=1.0",
        ],
    },
)
