#!/usr/bin/env python3
"""
Setup script for the DinTask backend

Install with:
    pip install -e .

Or with the test stack:
    pip install -e ".[dev]"
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_path = Path(__file__).parent / "README.md"
long_description = ""
if readme_path.exists():
    long_description = readme_path.read_text(encoding="utf-8")

requirements = [
    # Web
    "fastapi>=0.110.0",
    "uvicorn[standard]>=0.27.0",
    "python-multipart>=0.0.9",
    # Database
    "sqlalchemy[asyncio]>=2.0.25",
    "asyncpg>=0.29.0",
    "aiosqlite>=0.19.0",
    # Settings and validation
    "pydantic>=2.6.0",
    "pydantic-settings>=2.1.0",
    "email-validator>=2.1.0",
    # Auth
    "python-jose[cryptography]>=3.3.0",
    "bcrypt>=4.1.2",
    "slowapi>=0.1.9",
    # Background jobs
    "celery>=5.3.6",
    "redis>=5.0.1",
    # Integrations
    "razorpay>=1.4.1",
    "reportlab>=4.0.9",
    "aiosmtplib>=3.0.1",
    "sendgrid>=6.11.0",
    "boto3>=1.34.0",
    "minio>=7.2.3",
    "firebase-admin>=6.4.0",
]

setup(
    name="dintask",
    version="1.0.0",
    description="DinTask - multi-tenant CRM, HR and task management backend",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="DinTask Team",
    license="MIT",
    package_dir={"": "backend"},
    packages=find_packages("backend", exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0",
            "httpx>=0.26.0",
            "faker>=22.0.0",
            "black>=24.1.0",
            "isort>=5.13.0",
            "mypy>=1.8.0",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Framework :: FastAPI",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="crm hrms task-management multi-tenant fastapi",
)
