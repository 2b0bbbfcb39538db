from setuptools import setup, find_packages

setup(
    name="peermentor",
    version="0.1",
    packages=find_packages(include=["peermentor", "peermentor.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy>=2.0",
        "psycopg2-binary",
        "python-jose[cryptography]",
        "passlib[bcrypt]",
        # passlib 1.7.4 cannot load bcrypt>=4.1 backends
        "bcrypt==4.0.1",
        "pydantic[email]>=2.0",
        "pydantic-settings",
        "python-dotenv",
        "alembic",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
