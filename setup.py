from setuptools import setup, find_packages

setup(
    name="learnplatform",
    version="0.1",
    packages=find_packages(include=["learnplatform", "learnplatform.*"]),
    py_modules=["main", "init_db"],
    install_requires=[
        # Web Framework
        "fastapi>=0.109.2",
        "uvicorn[standard]>=0.27.1",
        "python-multipart>=0.0.7",
        "python-jose[cryptography]>=3.3.0",
        "passlib>=1.7.4",
        "email-validator>=2.1.0",

        # Database
        "sqlalchemy>=2.0.27",

        # Utilities
        "python-dotenv>=1.0.0",
        "requests>=2.31.0",
        "aiofiles>=23.2.1",
    ],
    extras_require={
        "test": [
            "pytest>=8.0.0",
            "httpx>=0.26.0",
        ],
    },
)
