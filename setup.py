from setuptools import find_packages, setup

setup(
    name="tablestore",
    version="0.1.0",
    description="Async table-style access to Redis hashes and composite keys",
    packages=find_packages(include=["tablestore", "tablestore.*"]),
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        "redis>=5.0.1",
        # ops API
        "fastapi>=0.100",
        "pydantic>=2.0",
        "PyJWT>=2.8",
        "prometheus-client>=0.17",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
            "fakeredis>=2.20",
            "httpx>=0.24",
        ],
    },
    entry_points={
        "console_scripts": ["tablestore=tablestore.cli:main"],
    },
)
