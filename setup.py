from setuptools import setup, find_packages

setup(
    name="pipescript",
    version="0.1.0",
    packages=find_packages(include=["pipescript", "pipescript.*"]),
    py_modules=["pscript"],
    install_requires=[
        "pydantic>=2.0",
        "loguru>=0.7",
        "opentelemetry-api",
        "opentelemetry-sdk",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": [
            "pscript=pscript:main",
        ],
    },
    python_requires=">=3.9",
)
