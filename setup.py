from setuptools import setup, find_packages

setup(
    name="locator_assertions",
    version="0.1",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "playwright",
        "pydantic>=2",
        "python-dotenv"
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "pytest-mock"
        ]
    },
)
