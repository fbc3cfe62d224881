from setuptools import setup, find_packages

setup(
    name="dial9-call-history",
    version="0.1.0",
    description="Search, download, play and delete Dial9 call recordings",
    author="",
    python_requires=">=3.9",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "aiohttp>=3.8.0",
        "pydantic>=2.0.0",
        "pyyaml>=6.0.0",
        "pypubsub>=4.0.3",
        "pyaudio>=0.2.11",
        "rich>=12.5.0",
        "keyring>=24.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "numpy>=1.21.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "dial9=dial9.main:main",
        ],
    },
)
