from setuptools import find_packages, setup

setup(
    name="wavtempo",
    version="1.0.0",
    description="Pitch-preserving tempo adjustment for mono PCM WAV files.",
    packages=find_packages(include=["wavtempo", "wavtempo.*"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "scipy",
        "soundfile",
        "click",
        "rich",
        "pydantic>=2",
        "toml",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-mock",
        ],
    },
    entry_points={
        "console_scripts": [
            "wavtempo=wavtempo.cli.main:cli",
        ],
    },
)
