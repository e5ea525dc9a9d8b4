from setuptools import setup, find_packages

setup(
    name="liveaudio",
    version="0.1.0",
    description="Live microphone capture streamed as fixed-size pcm_f32le chunks",
    author="",
    python_requires=">=3.8",
    packages=find_packages(include=["liveaudio", "liveaudio.*"]),
    install_requires=[
        "pyaudio>=0.2.11",
        "numpy>=1.21.0",
        "scipy>=1.7.0",
        "rich>=12.5.0",
        "pyyaml>=6.0.0",
        "pypubsub>=4.0.3",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "liveaudio=liveaudio.main:main",
        ],
    },
)
