import setuptools

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    install_requires = [line.strip() for line in fh if line.strip()]

setuptools.setup(
    name="aiomacbattery",
    description="Battery health telemetry for a fleet of Macs managed with Intune",
    license="Apache License 2.0",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=setuptools.find_packages(where="src"),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.11",
    install_requires=install_requires,
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "aioresponses",
            "syrupy",
            "time-machine",
        ],
    },
    version="2026.10.0",
    entry_points={
        "console_scripts": ["macbattery=aiomacbattery.cli:main"],
    },
)
