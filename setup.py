import setuptools

try:
    with open("README.md", "r", encoding="utf-8") as fh:
        long_description = fh.read()
except FileNotFoundError:
    long_description = "Generate Dockerfiles and build and push Docker images"

setuptools.setup(
    name="docker-artifacts",
    version="0.1.0",
    description="Generate Dockerfiles and build and push Docker images",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=setuptools.find_packages(where="src", include=["docker_artifacts", "docker_artifacts.*"]),
    install_requires=[
        "docker>=7.0",
        "pydantic>=2.11",
        "python-dotenv",
        "requests",
        "rich",
        "typer",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "docker-artifacts=docker_artifacts.cli.main:app",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
)
