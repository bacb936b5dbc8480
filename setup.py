"""Setup script for the InfoPoint display rotation engine."""

from pathlib import Path

from setuptools import find_packages, setup

# Read the README file
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

# Read requirements, separating test tooling into the dev extra
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
dev_requirements = []

if requirements_file.exists():
    content = requirements_file.read_text().strip()
    lines = content.split("\n")

    for line in lines:
        line = line.strip()
        # Skip empty lines and comments
        if not line or line.startswith("#"):
            continue

        if "pytest" in line:
            dev_requirements.append(line)
        else:
            requirements.append(line)

setup(
    name="infopoint",
    version="1.0.0",
    description="Full-screen browser rotation engine for unattended information displays",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="InfoPoint Team",
    url="https://github.com/KeithCarl/InfoPoint",
    # Package configuration
    packages=find_packages(include=["infopoint", "infopoint.*"]),
    include_package_data=True,
    # Dependencies
    install_requires=requirements,
    extras_require={
        "test": dev_requirements,
        "dev": dev_requirements
        + [
            "black>=23.0.0",
            "isort>=5.12.0",
            "mypy>=1.0.0",
        ],
    },
    python_requires=">=3.10",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Environment :: X11 Applications",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Graphics :: Presentation",
        "Topic :: System :: Hardware",
        "Framework :: AsyncIO",
    ],
    keywords="kiosk digital-signage raspberry-pi chromium display rotation async",
    entry_points={
        "console_scripts": [
            "infopoint=infopoint.__main__:main",
        ],
    },
    zip_safe=False,
    platforms=["linux"],
)
