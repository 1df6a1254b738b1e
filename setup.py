from setuptools import setup, find_packages
from pathlib import Path
import sys

# Check Python version requirement
if sys.version_info < (3, 9):
    raise RuntimeError("FtpMeta requires Python 3.9 or newer")

setup(
    name="FtpMeta",
    version="1.0.0",
    author="Andrew Hernandez",
    author_email="andromedeyz@hotmail.com",
    description="Async FTP metadata client: symbolic link dereferencing, file sizes and modification times over one control connection.",
    long_description=(
        open("README.md", "r", encoding="utf-8").read()
        if Path("README.md").exists()
        else "FtpMeta answers the questions you ask an FTP server about its files: where does this link really point, how big is this file, when was it last changed. It copes with servers that refuse SIZE in ASCII mode, converts timestamps between time zones, and lets async and blocking code share one control connection safely."
    ),
    long_description_content_type="text/markdown",
    url="http://github.com/ApaxPhoenix/FtpMeta",
    project_urls={
        "Bug Tracker": "http://github.com/ApaxPhoenix/FtpMeta/issues",
        "Source Code": "http://github.com/ApaxPhoenix/FtpMeta",
    },
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: File Transfer Protocol (FTP)",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: System :: Networking",
    ],
    python_requires=">=3.9",
    install_requires=[
        "aioftp>=0.21.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    keywords="ftp, async, metadata, symlink, mdtm, mfmt, size",
    license="MIT",
    zip_safe=False,
    include_package_data=True,
)
