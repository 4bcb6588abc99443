"""Setup script for travel_tracker package."""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")

setup(
    name="travel-tracker",
    version="1.0.0",
    author="stbrie",
    description="Builds a travel history of places and map clusters from GPS-tagged photos",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["travel_tracker", "travel_tracker.*"]),
    python_requires=">=3.11",
    install_requires=[
        "geopy>=2.0.0",
        "Pillow>=9.4.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "travel-tracker=travel_tracker.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Graphics",
        "Topic :: Scientific/Engineering :: GIS",
    ],
    keywords="gps exif photo travel geocoding clustering map",
)
