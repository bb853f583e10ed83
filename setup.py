"""
Setup script for radvizmath package.
"""

from setuptools import setup, find_packages

setup(
    name="radvizmath",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        # Core numerical dependencies
        "numpy>=1.20.0",
        "pandas>=1.3.0",
        "scipy>=1.7.0",

        # Utilities
        "pyyaml>=6.0.0",
    ],
    extras_require={
        # Testing
        "test": [
            "pytest>=6.0.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'radvizmath=radvizmath.__main__:main',
        ],
    },
    description="Anchor placement and projection for RadViz charts",
    keywords="radviz, visualization, dimensional anchors, clustering",
    python_requires=">=3.8",
)
