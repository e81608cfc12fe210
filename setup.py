"""Setup script for the Flockwave OSC library."""

from setuptools import setup, find_namespace_packages


requires = [
    "blinker>=1.4",
    "click>=6.2",
    "colorlog>=2.6.0",
    "python-dotenv>=0.10.3",
    "trio>=0.17.0",
]

__version__ = None
exec(open("src/flockwave/osc/version.py").read())

setup(
    name="flockwave-osc",
    version=__version__,
    packages=find_namespace_packages("src", include=["flockwave.*"]),
    package_dir={"": "src"},
    include_package_data=True,
    python_requires=">=3.7",
    install_requires=requires,
    extras_require={"test": ["pytest>=6.0", "pytest-trio>=0.7.0"]},
    setup_requires=[],
    entry_points={"console_scripts": ["flockwave-osc = flockwave.osc.launcher:start"]},
)
