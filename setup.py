from setuptools import setup, find_packages


setup(
    name="madtool",
    version="0.1",
    packages=find_packages(),
    description="List, extract and create the MAD archives used by the Hogs of War games.",
    author="madtool contributors",
    python_requires=">=3.8",
    install_requires=[],
    entry_points={
        "console_scripts": [
            "madtool=madtool.cli:main",
        ]
    },
)
