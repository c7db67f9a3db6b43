from setuptools import setup, find_packages

setup(
    name="ibmsim",
    version="0.1.0",
    description="Discrete-time individual-based model simulation kernel",
    author="ibmsim Team",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    package_data={"configs": ["*.yaml"]},
    include_package_data=True,
    install_requires=[
        "numpy>=1.24.0",
        "pandas>=2.0.0",
        "pyyaml>=6.0",
        "tqdm>=4.65.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "ibmsim=ibmsim.main:main",
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
    ],
)
