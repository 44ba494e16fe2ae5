from setuptools import setup, find_packages

setup(
    name="zkforeign_package",
    version="0.1.0",
    description="Foreign-field elliptic curve gadgets and ECDSA verification circuits",
    url="https://github.com/yourusername/zkforeign_package",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=["py_ecc>=7.0.0"],
    extras_require={"test": ["pytest"]},
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.11",
)
