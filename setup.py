from setuptools import setup, find_packages

setup(
    name="chain-indexer-infra",
    version="0.1.0",
    packages=find_packages(include=["chain_indexer", "chain_indexer.*"]),
    package_data={"chain_indexer": ["templates/*.sh", "templates/*.yaml"]},
    py_modules=["run"],
    install_requires=[
        "boto3>=1.26.0",
        "python-dotenv>=1.0.0",
        "PyYAML>=6.0",
        "tabulate>=0.9.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    python_requires=">=3.8",
)
