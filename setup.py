from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="ldap-entry-client",
    version="0.1.0",
    author="LSA Technology Services",
    author_email="lsats@umich.edu",
    description="Work with LDAP directory entries as mutable, diffable objects on top of ldap3",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["ldap_entry", "ldap_entry.*"]),
    include_package_data=True,
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Development Status :: 3 - Alpha",
        "Intended Audience :: System Administrators",
        "Topic :: System :: Systems Administration :: Authentication/Directory :: LDAP",
    ],
    python_requires=">=3.8",
    install_requires=[
        "ldap3>=2.9",
        "keyring>=23.0.0",
        "python-dotenv>=0.15.0",
    ],
    extras_require={
        "dataframe": [
            "pandas>=1.0.0",
        ],
        "test": [
            "pytest>=7.0.0",
            "pandas>=1.0.0",
        ],
        "all": [
            "pandas>=1.3.0",
            "pytest>=7.0.0",
        ],
    },
)
