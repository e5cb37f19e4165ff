from setuptools import find_packages, setup

with open("README.md", encoding="utf-8") as fh:
    long_description = fh.read()

requirements = [
    "requests>=2.32.4",
    "PyYAML>=6.0.3",
    "rich>=13.0.0",
    "semantic_version>=2.10.0",
    "tomlkit>=0.12.0",
]

setup(
    name="dotfiles-installer",
    version="0.1.0",
    description="Bootstrap a Linux or macOS machine and apply personal dotfiles with chezmoi",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"dotfiles_installer": ["data/*.yaml"]},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "Topic :: System :: Installation/Setup",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0.0"],
    },
    entry_points={
        "console_scripts": [
            "dotfiles-installer=dotfiles_installer.cli:main",
        ],
    },
    include_package_data=True,
)
