"""
Setup file.
"""

import os

from setuptools import find_packages, setup

URL = "https://github.com/zackees/cscbuild"
KEYWORDS = "csharp csc compiler build assembly reference dotnet mono"
HERE = os.path.dirname(os.path.abspath(__file__))

with open(os.path.join(HERE, "src", "cscbuild", "__init__.py"), encoding="utf-8") as f:
    VERSION = next(
        line.split("=")[1].strip().strip('"')
        for line in f
        if line.startswith("__version__")
    )


if __name__ == "__main__":
    setup(
        name="cscbuild",
        version=VERSION,
        description="Build C# library projects with an external csc compiler",
        maintainer="Zachary Vorhies",
        keywords=KEYWORDS,
        url=URL,
        python_requires=">=3.10",
        package_dir={"": "src"},
        packages=find_packages("src"),
        install_requires=["psutil"],
        extras_require={"test": ["pytest"]},
        entry_points={"console_scripts": ["cscbuild=cscbuild.cli:main"]},
        include_package_data=True)
