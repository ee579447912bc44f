from pathlib import Path

from setuptools import find_packages, setup


with Path("requirements.txt").open() as requirements_file:
    install_requires = [line.strip() for line in requirements_file if line.strip() and not line.startswith("#")]

setup(
    name="line_kpi",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    install_requires=install_requires,
    extras_require={"test": ["pytest>=7.4", "httpx>=0.25", "httplib2>=0.19"]},
    entry_points={
        "console_scripts": [
            "line-kpi=line_kpi.main:main",
            "line-kpi-encode-key=line_kpi.encode_key:main",
        ],
    },
    python_requires=">=3.11",
)
