from pathlib import Path

from setuptools import find_packages, setup

ROOT = Path(__file__).parent

README = (ROOT / "README.md").read_text(encoding="utf-8") if (ROOT / "README.md").exists() else ""

setup(
    name="ethtool-exporter",
    version="0.1.0",
    description="Prometheus exporter for per-interface NIC statistics (ethtool -S)",
    long_description=README,
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        "prometheus_client>=0.14",
        "psutil",
        "PyYAML",
        "jsonschema",
    ],
    extras_require={
        "test": [
            "pytest",
            "requests",
        ],
    },
    entry_points={
        "console_scripts": [
            "ethtool-exporter=ethtool_exporter.main:run",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Environment :: No Input/Output (Daemon)",
        "Operating System :: POSIX :: Linux",
        "Topic :: System :: Monitoring",
        "Topic :: System :: Networking :: Monitoring",
    ],
)
