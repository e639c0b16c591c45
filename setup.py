from setuptools import setup, find_packages


setup(
    name="fseq",
    version="0.1",
    packages=find_packages(include=["fseq", "fseq.*"]),
    description="Codec and inspection tool for uncompressed FSEQv2 lighting sequence files.",
    python_requires=">=3.8",
    install_requires=[],
    entry_points={
        "console_scripts": [
            "fseq=fseq.cli:main",
        ]
    },
)
