import setuptools

long_description = """#votemap

Browse recorded parliamentary votes and how each member voted."""

with open("requirements.txt", "r") as req_file:
    requirements = req_file.readlines()
setuptools.setup(
    name="votemap",
    version="0.0.1",
    description="Browse recorded parliamentary votes",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(include=["votemap", "votemap.*"]),
    classifiers=[],
    python_requires='>=3.10',
    install_requires=requirements,
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'votemap=votemap.cli:main',
        ],
    }
)
