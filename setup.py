import setuptools

with open("README.rst", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="notesync",
    version="0.1.0",
    author="The notesync developers",
    description="Local snapshots, backups, and GitHub sync for projects of notes.",
    long_description=long_description,
    long_description_content_type="text/x-rst",
    packages=setuptools.find_packages('src'),
    package_dir={'': 'src'},
    entry_points={
        'console_scripts': [
            'notesync = notesync.cli:main'
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    install_requires=[
        'beautifulsoup4>=4.9.1',
        'httpx>=0.23',
        'Mako>=1.1.3',
        'pyyaml>=5.3.1',
        'shortuuid',
        'terminaltables',
    ],
    extras_require={
        'test': [
            'freezegun',
            'pytest-mock',
            'pyfakefs',
            'pytest',
        ],
    },
    python_requires='>=3.8',
)
