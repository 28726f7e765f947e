from setuptools import setup, find_packages


install_requires = [
    'PyYAML>=3.0',
    'jsonschema>=4',
]

tests_require = [
    'pytest',
    'Pillow>=10',
]


def long_description():
    return open('README.md').read()


setup(
    name='MBTileStore',
    version="1.0.0",
    description='Deduplicating MBTiles tile store',
    long_description=long_description(),
    long_description_content_type='text/markdown',
    license='Apache Software License 2.0',
    packages=find_packages(include=['mbtilestore', 'mbtilestore.*']),
    include_package_data=True,
    package_data={'': ['*.sql', '*.json']},
    install_requires=install_requires,
    extras_require={
        'test': tests_require,
    },
    python_requires='>=3.9',
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Database",
        "Topic :: Scientific/Engineering :: GIS",
    ],
    zip_safe=False
)
