from setuptools import setup, find_packages

setup(
    name='crosswalk-android',
    version='0.1.0',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    install_requires=[
        'requests',
        'urllib3',
        'packaging',
        'platformdirs',
        'PyYAML',
        'rich',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-mock',
        ],
    },
    python_requires='>=3.10',
    entry_points={
        'console_scripts': [
            'crosswalk-android=crosswalk_android.cli:main',
        ],
    },
    # Include other metadata as needed
)
