from setuptools import setup, find_packages

setup(
    name='fcmprovision',
    version='0.1.0',
    description='Pre-build hook that provisions push-notification configuration files into native mobile projects',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    python_requires='>=3.10',
    install_requires=[
        'aiohttp',
        'aiofiles',
        'pbxproj',
        'platformdirs',
        'PyYAML',
        'rich',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-asyncio',
            'pytest-mock',
        ],
    },
    entry_points={
        'console_scripts': [
            'fcmprovision=fcmprovision.cli:main',
        ],
    },
)
