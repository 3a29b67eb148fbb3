"""
Setup script for the podcast-crawler package.
"""

from setuptools import setup, find_packages

setup(
    name='podcast-crawler',
    version='1.0.0',
    description='A podcast RSS/Atom feed crawler for podcast search',
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'pandas',
        'feedparser',
        'requests',
        'tqdm',  # For progress bars
        'defusedxml',  # For reading untrusted feed XML
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    python_requires='>=3.8',
    entry_points={
        'console_scripts': [
            'podcast-crawler=podcast_crawler.cli:main',
        ],
    },
)
