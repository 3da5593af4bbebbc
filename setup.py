#!/usr/bin/env python
import os
import sys

from setuptools import setup, find_packages
from setuptools.command.install import install

VERSION = '0.1.0'

class VerifyVersionCommand(install):
    """Custom command to verify that the git tag matches our version"""
    description = 'verify that the git tag matches our version'

    def run(self):
        tag = os.getenv('CIRCLE_TAG', '')
        tag = tag.lstrip('v')

        if tag != VERSION:
            info = f"Git tag: {tag} does not match the version of geoloc: {VERSION}"
            sys.exit(info)

setup(
    name='geoloc',
    version=VERSION,
    description='Geolocation location and profile handling for SIP calls ( RFC 4119 / RFC 5491 / RFC 6442 ).',
    python_requires='>=3.8',
    packages=find_packages(exclude=['*.tests', '*.tests.*']) + ['geoloc.tests'],
    package_data={
        'geoloc.tests': ['files/*'],
    },
    include_package_data=True,
    install_requires=[
        'fastjsonschema>=2.18.0,<2.22.0',
        'msgspec>=0.18.5,<0.20.0',
        'pyyaml>=5.4,<7.0',
        'regex>=2022.9.11',
    ],
    extras_require={
        'test': [
            'pytest>=7.2.0,<9.0.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'geoloc=geoloc.tools.geoloc:_main',
        ],
    },
    cmdclass={
        'verify': VerifyVersionCommand,
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: POSIX :: Linux',
        'Topic :: Communications :: Telephony',
    ],
)
