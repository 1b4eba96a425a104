# -*- coding: utf-8 -*-
import codecs
from setuptools import setup, find_packages


tests_require = [
    'pytest>=3.0',
]

setup(
    name='Potion-Client',
    version='0.1.0',
    packages=find_packages(exclude=['*tests*']),
    url='https://github.com/biosustain/potion',
    license='MIT',
    author='Lars Schöning',
    author_email='lars@lyschoening.de',
    description='An ORM for JSON APIs built on requests',
    long_description=codecs.open('README.rst', encoding='utf-8').read(),
    tests_require=tests_require,
    python_requires='>=3.6',
    install_requires=[
        'Flask>=1.0',
        'Werkzeug>=0.15',
        'jsonschema>=2.4.0',
        'aniso8601>=0.84',
        'blinker>=1.3',
        'requests>=2.20'
    ],
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Web Environment',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Internet :: WWW/HTTP',
        'Topic :: Software Development :: Libraries :: Python Modules'
    ],
    zip_safe=False,
    extras_require={
        'docs': ['sphinx'],
        'tests': tests_require,
    }
)
