# coding: utf-8
from setuptools import find_packages, setup


with open('README.md', encoding='utf8') as file:
    long_description = file.read()

setup(
    name='rest-valve',
    version='1.0',
    package_dir={'': 'src'},
    packages=find_packages('src'),
    python_requires='>=3.10',
    license='MIT',
    description='Pluggable HTTP request/response contract with status-code errors',
    long_description=long_description,
    long_description_content_type='text/markdown',
    install_requires=[
        'httpx',
        'requests',
        'urllib3>=2',
    ],
    extras_require={
        'test': ['pytest'],
    },
)
