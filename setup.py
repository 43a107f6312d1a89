from os import path
from setuptools import find_packages, setup


here = path.abspath(path.dirname(__file__))


with open(path.join(here, 'README.md'), 'r', encoding='utf-8') as readme:
    # use the contents of the readme as the long_description for the module
    def strip_readme(file):
        line = file.readline()
        # drop content before the first header
        while not line.startswith('strata'):
            line = file.readline()
        # drop section on installing
        while not line.startswith('installing'):
            yield line
            line = file.readline()

    readme = ''.join(strip_readme(readme))


with open(path.join(here, 'CHANGES.md'), 'r', encoding='utf-8') as changes:
    changes = changes.read()


dependencies = [
    'pyyaml',
    'tomlkit>=0.11',
    'tzdata',
]

test_dependencies = [
    'coverage',
    'pytest',
]


setup(
    name='strata',
    version='0.1',
    license='Apache Software License 2.0',
    description='Typed configuration from layered property sources, reporting where each value came from.',
    keywords='configuration properties environment command-line',
    long_description='\n\n'.join((readme, changes)),
    long_description_content_type='text/markdown',

    packages=find_packages(exclude=('tests', 'tests.*')),
    python_requires='>=3.11',
    install_requires=dependencies,
    extras_require={
        'test': test_dependencies,
    },

    classifiers=(
        'License :: OSI Approved :: Apache Software License',
        'Programming Language :: Python :: 3 :: Only',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Utilities',
    )
)
