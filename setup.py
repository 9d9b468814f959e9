from setuptools import setup,find_packages

with open('./README.md','r') as f:
    long_description = f.read()

setup(
    name='isostitch',
    version='0.1.0',
    description='isostitch',
    long_description=long_description,
    long_description_content_type = 'text/markdown',
    classifiers=['Programming Language :: Python :: 3',
                'Operating System :: OS Independent'],
    keywords='isolines contour marching squares demography',
    packages=find_packages(exclude=['tests']),
    package_dir={'isostitch':'isostitch'},
    python_requires='>=3.8',
    install_requires = ['numpy', 'scipy', 'contourpy', 'pydantic>=2'],
    extras_require = {'test': ['pytest']},
    setup_requires = ['setuptools >= 38.3.0'],
    entry_points = {
        'console_scripts': ['isostitch=isostitch.cli:parse'],
    },
)
