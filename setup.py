from setuptools import setup, find_packages

setup(
    name='credativ-sp-converter',
    version='0.3.0',
    url='https://github.com/credativ/credativ-sp-converter.git',
    author='Josef Machytka',
    author_email='josef.machytka@credativ.de',
    description='Converter of SQL Server stored procedures and functions into PostgreSQL PL/pgSQL',
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=['pyyaml', 'pandas', 'sqlglot'],
    extras_require={'test': ['pytest']},
    entry_points={'console_scripts': ['credativ-sp-converter = credativ_sp_converter:main']},
)
