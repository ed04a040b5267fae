from setuptools import setup, find_packages

package_name = 'five_seconds'

setup(
    name=package_name,
    version='1.0.0',
    packages=find_packages(exclude=['test']),
    package_data={
        package_name: ['data/*.yaml', 'data/*.json'],
    },
    include_package_data=True,
    python_requires='>=3.9',
    install_requires=['setuptools', 'pydantic>=2', 'pyyaml', 'flask>=2', 'psycopg2-binary'],
    extras_require={
        'test': ['pytest'],
    },
    zip_safe=True,
    maintainer='Five Seconds',
    maintainer_email='five-seconds@example.com',
    description='Turn-based party board game core: board, question pools, turn state machine',
    license='MIT',
    tests_require=['pytest'],
    entry_points={
        'console_scripts': [
            'five_seconds_server = five_seconds.server:main',
        ],
    },
)
