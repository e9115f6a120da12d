"""
Packaging for devicelink. Install for development with `pip install -e .[test]`
and run the tests with `pytest src`. Tests against real devices are in `integrate`.
"""

from setuptools import setup

setup(
    name='devicelink-py',
    version='0.1.0',
    description='Line-oriented communication with serial and TCP/IP devices.',
    url='',
    author='',
    author_email='',
    license='LGPL',
    package_dir={'': 'src'},
    packages=['devicelink', 'devicelink.conduit', 'devicelink.config', 'devicelink.manager',
              'devicelink.support'],
    package_data={'devicelink.config': ['*.cfg']},
    python_requires='>=3.6',
    install_requires=[
        'pyserial>=3.0',
        'configobj>=5.0',
    ],
    extras_require={
        'test': ['pytest', 'PyHamcrest', 'timeout-decorator'],
    },
    zip_safe=False,
)
