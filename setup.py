"""Install the theme submission core package.

This includes the submission core, the moderation API, and the client-side
workflows.
"""

from setuptools import setup, find_packages

setup(
    name='theme-submission-core',
    version='0.3.0',
    package_dir={'': 'core'},
    packages=find_packages(where='core'),
    zip_safe=False,
    python_requires='>=3.7',
    install_requires=[
        'flask',
        'bleach',
        'python-dateutil',
        'sqlalchemy',
        'flask-sqlalchemy',
        'celery',
        'redis',
        'requests',
        'urllib3',
        'retry',
        'pytz',
        'pyjwt',
        'jsonschema',
        'Pillow'
    ],
    extras_require={
        'test': ['pytest']
    },
    include_package_data=True
)
