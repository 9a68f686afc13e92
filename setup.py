"""Install the identity package."""

from setuptools import setup, find_packages

setup(
    name='identity-core',
    version='0.1.0',
    packages=find_packages(include=['identity', 'identity.*'],
                           exclude=['*tests*']),
    py_modules=['wsgi'],
    package_data={'identity': ['config.py'],
                  'identity.services': ['templates/*.tmpl']},
    python_requires='>=3.8',
    install_requires=[
        "bcrypt",
        "fakeredis",
        "flask",
        "jinja2",
        "pyjwt>=2",
        "pyseto",
        "python-dateutil",
        "python-json-logger>=2.0.2",
        "pytz",
        "redis",
        "sqlalchemy>=1.4",
        "wtforms",
    ],
    extras_require={
        'test': [
            "hypothesis",
            "pytest",
        ]
    },
    zip_safe=False
)
