from setuptools import find_namespace_packages, setup

setup(
    name='cloudrun-logmetrics',
    version='0.1',
    py_modules=['logmetrics'],
    packages=find_namespace_packages(include=['modules', 'modules.*']),
    python_requires='>=3.8',
    install_requires=[
        'Click',
        'python-hcl2',
        'PyYAML',
        'tqdm',
        'google-cloud-logging',
        'google-cloud-monitoring',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points='''
        [console_scripts]
        logmetrics=logmetrics:cli
    ''',
)
