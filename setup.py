from setuptools import find_packages, setup


extras_require = {}

extras_require["test"] = [
    'pytest>=7.4',
]

extras_require["all"] = [
    *extras_require["test"],
]


setup(
    name='warden',
    version='0.1.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    license='MIT',
    description='Two-factor enrollment, verification and device session trust',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    install_requires=[
        'boto3>=1.28.55',
        'Jinja2>=3.1,<4.0',
        'mailjet_rest>=1.4.0,<2.0',
        'pydantic>=1.10.17,<3.0',
        'pyotp>=2.9.0,<3.0',
        'python-dateutil>=2.8.2,<3.0',
        'python-dotenv>=1.0.0,<2.0',
        'twilio>=8.10.0,<10.0',
    ],
    extras_require=extras_require,
    python_requires=">=3.10"
)
