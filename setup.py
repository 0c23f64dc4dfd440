"""setuptools setup module for fediparse.

Docs:
https://packaging.python.org/en/latest/distributing.html
https://setuptools.readthedocs.io/
https://www.python.org/dev/peps/pep-0440/#version-specifiers

Based on https://github.com/pypa/sampleproject/blob/master/setup.py
"""
from setuptools import setup, find_packages


setup(name='fediparse',
      version='0.1',
      description='Parses incoming ActivityPub posts into validated fields',
      long_description=open('README.md').read(),
      long_description_content_type='text/markdown',
      packages=find_packages(),
      include_package_data=True,
      package_data={'fediparse.tests': ['testdata/*.json']},
      license='Public domain',
      python_requires='>=3.8',
      classifiers=[
          'Development Status :: 3 - Alpha',
          'Intended Audience :: Developers',
          'License :: Public Domain',
          'Programming Language :: Python :: 3',
          'Programming Language :: Python :: 3.8',
          'Programming Language :: Python :: 3.9',
          'Topic :: Software Development :: Libraries :: Python Modules',
      ],
      keywords='activitypub activitystreams json-ld fediverse mastodon gotosocial',
      install_requires=[
          'html2text>=2019.8.11',
          'oauth-dropins>=6.4,<8',
          'python-dateutil>=2.8',
      ],
      extras_require={
          # oauth_dropins.webutil.testutil.TestCase is a mox.MoxTestBase
          'tests': ['mox3>=0.28'],
      },
)
