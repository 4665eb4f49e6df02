"""A setuptools based setup module.

See:
https://packaging.python.org/en/latest/distributing.html
https://github.com/pypa/sampleproject
"""

from setuptools import setup

# To use a consistent encoding
from codecs import open
from os import path
import re

here = path.abspath(path.dirname(__file__))

# Get the long description from the relevant file

with open(path.join(here, 'README.md'), encoding='utf-8') as f:
	long_description = f.read()

VERSIONFILE="pmfutils/version.py"

with open(path.join(here,VERSIONFILE), "rt") as f:
	src=f.read()

result=re.search(r"^VERSION=[\"]([\.0-9a-zA-Z]*)[\"]",src,re.M)

if result:
	versionstr=result.group(1)
else:
	raise RuntimeError("Unable to find version string in %s." % (VERSIONFILE))

######
#setup
######

setup(
	name='pgpmimefilter',
	description='converts outgoing e-mails into OpenPGP/MIME signed and/or encrypted e-mails',
	version=versionstr,
	long_description=long_description,
	long_description_content_type="text/markdown",
	author='Horst Knorr',
	author_email='gpgmailencrypt@gmx.de',
	license='GPL v3',
	install_requires=[],
	python_requires=">=3.6",
	# See https://pypi.python.org/pypi?%3Aaction=list_classifiers

	classifiers=[
	'Development Status :: 4 - Beta',
	'Intended Audience :: Developers',
	'Intended Audience :: System Administrators',
	'Environment :: Console',
	'License :: OSI Approved :: GNU General Public License v3 (GPLv3)',
	'Programming Language :: Python :: 3',
	"Topic :: Communications :: Email",
	"Topic :: Security :: Cryptography",
	"Topic :: Software Development :: Libraries :: Python Modules",
	"Operating System :: OS Independent",
   ],

	keywords='Email encryption signing gpg pgp openpgp pgp/mime rfc3156',
	scripts =[		"scripts/pgpmimefilter.py"],

	packages=[		"pmfutils"],

	py_modules=[	"pgpmimefilter"],
)
