# Sphinx configuration for github-jenkins-bridge

import os
import sys

sys.path.insert(0, os.path.abspath('../src'))

from github_jenkins_bridge import __version__  # noqa: E402

project = 'GitHub Jenkins Bridge'
author = 'github-jenkins-bridge contributors'
copyright = '2026, ' + author
release = __version__
version = '.'.join(release.split('.')[:2])

extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.napoleon',
    'sphinx.ext.viewcode',
    'sphinx.ext.intersphinx',
    'sphinx_autodoc_typehints',
]

master_doc = 'index'
exclude_patterns = ['_build']

html_theme = 'sphinx_rtd_theme'
html_title = f'{project} {release}'

# The bridge modules use Google style sections (Raises:, Returns:, Notes:).
napoleon_google_docstring = True
napoleon_numpy_docstring = False

autodoc_member_order = 'bysource'
autodoc_default_options = {
    'members': True,
    'show-inheritance': True,
}
always_document_param_types = True

intersphinx_mapping = {
    'python': ('https://docs.python.org/3', None),
    'requests': ('https://requests.readthedocs.io/en/latest/', None),
}
