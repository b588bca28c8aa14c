import os
import sys
sys.path.insert(0, os.path.abspath('../..'))


project = 'vCard Export'
copyright = '2025, vCard Export contributors'
author = 'vCard Export contributors'

extensions = ['sphinx.ext.autodoc', 'sphinx.ext.napoleon']

templates_path = ['_templates']
exclude_patterns = []


html_theme = 'alabaster'
html_static_path = ['_static']
