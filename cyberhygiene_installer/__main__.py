# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/__main__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Entry point for python -m cyberhygiene_installer

import sys

from .cli import main

if __name__ == '__main__':
    sys.exit(main())
