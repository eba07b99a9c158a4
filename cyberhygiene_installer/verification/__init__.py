# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/verification/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Final verification package initialization

"""
Final Verification: check/probe framework, default battery and the
terminal verifier module.
"""

from .battery import default_battery
from .checks import Check, CheckStatus, Severity
from .verifier import Verifier

__all__ = ['Check', 'CheckStatus', 'Severity', 'Verifier', 'default_battery']
