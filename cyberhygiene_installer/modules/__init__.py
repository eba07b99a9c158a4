# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/modules/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Provisioning modules package initialization

"""
Provisioning Modules: module contract, apply steps and the YAML catalog.
"""

from .base import CallableModule, ProvisioningModule
from .catalog import load_catalog
from .steps import StepModule

__all__ = ['CallableModule', 'ProvisioningModule', 'StepModule', 'load_catalog']
