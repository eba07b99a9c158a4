# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/report/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Verification report package initialization

"""
Verification Report: live system snapshot and the persisted text report.
"""

from .generator import ReportGenerator, report_path
from .snapshot import SnapshotCollector, SystemSnapshot

__all__ = ['ReportGenerator', 'report_path', 'SnapshotCollector', 'SystemSnapshot']
