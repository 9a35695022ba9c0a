"""
Correction engine for iono-correction.
"""

from .ionosphere import IonosphereCorrection

__all__ = ['IonosphereCorrection']
