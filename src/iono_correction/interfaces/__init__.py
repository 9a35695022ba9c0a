"""Request/result contracts for the correction engine."""

from .correction_result import CorrectionModel, CorrectionRequest, CorrectionResult

__all__ = ['CorrectionModel', 'CorrectionRequest', 'CorrectionResult']
