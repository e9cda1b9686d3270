"""
Title:
Authors:
- Lee Sael (sael@ajou.ac.kr) Ajou University
- Sang Suk Lee, Ajou University
- HeaWon Moon, Ajou University

This software may be used only for research evaluation purposes.
For other purposes (e.g., commercial), please contact the authors.
"""


class Tucker3Error(Exception):
    """Base class for all Tucker3 errors."""
    pass


class ShapeMismatchError(Tucker3Error, ValueError):
    """Operand shapes are inconsistent. Raised before anything is mutated."""
    pass


class DecompositionError(Tucker3Error, RuntimeError):
    """The SVD (or eigen) solver did not converge."""
    pass


class DeadlineExceeded(Tucker3Error, TimeoutError):
    pass


class ContractionCancelled(Tucker3Error):
    pass
