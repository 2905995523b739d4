"""
pcacredit: PCA feature reduction for credit-risk classification.

This package provides a linear teaching pipeline: dummy encoding,
standardisation, principal component analysis and a weighted logistic
regression evaluated with confusion-matrix metrics and ROC/AUC.
"""

from importlib.metadata import version

__version__ = version("pcacredit")

__all__ = ["__version__"]
