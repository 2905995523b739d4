"""
Modeling layer: dataset preparation, encoding, scaling, PCA and the
weighted logistic regression fitted on component scores.
"""
