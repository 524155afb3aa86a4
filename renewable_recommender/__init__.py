"""
Renewable technology recommender for the Colombian territory.

Recommends solar, wind (``eolica``) or hybrid (``hibrida``) generation for a
coordinate by fusing a ground-truth dataset label, a LightGBM random-forest
classifier and a deterministic scientific rule classifier.

Entry points
------------
engine.recommender.RecommendationEngine : the public service object.
cli                                     : ``renewable-recommender`` command.
"""

__version__ = "0.3.0"
