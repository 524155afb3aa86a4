"""
Rule-based classification.

Modules
-------
scientific : ScientificClassifier — threshold scoring over radiation, wind
             speed and elevation; the last link of the fusion chain.
"""
