"""
ML layer — LightGBM random-forest technology classifier.

Modules
-------
feature_selector : FEATURE_COLS, Scaler (min-max), raw feature extraction.
balancing        : Seeded subsample / oversample of the imbalanced classes.
forest_model     : ForestModel — LightGBM ``boosting="rf"`` multiclass wrapper.
heuristics       : Heuristic class probabilities (documented fallback).
classifier       : ForestClassifier — lifecycle, readiness gate, train/predict.
"""
