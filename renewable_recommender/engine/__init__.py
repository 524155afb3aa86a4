"""
Recommendation engine: fuses dataset labels, the forest classifier and the
scientific rules into one recommendation with provenance.

Modules
-------
strategies  : DatasetLabelStrategy, LearnedModelStrategy, ScientificRuleStrategy
              and the tagged StrategyOutcome they return.
recommender : RecommendationEngine — territory check, parameter resolution
              (direct record / IDW), strategy chain, manual simulation.
"""
