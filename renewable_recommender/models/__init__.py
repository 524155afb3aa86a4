"""
Domain models.

Modules
-------
measurement    : MeasurementRecord, EnvironmentalReading (frozen).
dataset        : Dataset container, DepartmentAggregate, planar distance.
recommendation : RecommendationRequest, InterpolationResult, Recommendation.
"""
