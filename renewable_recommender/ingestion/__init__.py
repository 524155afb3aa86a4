"""
Dataset ingestion.

Modules
-------
dataset_csv : parse_dataset_csv() — CSV rows → MeasurementRecord → Dataset.
"""
