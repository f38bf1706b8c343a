"""
Wildfire Risk — ensemble wildfire-probability scoring service.

Subpackages
-----------
features  : Feature Preparer — raw weather / air-quality / vegetation
            payloads into a clamped, defaulted ``FeatureRecord``.
forest    : Ensemble scorer (``Forest``) and feature-importance explainer.
ingestion : HTTP collaborators (OpenWeather, Earth Engine function).
reporting : Batch scoring and file export.
"""

__version__ = "0.3.0"
