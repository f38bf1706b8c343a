"""
HTTP collaborators that gather raw signals for a location.

Modules
-------
openweather_client  : OpenWeatherClient — geocoding, current weather,
                      air pollution.  Raises GeocodingError /
                      UpstreamDataError.
earth_engine_client : EarthEngineClient — NDVI / EVI and land cover from the
                      Earth Engine function.  Failures are non-fatal.
"""
