"""
Feature preparation: upstream payloads → ``FeatureRecord``.

Modules
-------
preparation : prepare_input_data(), build_feature_record(),
              calculate_drought_index(), convert_co_to_co2_equivalent().
              Pure functions — no I/O, never raise on numeric input.
"""
