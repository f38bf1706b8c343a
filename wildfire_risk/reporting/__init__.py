"""
Batch scoring and file output.

Modules
-------
batch  : read_feature_table() + score_rows() — offline scoring of a table of
         feature rows against one Forest.
export : export_to_csv() / export_to_json() / export_to_parquet().
"""
