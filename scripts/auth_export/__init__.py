"""Firebase Authentication to BigQuery export.

Pages through every Firebase Auth user, maps each record to a row of a
fixed-schema BigQuery table, and inserts the rows in concurrent batches.
"""
