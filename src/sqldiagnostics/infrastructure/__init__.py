"""
Infrastructure layer: SQL Server access, catalog loading, workbook output
and logging.
"""
