"""
Store access layer: connection lifecycle, collection resolution, index
maintenance, tenant-scoped query construction and the record facade.
"""
