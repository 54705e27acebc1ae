"""
repositories/ - Data Access Layer
==================================
A generic CRUD engine (`crud_repo`) plus one repository per entity.
Repositories receive raw rows from the database and return domain model objects.
"""
