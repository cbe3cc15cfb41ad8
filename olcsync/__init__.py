"""
olcsync - reconciliación declarativa de bases de datos OpenLDAP (cn=config).
"""

__version__ = "1.0.0"
