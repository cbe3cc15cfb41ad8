"""
Integración con el sistema: comandos externos y paquetes/servicio de OpenLDAP.
"""
