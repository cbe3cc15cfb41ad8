"""
Providers: implementaciones concretas de ProviderContract.
"""
