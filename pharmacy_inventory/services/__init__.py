"""
Services package: thin wrappers over the backend REST API.
"""

from pharmacy_inventory.services.api_client import BackendApi

backend = BackendApi()
