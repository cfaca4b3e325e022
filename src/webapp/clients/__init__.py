"""
Clients for the Valhalla REST API.
"""

from webapp.clients.valhalla_api import AuthAPI, ValhallaAPIClient, retry_on_error
from webapp.clients.resources import RESOURCES, ResourceAPI, get_resource_api

__all__ = ['AuthAPI', 'ValhallaAPIClient', 'retry_on_error', 'RESOURCES', 'ResourceAPI', 'get_resource_api']
