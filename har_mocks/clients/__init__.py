"""Clients for live endpoints."""

from har_mocks.clients.graphql import GraphQLClient
from har_mocks.clients.rest import RestClient

__all__ = ['GraphQLClient', 'RestClient']
