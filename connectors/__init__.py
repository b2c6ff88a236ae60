"""
connectors — OAuth login providers.

Provides a small connector framework that handles:
  • OAuth2 auth-URL generation
  • Code → access-token exchange
  • Provider profile fetch

Discord is the only provider; it subclasses BaseConnector.
"""
