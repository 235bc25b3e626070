"""
Brewery API integration layer.

Responsibilities:
- Fetch user taste profiles and inventory from the upstream brewery API.
- Forward the caller's Authorization header on every outbound call.
- Adapt the upstream's key casing to the canonical lowerCamelCase models.
- Raise a typed error for transport failures and non-2xx responses.
"""
