import secrets


def generate_token():
    """Generate an unguessable, URL-safe subscription token (256 bits)"""
    return secrets.token_urlsafe(32)
