"""
busk-cats Modules
=================

Flask blueprint modules: subscribers (state machine, admin API),
broadcast (list sends) and email (transport).
"""

__all__ = ['subscribers', 'broadcast', 'email']
