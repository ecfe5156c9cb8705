"""Infrastructure adapters for HeroesMarket.

Credential storage, the HTTP gateway and observability helpers live here;
nothing in this package knows about negotiation rules.
"""
