"""Connectors — adapters de borda para APIs externas.

Estrutura:
- operators/: API upstream de billing e adapters por família de operadora
"""

__all__: list[str] = []
