"""API — camada de borda e adapters de operadoras.

Responsabilidades:
- Traduzir o contrato unificado para a API upstream de billing
- Normalizar respostas e status para o vocabulário unificado
- Receber notificações inbound (routes)

Subpastas:
- connectors/: cliente upstream e adapters por família de operadora
- normalizers/: catálogo, mapas de campos e tabelas de status
- routes/: endpoints HTTP (webhook inbound, health, readiness)

NÃO PODE conter: estado do registry, agendamento de retries.
"""
