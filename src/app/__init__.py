"""App — coração do sistema: registry, webhooks e infraestrutura.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- domain/: vocabulário de status e envelope de resultado
- operators/: registry, health monitor e eventos de operadora
- webhooks/: entrega outbound com retry e processamento inbound
- infra/: implementações concretas de IO
- protocols/: contratos/interfaces
- observability/: correlation id e métricas como logs

Padrão: app executa; api adapta; utils apoia.
"""
