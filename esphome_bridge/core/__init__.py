"""Core - registro de sensores, cola de métricas y modelos de dominio.

Estructura:
- domain/      → Anuncio de discovery y Metric
- registry     → topic → handler
- backpressure → cola acotada handlers → forwarder
- monitoring/  → watchdog de liveness
"""
