"""Core module - Pipeline de ingesta de telemetría serial.

Estructura:
- domain/      → Packet / StoredPacket
- parsing/     → Decoder del protocolo de líneas
- monitoring/  → Estadísticas de procesamiento
"""
