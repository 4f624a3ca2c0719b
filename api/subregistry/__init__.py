"""
Subregistry: espejo local del registro oficial de servidores MCP.

Sincroniza el feed upstream, preserva los campos curados localmente
(metadata de registro y visibilidad) y los expone via una API paginada.
"""

__version__ = "1.0.0"
