"""
API blueprints. Each module defines one blueprint; create_app() registers
them under /api/<area>.
"""
