"""
Adapters Layer - Implementações de infraestrutura dos Ports do Core.
"""
