"""
Adapter Django do domínio de Chamados.

Models, mappers, repositórios, API JSON e admin.
"""
