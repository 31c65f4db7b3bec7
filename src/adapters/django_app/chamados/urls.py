"""
URL patterns para o domínio de Chamados.

Endpoints API JSON (prefixo /chamados/):
- GET|POST /api/ - Listar / abrir chamado
- GET /api/resumo/ - Resumo para relatório
- GET /api/logs/ - Registros de auditoria
- GET /api/protocolo/<protocolo>/ - Consultar por protocolo
- GET /api/busca/?nome= - Consultar por nome
- GET|PATCH|DELETE /api/<id>/ - Detalhar / editar / excluir
- POST /api/<id>/cancelar/ - Cancelar
- GET|POST /api/<id>/comentarios/ - Comentários
"""

from django.urls import path
from . import api_views

app_name = 'chamados'

urlpatterns = [
    # Listagem e abertura
    path('api/', api_views.ChamadoAPIListView.as_view(), name='api_list'),

    # Rotas fixas (antes do <pk> para não conflitar)
    path('api/resumo/', api_views.ChamadoAPIResumoView.as_view(), name='api_resumo'),
    path('api/logs/', api_views.LogAPIListView.as_view(), name='api_logs'),
    path('api/busca/', api_views.ChamadoAPIBuscaNomeView.as_view(), name='api_busca'),
    path(
        'api/protocolo/<str:protocolo>/',
        api_views.ChamadoAPIProtocoloView.as_view(),
        name='api_protocolo'
    ),

    # Detalhes, edição e exclusão
    path('api/<str:pk>/', api_views.ChamadoAPIDetailView.as_view(), name='api_detail'),

    # Ações
    path('api/<str:pk>/cancelar/', api_views.ChamadoAPICancelarView.as_view(), name='api_cancelar'),
    path(
        'api/<str:pk>/comentarios/',
        api_views.ChamadoAPIComentariosView.as_view(),
        name='api_comentarios'
    ),
]
