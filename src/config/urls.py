"""
URL Configuration da Central de Chamados.

Estrutura:
- /admin/ - Django Admin
- /chamados/api/ - API JSON de chamados, comentários e auditoria
- /health/ - Health check
"""

from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path


def health(request):
    return JsonResponse({'status': 'ok'})


urlpatterns = [
    path('admin/', admin.site.urls),

    path('chamados/', include('src.adapters.django_app.chamados.urls')),

    path('health/', health, name='health'),
]
