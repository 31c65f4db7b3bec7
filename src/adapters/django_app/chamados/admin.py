"""
Django Admin para o domínio de Chamados.
"""

from django.contrib import admin
from django.utils.html import format_html

from src.core.chamados.horario_comercial import calcular_tempo_abertura

from .models import (
    ChamadoModel,
    ComentarioModel,
    ContadorProtocoloModel,
    LogModel,
)

STATUS_CORES = {
    'Em Espera': '#ffc107',
    'Em atendimento': '#17a2b8',
    'Resolvido': '#28a745',
    'Cancelado': '#6c757d',
}


class ComentarioInline(admin.TabularInline):
    model = ComentarioModel
    extra = 0
    fields = ['autor_tipo', 'autor_nome', 'texto', 'criado_em']
    readonly_fields = ['criado_em']


@admin.register(ChamadoModel)
class ChamadoAdmin(admin.ModelAdmin):
    """Admin para ChamadoModel."""

    list_display = [
        'protocolo',
        'nome',
        'assunto',
        'categoria',
        'urgencia',
        'status_badge',
        'criado_em',
        'tempo_abertura',
    ]

    list_filter = [
        'status',
        'categoria',
        'urgencia',
        'criado_em',
    ]

    search_fields = [
        'protocolo',
        'nome',
        'assunto',
        'descricao',
    ]

    readonly_fields = [
        'id',
        'protocolo',
        'criado_em',
        'atualizado_em',
    ]

    fieldsets = [
        ('Identificação', {
            'fields': ['id', 'protocolo', 'nome', 'telefone'],
        }),
        ('Chamado', {
            'fields': ['categoria', 'assunto', 'urgencia', 'descricao', 'status'],
        }),
        ('Anexo', {
            'fields': ['anexo_nome', 'anexo_tipo', 'anexo_tamanho'],
            'classes': ['collapse'],
        }),
        ('Timestamps', {
            'fields': ['criado_em', 'atualizado_em'],
            'classes': ['collapse'],
        }),
    ]

    inlines = [ComentarioInline]

    ordering = ['-criado_em']

    date_hierarchy = 'criado_em'

    def status_badge(self, obj):
        """Exibe status com badge colorido."""
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            STATUS_CORES.get(obj.status, '#6c757d'),
            obj.status
        )
    status_badge.short_description = 'Status'

    def tempo_abertura(self, obj):
        return calcular_tempo_abertura(obj.criado_em)
    tempo_abertura.short_description = 'Tempo útil'


@admin.register(LogModel)
class LogAdmin(admin.ModelAdmin):
    """Admin somente leitura para auditoria."""

    list_display = ['criado_em', 'tipo', 'chamado_id', 'ator_tipo', 'detalhes']
    list_filter = ['tipo', 'ator_tipo', 'criado_em']
    search_fields = ['chamado_id', 'tipo', 'detalhes']
    readonly_fields = ['id', 'tipo', 'chamado_id', 'ator_tipo', 'detalhes', 'criado_em']

    def has_add_permission(self, request):
        return False


@admin.register(ContadorProtocoloModel)
class ContadorProtocoloAdmin(admin.ModelAdmin):
    list_display = ['chave', 'valor', 'atualizado_em']
    readonly_fields = ['chave', 'valor', 'atualizado_em']

    def has_add_permission(self, request):
        return False
