"""
Django Models para o domínio de Chamados.

Estes models são ADAPTERS - implementam a persistência para as
entidades de domínio definidas em src/core/chamados/entities.py.

IMPORTANTE:
- Models NÃO contêm lógica de negócio
- Lógica de negócio fica nas Entities do Core
- Models são mapeados para/de Entities via Mappers

Tabelas:
- ChamadoModel: Tabela principal de chamados
- ComentarioModel: Comentários de um chamado
- LogModel: Registro de auditoria
- ContadorProtocoloModel: Contadores de protocolo (por ano e legado)
"""

from django.db import models
from django.utils import timezone


class ChamadoStatusChoices(models.TextChoices):
    """Choices para status de chamado (espelha ChamadoStatus do Core)."""
    EM_ESPERA = 'Em Espera', 'Em Espera'
    EM_ATENDIMENTO = 'Em atendimento', 'Em atendimento'
    RESOLVIDO = 'Resolvido', 'Resolvido'
    CANCELADO = 'Cancelado', 'Cancelado'


class AtorTipoChoices(models.TextChoices):
    USUARIO = 'USUARIO', 'Usuário'
    ADM = 'ADM', 'Administrador'


class ChamadoModel(models.Model):
    """
    Model Django para persistência de Chamados.

    Fields:
        id: UUID como primary key (gerado pela Entity)
        protocolo: Protocolo legível único (CH-AAAA-NNNN)
        nome: Nome do solicitante
        telefone: Telefone de contato
        categoria: Categoria
        assunto: Assunto
        urgencia: Urgência informada
        descricao: Descrição detalhada
        status: Estado atual (choices)
        criado_em: Timestamp de abertura
        atualizado_em: Timestamp de última atualização
        anexo_*: Dados do anexo (opcional)
    """

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
        help_text="UUID único do chamado"
    )

    protocolo = models.CharField(
        max_length=20,
        unique=True,
        help_text="Protocolo legível (CH-AAAA-NNNN)"
    )

    # Solicitante
    nome = models.CharField(
        max_length=120,
        db_index=True,
        help_text="Nome do solicitante"
    )

    telefone = models.CharField(
        max_length=30,
        null=True,
        blank=True,
        help_text="Telefone de contato"
    )

    # Dados do chamado
    categoria = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Categoria do chamado"
    )

    assunto = models.CharField(
        max_length=200,
        help_text="Assunto resumido"
    )

    urgencia = models.CharField(
        max_length=50,
        help_text="Urgência informada pelo solicitante"
    )

    descricao = models.TextField(
        help_text="Descrição detalhada"
    )

    status = models.CharField(
        max_length=30,
        choices=ChamadoStatusChoices.choices,
        default=ChamadoStatusChoices.EM_ESPERA,
        db_index=True,
        help_text="Estado atual do chamado"
    )

    # Timestamps
    criado_em = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        help_text="Data/hora de abertura"
    )

    atualizado_em = models.DateTimeField(
        default=timezone.now,
        help_text="Data/hora da última atualização"
    )

    # Anexo (data URL base64, ~700KB no máximo)
    anexo_nome = models.CharField(max_length=255, null=True, blank=True)
    anexo_tipo = models.CharField(max_length=100, blank=True, default='')
    anexo_dados = models.TextField(blank=True, default='')
    anexo_tamanho = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'chamados'
        verbose_name = 'Chamado'
        verbose_name_plural = 'Chamados'
        ordering = ['-criado_em']
        indexes = [
            models.Index(fields=['status', 'criado_em'], name='idx_chamado_status_criado'),
        ]

    def __str__(self):
        return f"[{self.protocolo}] {self.assunto}"

    def __repr__(self):
        return f"<ChamadoModel protocolo={self.protocolo} status={self.status}>"


class ComentarioModel(models.Model):
    """Comentário trocado em um chamado."""

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False
    )

    chamado = models.ForeignKey(
        ChamadoModel,
        on_delete=models.CASCADE,
        related_name='comentarios',
        help_text="Chamado comentado"
    )

    autor_tipo = models.CharField(
        max_length=10,
        choices=AtorTipoChoices.choices,
        default=AtorTipoChoices.USUARIO
    )

    autor_nome = models.CharField(max_length=120, blank=True, default='')

    texto = models.TextField()

    criado_em = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'chamado_comentarios'
        verbose_name = 'Comentário'
        verbose_name_plural = 'Comentários'
        ordering = ['criado_em']

    def __str__(self):
        return f"{self.autor_tipo} em {self.chamado_id[:8]} @ {self.criado_em}"


class LogModel(models.Model):
    """
    Registro de auditoria.

    chamado_id guarda o protocolo (não é chave estrangeira: o registro
    sobrevive à exclusão do chamado).
    """

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False
    )

    tipo = models.CharField(
        max_length=50,
        db_index=True,
        help_text="Tipo da ação (ex: CREATE_CHAMADO)"
    )

    chamado_id = models.CharField(
        max_length=20,
        null=True,
        blank=True,
        db_index=True,
        help_text="Protocolo do chamado envolvido"
    )

    ator_tipo = models.CharField(
        max_length=10,
        choices=AtorTipoChoices.choices
    )

    detalhes = models.TextField(blank=True, default='')

    criado_em = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'chamado_logs'
        verbose_name = 'Log'
        verbose_name_plural = 'Logs'
        ordering = ['-criado_em']

    def __str__(self):
        return f"{self.tipo} - {self.chamado_id or '-'} @ {self.criado_em}"


class ContadorProtocoloModel(models.Model):
    """
    Contador de protocolos.

    chave é o ano ("2025") ou a chave do contador legado
    ("contadorChamados").
    """

    chave = models.CharField(
        max_length=50,
        primary_key=True
    )

    valor = models.PositiveIntegerField(default=0)

    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'contadores_protocolo'
        verbose_name = 'Contador de Protocolo'
        verbose_name_plural = 'Contadores de Protocolo'

    def __str__(self):
        return f"{self.chave}={self.valor}"
