"""
Migration inicial para o domínio de Chamados.

Cria as tabelas:
- chamados: Tabela principal de chamados
- chamado_comentarios: Comentários
- chamado_logs: Registro de auditoria
- contadores_protocolo: Contadores de protocolo
"""

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


STATUS_CHOICES = [
    ('Em Espera', 'Em Espera'),
    ('Em atendimento', 'Em atendimento'),
    ('Resolvido', 'Resolvido'),
    ('Cancelado', 'Cancelado'),
]

ATOR_CHOICES = [
    ('USUARIO', 'Usuário'),
    ('ADM', 'Administrador'),
]


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        # =================================================================
        # Tabela: chamados
        # =================================================================
        migrations.CreateModel(
            name='ChamadoModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                    help_text='UUID único do chamado'
                )),
                ('protocolo', models.CharField(
                    max_length=20,
                    unique=True,
                    help_text='Protocolo legível (CH-AAAA-NNNN)'
                )),
                ('nome', models.CharField(
                    max_length=120,
                    db_index=True,
                    help_text='Nome do solicitante'
                )),
                ('telefone', models.CharField(
                    max_length=30,
                    null=True,
                    blank=True,
                    help_text='Telefone de contato'
                )),
                ('categoria', models.CharField(
                    max_length=100,
                    db_index=True,
                    help_text='Categoria do chamado'
                )),
                ('assunto', models.CharField(
                    max_length=200,
                    help_text='Assunto resumido'
                )),
                ('urgencia', models.CharField(
                    max_length=50,
                    help_text='Urgência informada pelo solicitante'
                )),
                ('descricao', models.TextField(
                    help_text='Descrição detalhada'
                )),
                ('status', models.CharField(
                    max_length=30,
                    choices=STATUS_CHOICES,
                    default='Em Espera',
                    db_index=True,
                    help_text='Estado atual do chamado'
                )),
                ('criado_em', models.DateTimeField(
                    default=django.utils.timezone.now,
                    db_index=True,
                    help_text='Data/hora de abertura'
                )),
                ('atualizado_em', models.DateTimeField(
                    default=django.utils.timezone.now,
                    help_text='Data/hora da última atualização'
                )),
                ('anexo_nome', models.CharField(max_length=255, null=True, blank=True)),
                ('anexo_tipo', models.CharField(max_length=100, blank=True, default='')),
                ('anexo_dados', models.TextField(blank=True, default='')),
                ('anexo_tamanho', models.PositiveIntegerField(default=0)),
            ],
            options={
                'verbose_name': 'Chamado',
                'verbose_name_plural': 'Chamados',
                'db_table': 'chamados',
                'ordering': ['-criado_em'],
            },
        ),
        migrations.AddIndex(
            model_name='chamadomodel',
            index=models.Index(
                fields=['status', 'criado_em'],
                name='idx_chamado_status_criado'
            ),
        ),

        # =================================================================
        # Tabela: chamado_comentarios
        # =================================================================
        migrations.CreateModel(
            name='ComentarioModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False
                )),
                ('autor_tipo', models.CharField(
                    max_length=10,
                    choices=ATOR_CHOICES,
                    default='USUARIO'
                )),
                ('autor_nome', models.CharField(max_length=120, blank=True, default='')),
                ('texto', models.TextField()),
                ('criado_em', models.DateTimeField(
                    default=django.utils.timezone.now,
                    db_index=True
                )),
                ('chamado', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='comentarios',
                    to='chamados.chamadomodel',
                    help_text='Chamado comentado'
                )),
            ],
            options={
                'verbose_name': 'Comentário',
                'verbose_name_plural': 'Comentários',
                'db_table': 'chamado_comentarios',
                'ordering': ['criado_em'],
            },
        ),

        # =================================================================
        # Tabela: chamado_logs
        # =================================================================
        migrations.CreateModel(
            name='LogModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False
                )),
                ('tipo', models.CharField(
                    max_length=50,
                    db_index=True,
                    help_text='Tipo da ação (ex: CREATE_CHAMADO)'
                )),
                ('chamado_id', models.CharField(
                    max_length=20,
                    null=True,
                    blank=True,
                    db_index=True,
                    help_text='Protocolo do chamado envolvido'
                )),
                ('ator_tipo', models.CharField(
                    max_length=10,
                    choices=ATOR_CHOICES
                )),
                ('detalhes', models.TextField(blank=True, default='')),
                ('criado_em', models.DateTimeField(
                    default=django.utils.timezone.now,
                    db_index=True
                )),
            ],
            options={
                'verbose_name': 'Log',
                'verbose_name_plural': 'Logs',
                'db_table': 'chamado_logs',
                'ordering': ['-criado_em'],
            },
        ),

        # =================================================================
        # Tabela: contadores_protocolo
        # =================================================================
        migrations.CreateModel(
            name='ContadorProtocoloModel',
            fields=[
                ('chave', models.CharField(
                    max_length=50,
                    primary_key=True,
                    serialize=False
                )),
                ('valor', models.PositiveIntegerField(default=0)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Contador de Protocolo',
                'verbose_name_plural': 'Contadores de Protocolo',
                'db_table': 'contadores_protocolo',
            },
        ),
    ]
