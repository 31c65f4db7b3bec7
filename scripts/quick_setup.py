#!/usr/bin/env python
"""
Setup rápido para desenvolvimento local.

Este script:
1. Configura Django settings
2. Executa migrations no banco configurado (SQLite se nada for definido)
3. Abre chamados de exemplo (opcional)

Uso:
    python scripts/quick_setup.py
    python scripts/quick_setup.py --with-sample-data
"""

import argparse
import os
import sys

# Raiz do projeto no path para importar src.*
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def setup_django():
    """Configura Django para uso standalone."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

    import django
    django.setup()


def run_migrations():
    from django.core.management import call_command

    print("📦 Executando migrations...")
    call_command('migrate', verbosity=1)
    print("✅ Migrations concluídas!")


SAMPLE_CHAMADOS = [
    {
        'nome': 'Maria Souza',
        'telefone': '(11) 98888-0001',
        'categoria': 'Infraestrutura',
        'assunto': 'Sistema fora do ar',
        'urgencia': 'Crítica',
        'descricao': 'O sistema está inacessível para todo o setor financeiro desde as 8h.',
    },
    {
        'nome': 'João Lima',
        'categoria': 'Acesso',
        'assunto': 'Senha bloqueada',
        'urgencia': 'Alta',
        'descricao': 'Minha senha foi bloqueada após três tentativas e preciso emitir notas hoje.',
    },
    {
        'nome': 'Ana Paula',
        'telefone': '(21) 97777-0003',
        'categoria': 'Impressão',
        'assunto': 'Impressora do 2º andar sem toner',
        'urgencia': 'Média',
        'descricao': 'A impressora compartilhada do segundo andar está imprimindo páginas em branco.',
    },
    {
        'nome': 'Carlos Pereira',
        'categoria': 'Sugestão',
        'assunto': 'Modo escuro no portal',
        'urgencia': 'Baixa',
        'descricao': 'Seria interessante ter um modo escuro no portal de chamados.',
    },
]


def create_sample_data():
    """Abre chamados de exemplo pelos próprios use cases."""
    from src.config.container import get_container
    from src.core.chamados.dtos import (
        AbrirChamadoInputDTO,
        AdicionarComentarioInputDTO,
        AtualizarChamadoInputDTO,
    )

    container = get_container()
    abrir = container.abrir_chamado_service()

    print("📝 Abrindo chamados de exemplo...")

    abertos = []
    for dados in SAMPLE_CHAMADOS:
        output = abrir.execute(AbrirChamadoInputDTO(**dados))
        abertos.append(output)
        print(f"   ✓ {output.protocolo} - {output.assunto[:50]}")

    # Primeiro chamado já em atendimento, com resposta do suporte
    if abertos:
        primeiro = abertos[0]
        container.atualizar_chamado_service().execute(
            AtualizarChamadoInputDTO(chamado_id=primeiro.id, status='Em atendimento')
        )
        container.adicionar_comentario_service().execute(
            AdicionarComentarioInputDTO(
                chamado_id=primeiro.id,
                texto='Equipe de infraestrutura já está verificando o servidor.',
                autor_tipo='ADM',
                autor_nome='Suporte N1',
            )
        )

    print(f"✅ {len(abertos)} chamados criados!")


def check_connection():
    from django.db import DatabaseError, connection

    print("🔍 Verificando conexão com o banco...")

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        print("✅ Conexão OK!")
        return True
    except DatabaseError as e:
        print(f"❌ Erro de conexão: {e}")
        return False


def show_info():
    from django.conf import settings

    print("\n" + "=" * 60)
    print("📊 Informações do Setup")
    print("=" * 60)
    print(f"  Database Engine: {settings.DATABASES['default']['ENGINE']}")
    print(f"  Database Name: {settings.DATABASES['default']['NAME']}")
    print(f"  Expediente: {settings.HORARIO_COMERCIAL_INICIO}h-"
          f"{settings.HORARIO_COMERCIAL_FIM}h ({settings.HORARIO_COMERCIAL_FUSO})")
    print(f"  Debug Mode: {settings.DEBUG}")
    print("=" * 60)
    print("\n🚀 Próximos passos:")
    print("   1. python manage.py runserver")
    print("   2. Acesse: http://localhost:8000/admin/")
    print("   3. Acesse: http://localhost:8000/chamados/api/")
    print("\n")


def main():
    parser = argparse.ArgumentParser(description='Setup rápido para desenvolvimento')
    parser.add_argument(
        '--with-sample-data',
        action='store_true',
        help='Abrir chamados de exemplo'
    )
    parser.add_argument(
        '--check-only',
        action='store_true',
        help='Apenas verificar conexão'
    )

    args = parser.parse_args()

    print("\n" + "=" * 60)
    print("🔧 Central de Chamados - Quick Setup")
    print("=" * 60 + "\n")

    setup_django()

    if args.check_only:
        check_connection()
        return

    if not check_connection():
        print("\n⚠️  Certifique-se de que o banco de dados está rodando.")
        print("   Sem DATABASE_URL/DATABASE_HOST o SQLite local é usado.")
        return

    run_migrations()

    if args.with_sample_data:
        create_sample_data()

    show_info()


if __name__ == '__main__':
    main()
