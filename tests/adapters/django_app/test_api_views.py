"""
Testes das API Views JSON de Chamados.

Requests passam por View → Service → Repositórios Django → SQLite,
com o container real e publisher de eventos em memória.
"""

import base64
import json
from datetime import datetime

import pytest
from dependency_injector import providers
from django.utils import timezone

from src.adapters.django_app.chamados.models import (
    ChamadoModel,
    ContadorProtocoloModel,
    LogModel,
)
from src.core.chamados.ports import InMemoryContadorProtocoloStore

API = '/chamados/api/'
ANO = datetime.now().year

DADOS_CHAMADO = {
    'nome': 'Maria Souza',
    'telefone': '(11) 99999-0000',
    'categoria': 'Sistema',
    'assunto': 'Erro ao emitir nota',
    'urgencia': 'Alta',
    'descricao': 'O sistema trava ao clicar em emitir nota fiscal',
}


def post_json(client, url, data):
    return client.post(url, data=json.dumps(data), content_type='application/json')


def patch_json(client, url, data):
    return client.patch(url, data=json.dumps(data), content_type='application/json')


@pytest.fixture
def abrir(client, container):
    def _abrir(**overrides):
        response = post_json(client, API, {**DADOS_CHAMADO, **overrides})
        assert response.status_code == 201, response.json()
        return response.json()['data']
    return _abrir


@pytest.mark.django_db
class TestAbrirChamadoAPI:

    def test_abrir(self, client, container, published_events):
        response = post_json(client, API, DADOS_CHAMADO)

        assert response.status_code == 201
        body = response.json()
        assert body['success'] is True
        assert body['data']['protocolo'] == f'CH-{ANO}-0001'
        assert body['data']['status'] == 'Em Espera'
        assert body['data']['tempo_abertura'].startswith('Aberto há')

        assert LogModel.objects.filter(tipo='CREATE_CHAMADO').count() == 1
        assert [e.event_type for e in published_events.published_events] == ['ChamadoAbertoEvent']

    def test_protocolos_sequenciais(self, abrir):
        assert abrir()['protocolo'] == f'CH-{ANO}-0001'
        assert abrir(nome='João Lima')['protocolo'] == f'CH-{ANO}-0002'

    def test_com_anexo(self, abrir):
        conteudo = base64.b64encode(b'conteudo do arquivo').decode()
        data = abrir(anexo={
            'nome': 'log.txt',
            'tipo': 'text/plain',
            'dados': f'data:text/plain;base64,{conteudo}',
            'tamanho': 19,
        })

        assert data['anexo']['nome'] == 'log.txt'
        assert data['anexo']['tamanho'] == 19

    def test_anexo_grande_pelo_conteudo(self, client, container):
        conteudo = base64.b64encode(b'x' * (700 * 1024 + 1)).decode()
        response = post_json(client, API, {
            **DADOS_CHAMADO,
            'anexo': {'nome': 'grande.bin', 'dados': conteudo, 'tamanho': 10},
        })

        assert response.status_code == 400
        assert response.json()['meta']['field'] == 'anexo'
        assert not ContadorProtocoloModel.objects.exists()

    def test_dados_invalidos(self, client, container):
        response = post_json(client, API, {**DADOS_CHAMADO, 'descricao': 'curta'})

        assert response.status_code == 400
        assert response.json()['meta']['field'] == 'descricao'
        assert not ContadorProtocoloModel.objects.exists()
        assert LogModel.objects.filter(tipo='ERROR_CREATE_CHAMADO').count() == 1

    @pytest.mark.parametrize('body', ['{invalido', '[1, 2]'])
    def test_json_invalido(self, client, container, body):
        response = client.post(API, data=body, content_type='application/json')
        assert response.status_code == 400

    def test_contador_indisponivel(self, client, container):
        store = InMemoryContadorProtocoloStore()
        store.indisponivel = True

        with container.contador_protocolo_store.override(providers.Object(store)):
            response = post_json(client, API, DADOS_CHAMADO)

        assert response.status_code == 503
        assert not ChamadoModel.objects.exists()

    def test_alocacao_abortada(self, client, container):
        store = InMemoryContadorProtocoloStore()
        store.falhar_proximos_commits(1)

        with container.contador_protocolo_store.override(providers.Object(store)):
            response = post_json(client, API, DADOS_CHAMADO)

        assert response.status_code == 503
        assert response.json()['meta']['tentativas'] == 1


@pytest.mark.django_db
class TestConsultasAPI:

    def test_listar_com_filtros(self, client, abrir):
        abrir(assunto='Impressora sem toner')
        segundo = abrir(nome='João Lima', assunto='Senha bloqueada')
        patch_json(client, f"{API}{segundo['id']}/", {'status': 'Resolvido'})

        todos = client.get(API).json()
        resolvidos = client.get(API, {'status': 'RESOLVIDO'}).json()
        por_texto = client.get(API, {'texto': 'toner'}).json()

        assert todos['meta']['total'] == 2
        assert todos['meta']['filtros']['status'] == 'TODOS'
        assert [c['id'] for c in resolvidos['data']] == [segundo['id']]
        assert [c['assunto'] for c in por_texto['data']] == ['Impressora sem toner']

    def test_listar_por_periodo(self, client, abrir):
        abrir()
        hoje = timezone.localdate().isoformat()

        assert client.get(API, {'data_inicio': hoje, 'data_fim': hoje}).json()['meta']['total'] == 1
        assert client.get(API, {'data_fim': '2000-01-01'}).json()['meta']['total'] == 0

    @pytest.mark.parametrize('params', [
        {'data_inicio': '04/03/2025'},
        {'data_inicio': '2025-03-05', 'data_fim': '2025-03-04'},
        {'status': 'Fechado'},
    ])
    def test_filtros_invalidos(self, client, container, params):
        assert client.get(API, params).status_code == 400

    def test_detalhe(self, client, abrir):
        chamado = abrir()

        response = client.get(f"{API}{chamado['id']}/")

        assert response.status_code == 200
        assert response.json()['data']['protocolo'] == chamado['protocolo']

    def test_detalhe_inexistente(self, client, container):
        assert client.get(f"{API}inexistente/").status_code == 404

    def test_por_protocolo(self, client, abrir):
        chamado = abrir()

        response = client.get(f"{API}protocolo/{chamado['protocolo'].lower()}/")

        assert response.status_code == 200
        assert response.json()['data']['id'] == chamado['id']
        assert LogModel.objects.filter(tipo='READ_CHAMADO').count() == 1

    def test_por_protocolo_inexistente(self, client, container):
        response = client.get(f"{API}protocolo/CH-2025-9999/")

        assert response.status_code == 404
        assert LogModel.objects.filter(tipo='READ_CHAMADO_NOT_FOUND').count() == 1

    def test_busca_por_nome(self, client, abrir):
        abrir(nome='Maria Souza')
        abrir(nome='João Lima')

        response = client.get(f"{API}busca/", {'nome': 'lima'})

        assert [c['nome'] for c in response.json()['data']] == ['João Lima']
        assert client.get(f"{API}busca/", {'nome': 'a'}).status_code == 400


@pytest.mark.django_db
class TestAcoesAPI:

    def test_cancelar(self, client, abrir, published_events):
        chamado = abrir()
        published_events.clear()

        response = client.post(f"{API}{chamado['id']}/cancelar/")

        assert response.status_code == 200
        assert response.json()['data']['status'] == 'Cancelado'
        assert [e.event_type for e in published_events.published_events] == ['ChamadoCanceladoEvent']

    def test_cancelar_duas_vezes(self, client, abrir):
        chamado = abrir()
        client.post(f"{API}{chamado['id']}/cancelar/")

        response = client.post(f"{API}{chamado['id']}/cancelar/")

        assert response.status_code == 422
        assert response.json()['meta']['rule'] == 'chamado_ja_cancelado'
        assert LogModel.objects.filter(tipo='ERROR_CANCEL_CHAMADO_USUARIO').count() == 1

    def test_comentarios(self, client, abrir):
        chamado = abrir()
        url = f"{API}{chamado['id']}/comentarios/"

        criado = post_json(client, url, {'texto': 'Estamos verificando', 'autor_tipo': 'ADM'})
        post_json(client, url, {'texto': 'Obrigada!'})
        lista = client.get(url).json()

        assert criado.status_code == 201
        assert [c['texto'] for c in lista['data']] == ['Estamos verificando', 'Obrigada!']
        assert [c['autor_tipo'] for c in lista['data']] == ['ADM', 'USUARIO']

    def test_comentario_em_chamado_cancelado(self, client, abrir):
        chamado = abrir()
        client.post(f"{API}{chamado['id']}/cancelar/")

        response = post_json(client, f"{API}{chamado['id']}/comentarios/", {'texto': 'Oi'})

        assert response.status_code == 422

    def test_editar(self, client, abrir):
        chamado = abrir()

        response = patch_json(client, f"{API}{chamado['id']}/", {
            'status': 'Em atendimento', 'assunto': 'Erro na emissão de NF-e', 'ignorado': 'x',
        })

        assert response.status_code == 200
        assert response.json()['data']['status'] == 'Em atendimento'
        assert response.json()['data']['assunto'] == 'Erro na emissão de NF-e'
        assert LogModel.objects.filter(tipo='UPDATE_CHAMADO').count() == 1

    def test_editar_sem_campos(self, client, abrir):
        chamado = abrir()
        assert patch_json(client, f"{API}{chamado['id']}/", {'protocolo': 'X'}).status_code == 400

    def test_excluir(self, client, abrir):
        chamado = abrir()
        post_json(client, f"{API}{chamado['id']}/comentarios/", {'texto': 'Oi'})

        response = client.delete(f"{API}{chamado['id']}/")

        assert response.status_code == 200
        assert client.get(f"{API}{chamado['id']}/").status_code == 404
        assert LogModel.objects.filter(tipo='DELETE_CHAMADO').count() == 1


@pytest.mark.django_db
class TestRelatoriosAPI:

    def test_resumo(self, client, abrir):
        abrir()
        chamado = abrir()
        client.post(f"{API}{chamado['id']}/cancelar/")

        response = client.get(f"{API}resumo/")

        assert response.status_code == 200
        assert response.json()['data'] == {
            'total': 2,
            'por_status': {
                'Em Espera': 1,
                'Em atendimento': 0,
                'Resolvido': 0,
                'Cancelado': 1,
            },
        }
        assert LogModel.objects.filter(tipo='GERAR_RELATORIO').count() == 1

    def test_logs(self, client, abrir):
        chamado = abrir()
        client.get(f"{API}protocolo/{chamado['protocolo']}/")

        todos = client.get(f"{API}logs/").json()
        leituras = client.get(f"{API}logs/", {'tipo': 'read_chamado'}).json()

        assert sorted(log['tipo'] for log in todos['data']) == ['CREATE_CHAMADO', 'READ_CHAMADO']
        assert leituras['meta']['total'] == 1
        assert leituras['data'][0]['chamado_id'] == chamado['protocolo']


def test_health(client):
    response = client.get('/health/')

    assert response.status_code == 200
    assert response.json() == {'status': 'ok'}
