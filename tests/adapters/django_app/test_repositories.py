"""
Testes dos adapters de persistência Django.

Testa:
- Repositórios de chamados, comentários e logs
- Mappers (ida e volta com anexo)
- DjangoContadorProtocoloStore (retry, abort, indisponibilidade)
- DjangoUnitOfWork (commit/rollback e publicação de eventos)
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest
from django.db import IntegrityError, OperationalError, connections

from src.adapters.django_app.chamados.mappers import ChamadoMapper
from src.adapters.django_app.chamados.models import (
    ChamadoModel,
    ComentarioModel,
    ContadorProtocoloModel,
    LogModel,
)
from src.adapters.django_app.chamados.repositories import (
    DjangoChamadoRepository,
    DjangoComentarioRepository,
    DjangoContadorProtocoloStore,
    DjangoLogRepository,
)
from src.adapters.django_app.events.publishers import InMemoryEventPublisher
from src.adapters.django_app.shared.unit_of_work import DjangoUnitOfWork
from src.core.chamados.entities import (
    AnexoChamado,
    AtorTipo,
    ChamadoEntity,
    ChamadoStatus,
    ComentarioEntity,
    LogEntity,
)
from src.core.chamados.events import ChamadoAbertoEvent
from src.core.chamados.protocolo import CHAVE_CONTADOR_LEGADO, GeradorProtocolo
from src.core.shared.exceptions import (
    StoreUnavailableError,
    TransactionAbortedError,
)

SP = ZoneInfo("America/Sao_Paulo")


def novo_chamado(protocolo: str, **overrides) -> ChamadoEntity:
    dados = {
        "nome": "Maria Souza",
        "categoria": "Sistema",
        "assunto": "Erro ao emitir nota",
        "urgencia": "Alta",
        "descricao": "O sistema trava ao clicar em emitir nota fiscal",
    }
    dados.update(overrides)
    return ChamadoEntity.abrir(protocolo=protocolo, **dados)


# =============================================================================
# Chamados
# =============================================================================

@pytest.mark.django_db
class TestDjangoChamadoRepository:

    @pytest.fixture
    def repo(self):
        return DjangoChamadoRepository()

    def test_save_and_get(self, repo, sample_chamado_entity):
        repo.save(sample_chamado_entity)

        encontrado = repo.get_by_id(sample_chamado_entity.id)

        assert encontrado == sample_chamado_entity
        assert encontrado.protocolo == "CH-2025-0001"
        assert encontrado.telefone == "(11) 99999-0000"
        assert encontrado.status == ChamadoStatus.EM_ESPERA

    def test_save_atualiza_existente(self, repo, sample_chamado_entity):
        repo.save(sample_chamado_entity)
        sample_chamado_entity.cancelar()
        repo.save(sample_chamado_entity)

        assert ChamadoModel.objects.count() == 1
        assert repo.get_by_id(sample_chamado_entity.id).status == ChamadoStatus.CANCELADO

    def test_get_inexistente(self, repo):
        assert repo.get_by_id("inexistente") is None
        assert repo.get_by_protocolo("CH-2025-9999") is None

    def test_get_by_protocolo(self, repo, sample_chamado_entity):
        repo.save(sample_chamado_entity)
        assert repo.get_by_protocolo("CH-2025-0001").id == sample_chamado_entity.id

    def test_anexo_ida_e_volta(self, repo):
        anexo = AnexoChamado(nome="print.png", tipo="image/png", dados="data:image/png;base64,AAAA", tamanho=3)
        chamado = novo_chamado("CH-2025-0002", anexo=anexo)

        repo.save(chamado)

        assert repo.get_by_id(chamado.id).anexo == anexo

    def test_list_by_nome(self, repo):
        repo.save(novo_chamado("CH-2025-0001", nome="Maria Souza"))
        repo.save(novo_chamado("CH-2025-0002", nome="João Lima"))

        assert [c.nome for c in repo.list_by_nome("SOUZA")] == ["Maria Souza"]

    def test_list_all_filtros(self, repo):
        antigo = novo_chamado("CH-2025-0001", assunto="Impressora sem toner")
        antigo.criado_em = datetime(2025, 3, 3, 10, 0, tzinfo=SP)
        novo = novo_chamado("CH-2025-0002", nome="João Lima", assunto="Senha bloqueada")
        novo.criado_em = datetime(2025, 3, 5, 10, 0, tzinfo=SP)
        novo.status = ChamadoStatus.RESOLVIDO
        repo.save(antigo)
        repo.save(novo)

        assert [c.protocolo for c in repo.list_all()] == ["CH-2025-0002", "CH-2025-0001"]
        assert [c.protocolo for c in repo.list_all(status=ChamadoStatus.RESOLVIDO)] == ["CH-2025-0002"]
        assert [c.protocolo for c in repo.list_all(texto="toner")] == ["CH-2025-0001"]
        assert [c.protocolo for c in repo.list_all(texto="joão")] == ["CH-2025-0002"]
        assert [c.protocolo for c in repo.list_all(
            criado_de=datetime(2025, 3, 4, tzinfo=SP)
        )] == ["CH-2025-0002"]
        assert [c.protocolo for c in repo.list_all(
            criado_ate=datetime(2025, 3, 4, tzinfo=SP)
        )] == ["CH-2025-0001"]

    def test_delete_e_contagens(self, repo):
        primeiro = novo_chamado("CH-2025-0001")
        segundo = novo_chamado("CH-2025-0002")
        repo.save(primeiro)
        repo.save(segundo)

        repo.delete(primeiro.id)
        repo.delete("inexistente")

        assert not repo.exists(primeiro.id)
        assert repo.count() == 1
        assert repo.count_by_status(ChamadoStatus.EM_ESPERA) == 1

    def test_protocolo_unico(self, repo):
        repo.save(novo_chamado("CH-2025-0001"))

        with pytest.raises(IntegrityError):
            repo.save(novo_chamado("CH-2025-0001"))

    def test_mapper_to_model_nao_salva(self, sample_chamado_entity):
        model = ChamadoMapper.to_model(sample_chamado_entity)

        assert model.protocolo == "CH-2025-0001"
        assert ChamadoModel.objects.count() == 0


# =============================================================================
# Comentários e Logs
# =============================================================================

@pytest.mark.django_db
class TestDjangoComentarioRepository:

    def test_list_e_delete_by_chamado(self, sample_chamado_entity):
        DjangoChamadoRepository().save(sample_chamado_entity)
        repo = DjangoComentarioRepository()

        primeiro = ComentarioEntity.criar(sample_chamado_entity.id, AtorTipo.USUARIO, "primeiro")
        segundo = ComentarioEntity.criar(sample_chamado_entity.id, AtorTipo.ADM, "segundo", "Suporte")
        segundo.criado_em = primeiro.criado_em + timedelta(minutes=1)
        repo.save(segundo)
        repo.save(primeiro)

        comentarios = repo.list_by_chamado(sample_chamado_entity.id)

        assert [c.texto for c in comentarios] == ["primeiro", "segundo"]
        assert comentarios[1].autor_tipo == AtorTipo.ADM
        assert repo.delete_by_chamado(sample_chamado_entity.id) == 2
        assert ComentarioModel.objects.count() == 0

    def test_exclusao_do_chamado_remove_comentarios(self, sample_chamado_entity):
        DjangoChamadoRepository().save(sample_chamado_entity)
        DjangoComentarioRepository().save(
            ComentarioEntity.criar(sample_chamado_entity.id, AtorTipo.USUARIO, "oi")
        )

        DjangoChamadoRepository().delete(sample_chamado_entity.id)

        assert ComentarioModel.objects.count() == 0


@pytest.mark.django_db
class TestDjangoLogRepository:

    @pytest.fixture
    def repo(self):
        return DjangoLogRepository()

    def registrar(self, repo, tipo, criado_em):
        log = LogEntity.criar(tipo, AtorTipo.USUARIO, tipo.lower(), "CH-2025-0001")
        log.criado_em = criado_em
        repo.registrar(log)

    def test_listar_filtros(self, repo):
        base = datetime(2025, 3, 4, 12, 0, tzinfo=timezone.utc)
        self.registrar(repo, "CREATE_CHAMADO", base)
        self.registrar(repo, "READ_CHAMADO", base + timedelta(hours=1))
        self.registrar(repo, "READ_CHAMADO", base + timedelta(days=2))

        assert [log.criado_em for log in repo.listar()] == [
            base + timedelta(days=2), base + timedelta(hours=1), base,
        ]
        assert len(repo.listar(tipo="READ_CHAMADO")) == 2
        assert len(repo.listar(inicio=base + timedelta(minutes=30), fim=base + timedelta(days=1))) == 1

    def test_registros_sao_apenas_inseridos(self, repo):
        log = LogEntity.criar("CREATE_CHAMADO", AtorTipo.USUARIO, "x")
        repo.registrar(log)

        with pytest.raises(IntegrityError):
            repo.registrar(log)

    def test_delete_anteriores(self, repo):
        agora = datetime(2025, 6, 1, tzinfo=timezone.utc)
        self.registrar(repo, "CREATE_CHAMADO", agora - timedelta(days=100))
        self.registrar(repo, "READ_CHAMADO", agora - timedelta(days=1))

        assert repo.delete_anteriores(agora - timedelta(days=90)) == 1
        assert LogModel.objects.count() == 1


# =============================================================================
# Contador de protocolos
# =============================================================================

@pytest.mark.django_db
class TestDjangoContadorProtocoloStore:

    @pytest.fixture
    def store(self):
        return DjangoContadorProtocoloStore(max_tentativas=3, espera_base=0)

    def test_gera_sequencial_persistido(self, store):
        gerador = GeradorProtocolo(store)

        assert gerador.gerar(2025) == "CH-2025-0001"
        assert gerador.gerar(2025) == "CH-2025-0002"
        assert ContadorProtocoloModel.objects.get(chave="2025").valor == 2

    def test_migra_contador_legado(self, store):
        ContadorProtocoloModel.objects.create(chave=CHAVE_CONTADOR_LEGADO, valor=41)

        assert GeradorProtocolo(store).gerar(2025) == "CH-2025-0042"
        assert ContadorProtocoloModel.objects.get(chave="2025").valor == 42
        assert ContadorProtocoloModel.objects.get(chave=CHAVE_CONTADOR_LEGADO).valor == 42

    def test_conflito_repetido_aborta_sem_alterar(self, store):
        ContadorProtocoloModel.objects.create(chave="2025", valor=5)
        chamadas = []

        def conflito(transacao):
            chamadas.append(1)
            _, valor = transacao.ler("2025")
            transacao.gravar("2025", valor + 1)
            raise IntegrityError("conflito simulado")

        with pytest.raises(TransactionAbortedError) as exc:
            store.executar_transacao(conflito)

        assert len(chamadas) == 3
        assert exc.value.tentativas == 3
        assert ContadorProtocoloModel.objects.get(chave="2025").valor == 5

    def test_conflito_transitorio_e_repetido(self, store):
        tentativas = []

        def instavel(transacao):
            tentativas.append(1)
            if len(tentativas) == 1:
                raise OperationalError("database is locked")
            transacao.gravar("2025", 1)
            return 1

        assert store.executar_transacao(instavel) == 1
        assert len(tentativas) == 2

    def test_indisponivel(self, store):
        with patch.object(
            connections['default'], 'ensure_connection', side_effect=OperationalError("down")
        ):
            with pytest.raises(StoreUnavailableError):
                GeradorProtocolo(store).gerar(2025)

        assert not ContadorProtocoloModel.objects.exists()

    def test_max_tentativas_invalido(self):
        with pytest.raises(ValueError):
            DjangoContadorProtocoloStore(max_tentativas=0)


@pytest.mark.integration
@pytest.mark.django_db(transaction=True)
def test_alocacao_concorrente_no_postgres():
    """Threads com conexões próprias disputando o mesmo contador."""
    from concurrent.futures import ThreadPoolExecutor
    from django.db import connection

    if connection.vendor != 'postgresql':
        pytest.skip("requer PostgreSQL")

    gerador = GeradorProtocolo(DjangoContadorProtocoloStore())

    def alocar(_):
        try:
            return gerador.gerar(2025)
        finally:
            connections.close_all()

    with ThreadPoolExecutor(max_workers=8) as executor:
        protocolos = list(executor.map(alocar, range(40)))

    assert len(set(protocolos)) == 40
    assert ContadorProtocoloModel.objects.get(chave="2025").valor == 40


# =============================================================================
# Unit of Work
# =============================================================================

@pytest.mark.django_db
class TestDjangoUnitOfWork:

    def evento(self, chamado):
        return ChamadoAbertoEvent(aggregate_id=chamado.id, protocolo=chamado.protocolo)

    def test_commit_persiste_e_publica(self, sample_chamado_entity):
        publisher = InMemoryEventPublisher()
        uow = DjangoUnitOfWork(event_publisher=publisher)

        with uow:
            DjangoChamadoRepository().save(sample_chamado_entity)
            uow.publish_event(self.evento(sample_chamado_entity))

        assert uow.is_committed
        assert ChamadoModel.objects.count() == 1
        assert [e.event_type for e in publisher.published_events] == ["ChamadoAbertoEvent"]

    def test_rollback_desfaz_e_descarta_eventos(self, sample_chamado_entity):
        publisher = InMemoryEventPublisher()
        uow = DjangoUnitOfWork(event_publisher=publisher)

        with pytest.raises(RuntimeError):
            with uow:
                DjangoChamadoRepository().save(sample_chamado_entity)
                uow.publish_event(self.evento(sample_chamado_entity))
                raise RuntimeError("falha no meio")

        assert uow.is_rolled_back
        assert ChamadoModel.objects.count() == 0
        assert publisher.published_events == []

    def test_instancia_reutilizavel(self, sample_chamado_entity):
        uow = DjangoUnitOfWork()

        with uow:
            DjangoChamadoRepository().save(sample_chamado_entity)
        with uow:
            DjangoLogRepository().registrar(LogEntity.criar("CREATE_CHAMADO", AtorTipo.USUARIO, "x"))

        assert uow.is_committed
        assert LogModel.objects.count() == 1

    def test_falha_do_publisher_nao_desfaz_commit(self, sample_chamado_entity):
        publisher = InMemoryEventPublisher()
        uow = DjangoUnitOfWork(event_publisher=publisher)

        with patch.object(publisher, 'publish', side_effect=RuntimeError("broker fora")):
            with uow:
                DjangoChamadoRepository().save(sample_chamado_entity)
                uow.publish_event(self.evento(sample_chamado_entity))

        assert ChamadoModel.objects.count() == 1
