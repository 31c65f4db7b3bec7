"""
Dependency Injection Container.

Configura e gerencia todas as dependências da aplicação.
Usa dependency-injector para lazy-loading e injeção automática.

Padrões:
- Singleton: Uma instância para toda app (repositórios, store, gerador)
- Factory: Nova instância por chamada (services, UoW)

Adapters Django são importados sob demanda: os models só podem ser
carregados depois que o Django inicializa os apps.
"""

from importlib import import_module
from typing import Optional

from dependency_injector import containers, providers
from django.conf import settings

from src.core.chamados import use_cases
from src.core.chamados.horario_comercial import HorarioComercial
from src.core.chamados.protocolo import GeradorProtocolo


def _adapter(module_path: str, class_name: str, **kwargs):
    """Instancia adapter com import tardio."""
    return getattr(import_module(module_path), class_name)(**kwargs)


def _setting(name: str, default=None):
    return getattr(settings, name, default)


def _horario_comercial() -> HorarioComercial:
    return HorarioComercial(
        hora_inicio=_setting('HORARIO_COMERCIAL_INICIO', 9),
        hora_fim=_setting('HORARIO_COMERCIAL_FIM', 18),
        fuso=_setting('HORARIO_COMERCIAL_FUSO', 'America/Sao_Paulo'),
    )


def _event_publisher():
    from src.adapters.django_app.events.publishers import get_event_publisher
    return get_event_publisher(_setting('EVENT_PUBLISHER_MODE', 'sync'))


CHAMADOS_REPOSITORIES = 'src.adapters.django_app.chamados.repositories'
UNIT_OF_WORK = 'src.adapters.django_app.shared.unit_of_work'


class Container(containers.DeclarativeContainer):
    """
    Container principal de Dependency Injection.

    Organização:
    - Domain config: Expediente e gerador de protocolos
    - Infrastructure: Publisher de eventos e store de contadores
    - Repositories: Persistência
    - Unit of Work: Transações
    - Services: Use Cases

    Example:
        container = get_container()
        service = container.abrir_chamado_service()
        output = service.execute(input_dto)
    """

    # =========================================================================
    # Domain config
    # =========================================================================

    horario_comercial = providers.Singleton(_horario_comercial)

    # =========================================================================
    # Infrastructure
    # =========================================================================

    event_publisher = providers.Singleton(_event_publisher)

    contador_protocolo_store = providers.Singleton(
        _adapter,
        CHAMADOS_REPOSITORIES,
        'DjangoContadorProtocoloStore',
        max_tentativas=providers.Callable(_setting, 'PROTOCOLO_MAX_TENTATIVAS', 5),
    )

    gerador_protocolo = providers.Singleton(
        GeradorProtocolo,
        store=contador_protocolo_store,
    )

    # =========================================================================
    # Repositories (Singleton - uma instância por app)
    # =========================================================================

    chamado_repository = providers.Singleton(
        _adapter, CHAMADOS_REPOSITORIES, 'DjangoChamadoRepository'
    )

    comentario_repository = providers.Singleton(
        _adapter, CHAMADOS_REPOSITORIES, 'DjangoComentarioRepository'
    )

    log_repository = providers.Singleton(
        _adapter, CHAMADOS_REPOSITORIES, 'DjangoLogRepository'
    )

    # =========================================================================
    # Unit of Work (Factory - nova instância por operação)
    # =========================================================================

    unit_of_work = providers.Factory(
        _adapter,
        UNIT_OF_WORK,
        'DjangoUnitOfWork',
        event_publisher=event_publisher,
    )

    # =========================================================================
    # Services / Use Cases (Factory - nova instância por chamada)
    # =========================================================================

    abrir_chamado_service = providers.Factory(
        use_cases.AbrirChamadoService,
        chamado_repo=chamado_repository,
        log_repo=log_repository,
        gerador_protocolo=gerador_protocolo,
        uow=unit_of_work,
        horario=horario_comercial,
    )

    buscar_chamado_por_protocolo_service = providers.Factory(
        use_cases.BuscarChamadoPorProtocoloService,
        chamado_repo=chamado_repository,
        comentario_repo=comentario_repository,
        log_repo=log_repository,
        horario=horario_comercial,
    )

    buscar_chamados_por_nome_service = providers.Factory(
        use_cases.BuscarChamadosPorNomeService,
        chamado_repo=chamado_repository,
        horario=horario_comercial,
    )

    cancelar_chamado_service = providers.Factory(
        use_cases.CancelarChamadoService,
        chamado_repo=chamado_repository,
        log_repo=log_repository,
        uow=unit_of_work,
        horario=horario_comercial,
    )

    adicionar_comentario_service = providers.Factory(
        use_cases.AdicionarComentarioService,
        chamado_repo=chamado_repository,
        comentario_repo=comentario_repository,
        log_repo=log_repository,
        uow=unit_of_work,
    )

    listar_comentarios_service = providers.Factory(
        use_cases.ListarComentariosService,
        chamado_repo=chamado_repository,
        comentario_repo=comentario_repository,
    )

    listar_chamados_service = providers.Factory(
        use_cases.ListarChamadosService,
        chamado_repo=chamado_repository,
        horario=horario_comercial,
    )

    obter_chamado_service = providers.Factory(
        use_cases.ObterChamadoService,
        chamado_repo=chamado_repository,
        comentario_repo=comentario_repository,
        horario=horario_comercial,
    )

    atualizar_chamado_service = providers.Factory(
        use_cases.AtualizarChamadoService,
        chamado_repo=chamado_repository,
        log_repo=log_repository,
        uow=unit_of_work,
        horario=horario_comercial,
    )

    excluir_chamado_service = providers.Factory(
        use_cases.ExcluirChamadoService,
        chamado_repo=chamado_repository,
        comentario_repo=comentario_repository,
        log_repo=log_repository,
        uow=unit_of_work,
    )

    listar_logs_service = providers.Factory(
        use_cases.ListarLogsService,
        log_repo=log_repository,
        horario=horario_comercial,
    )

    resumo_chamados_service = providers.Factory(
        use_cases.ResumoChamadosService,
        chamado_repo=chamado_repository,
        log_repo=log_repository,
        horario=horario_comercial,
    )

    verificar_chamados_em_espera_service = providers.Factory(
        use_cases.VerificarChamadosEmEsperaService,
        chamado_repo=chamado_repository,
        horario=horario_comercial,
        dias_limite=providers.Callable(_setting, 'CHAMADOS_ESPERA_DIAS_ALERTA', 2),
    )

    limpar_logs_antigos_service = providers.Factory(
        use_cases.LimparLogsAntigosService,
        log_repo=log_repository,
        retencao_dias=providers.Callable(_setting, 'LOGS_RETENCAO_DIAS', 90),
    )


# =============================================================================
# Container Global (Singleton)
# =============================================================================

_container: Optional[Container] = None


def get_container() -> Container:
    """
    Retorna instância global do container.

    Cria se não existir (lazy initialization).
    """
    global _container

    if _container is None:
        _container = Container()

    return _container


def reset_container() -> None:
    """Reset do container (para testes)."""
    global _container
    _container = None


# =============================================================================
# Testing Container
# =============================================================================

class TestingContainer(containers.DeclarativeContainer):
    """
    Infraestrutura e repositórios InMemory para testes sem banco.

    Não declara services: é aplicado sobre um Container com
    `container.override(TestingContainer())`, e os services do
    Container passam a receber estes providers pelo nome.
    """

    horario_comercial = providers.Singleton(HorarioComercial)

    event_publisher = providers.Singleton(
        _adapter, 'src.adapters.django_app.events.publishers', 'InMemoryEventPublisher'
    )

    contador_protocolo_store = providers.Singleton(
        _adapter, 'src.core.chamados.ports', 'InMemoryContadorProtocoloStore'
    )

    gerador_protocolo = providers.Singleton(
        GeradorProtocolo,
        store=contador_protocolo_store,
    )

    chamado_repository = providers.Singleton(
        _adapter, 'src.core.chamados.ports', 'InMemoryChamadoRepository'
    )

    comentario_repository = providers.Singleton(
        _adapter, 'src.core.chamados.ports', 'InMemoryComentarioRepository'
    )

    log_repository = providers.Singleton(
        _adapter, 'src.core.chamados.ports', 'InMemoryLogRepository'
    )

    unit_of_work = providers.Factory(
        _adapter,
        UNIT_OF_WORK,
        'InMemoryUnitOfWork',
        event_publisher=event_publisher,
    )


def create_testing_container() -> Container:
    """
    Container completo com adapters InMemory.

    Example:
        container = create_testing_container()
        output = container.abrir_chamado_service().execute(input_dto)
        container.contador_protocolo_store().valor("2025")
    """
    container = Container()
    container.override(TestingContainer())
    return container
