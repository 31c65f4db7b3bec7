"""
Domínio de Chamados - Central de Atendimento.

Este módulo contém toda a lógica de negócio relacionada a chamados
de suporte, incluindo:
- Entidades (ChamadoEntity, ComentarioEntity, LogEntity)
- Motor de Horário Comercial (tempo útil de abertura)
- Gerador Sequencial de Protocolos (CH-AAAA-NNNN)
- Use Cases (AbrirChamado, CancelarChamado, ListarChamados, ...)
- Domain Events (ChamadoAberto, ChamadoCancelado, ...)
- Ports (Interfaces para repositórios e contador)
"""

from .entities import (
    ChamadoEntity,
    ChamadoStatus,
    ComentarioEntity,
    LogEntity,
    AnexoChamado,
    AtorTipo,
    TipoLog,
)
from .events import (
    ChamadoAbertoEvent,
    ChamadoCanceladoEvent,
    ChamadoAtualizadoEvent,
    ChamadoExcluidoEvent,
    ComentarioAdicionadoEvent,
)
from .horario_comercial import (
    HorarioComercial,
    HORARIO_PADRAO,
    calcular_tempo_abertura,
)
from .protocolo import GeradorProtocolo, formatar_protocolo
from .ports import (
    ChamadoRepository,
    ComentarioRepository,
    LogRepository,
    ContadorProtocoloStore,
    TransacaoContador,
)
from .use_cases import (
    AbrirChamadoService,
    BuscarChamadoPorProtocoloService,
    BuscarChamadosPorNomeService,
    CancelarChamadoService,
    AdicionarComentarioService,
    ListarComentariosService,
    ListarChamadosService,
    ObterChamadoService,
    AtualizarChamadoService,
    ExcluirChamadoService,
    ListarLogsService,
    ResumoChamadosService,
    VerificarChamadosEmEsperaService,
    LimparLogsAntigosService,
)

__all__ = [
    # Entities
    "ChamadoEntity",
    "ChamadoStatus",
    "ComentarioEntity",
    "LogEntity",
    "AnexoChamado",
    "AtorTipo",
    "TipoLog",
    # Events
    "ChamadoAbertoEvent",
    "ChamadoCanceladoEvent",
    "ChamadoAtualizadoEvent",
    "ChamadoExcluidoEvent",
    "ComentarioAdicionadoEvent",
    # Engines
    "HorarioComercial",
    "HORARIO_PADRAO",
    "calcular_tempo_abertura",
    "GeradorProtocolo",
    "formatar_protocolo",
    # Ports
    "ChamadoRepository",
    "ComentarioRepository",
    "LogRepository",
    "ContadorProtocoloStore",
    "TransacaoContador",
    # Use Cases
    "AbrirChamadoService",
    "BuscarChamadoPorProtocoloService",
    "BuscarChamadosPorNomeService",
    "CancelarChamadoService",
    "AdicionarComentarioService",
    "ListarComentariosService",
    "ListarChamadosService",
    "ObterChamadoService",
    "AtualizarChamadoService",
    "ExcluirChamadoService",
    "ListarLogsService",
    "ResumoChamadosService",
    "VerificarChamadosEmEsperaService",
    "LimparLogsAntigosService",
]
