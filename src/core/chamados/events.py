"""
Domain Events do Domínio de Chamados.

Eventos:
- ChamadoAbertoEvent: Novo chamado foi aberto
- ChamadoCanceladoEvent: Usuário cancelou o chamado
- ChamadoAtualizadoEvent: Administrador editou o chamado
- ChamadoExcluidoEvent: Administrador excluiu o chamado
- ComentarioAdicionadoEvent: Comentário foi adicionado

Uso:
    Eventos são criados nos use cases e publicados através do
    UnitOfWork após commit bem-sucedido.

    with uow:
        chamado = ChamadoEntity.abrir(...)
        repo.save(chamado)
        uow.publish_event(ChamadoAbertoEvent(aggregate_id=chamado.id, ...))
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from src.core.shared.events import DomainEvent


@dataclass
class ChamadoAbertoEvent(DomainEvent):
    """
    Evento: Chamado foi aberto.

    Handlers típicos:
    - Notificar equipe de atendimento
    - Registrar em analytics

    Attributes:
        protocolo: Protocolo alocado
        nome: Nome do solicitante
        categoria: Categoria do chamado
        urgencia: Urgência informada
    """

    protocolo: str = ""
    nome: str = ""
    categoria: str = ""
    urgencia: str = ""

    @property
    def aggregate_type(self) -> str:
        return "Chamado"


@dataclass
class ChamadoCanceladoEvent(DomainEvent):
    """
    Evento: Chamado foi cancelado pelo solicitante.

    Attributes:
        protocolo: Protocolo do chamado
        status_anterior: Status antes do cancelamento
    """

    protocolo: str = ""
    status_anterior: str = ""

    @property
    def aggregate_type(self) -> str:
        return "Chamado"


@dataclass
class ChamadoAtualizadoEvent(DomainEvent):
    """
    Evento: Chamado foi editado pelo administrador.

    Attributes:
        protocolo: Protocolo do chamado
        status_anterior: Status antes da edição
        novo_status: Status após a edição
    """

    protocolo: str = ""
    status_anterior: str = ""
    novo_status: str = ""

    @property
    def aggregate_type(self) -> str:
        return "Chamado"

    @property
    def status_alterado(self) -> bool:
        return self.status_anterior != self.novo_status


@dataclass
class ChamadoExcluidoEvent(DomainEvent):
    """Evento: Chamado foi excluído junto com seus comentários."""

    protocolo: str = ""
    comentarios_removidos: int = 0

    @property
    def aggregate_type(self) -> str:
        return "Chamado"


@dataclass
class ComentarioAdicionadoEvent(DomainEvent):
    """
    Evento: Comentário adicionado ao chamado.

    Handlers típicos:
    - Avisar o solicitante quando o atendimento responde
    - Avisar o atendimento quando o solicitante responde
    """

    protocolo: str = ""
    comentario_id: str = ""
    autor_tipo: str = ""
    autor_nome: Optional[str] = None

    @property
    def aggregate_type(self) -> str:
        return "Chamado"

    def _get_event_data(self) -> Dict[str, Any]:
        data = {
            "protocolo": self.protocolo,
            "comentario_id": self.comentario_id,
            "autor_tipo": self.autor_tipo,
        }
        if self.autor_nome:
            data["autor_nome"] = self.autor_nome
        return data
