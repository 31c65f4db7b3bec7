"""
Data Transfer Objects (DTOs) do Domínio de Chamados.

DTOs são estruturas simples para transportar dados entre camadas,
evitando vazamento das entidades para a API.

Tipos de DTOs:
- Input DTOs: Dados de entrada (da API)
- Output DTOs: Dados de resposta, já com o tempo de abertura calculado
- Query DTOs: Filtros de listagem
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional

from .entities import (
    ChamadoEntity,
    ChamadoStatus,
    ComentarioEntity,
    LogEntity,
)
from .horario_comercial import HORARIO_PADRAO, HorarioComercial

FILTRO_TODOS = "TODOS"


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class AbrirChamadoInputDTO:
    """
    DTO de entrada para abrir chamado.

    Attributes:
        nome: Nome do solicitante
        categoria: Categoria do chamado
        assunto: Assunto resumido
        urgencia: Urgência informada
        descricao: Descrição detalhada
        telefone: Telefone de contato (opcional)
        anexo_nome: Nome do arquivo anexado (opcional)
        anexo_tipo: MIME type do anexo
        anexo_dados: Conteúdo do anexo como data URL base64
        anexo_tamanho: Tamanho original do anexo em bytes
    """

    nome: str
    categoria: str
    assunto: str
    urgencia: str
    descricao: str
    telefone: Optional[str] = None
    anexo_nome: Optional[str] = None
    anexo_tipo: str = ""
    anexo_dados: str = ""
    anexo_tamanho: int = 0

    @property
    def tem_anexo(self) -> bool:
        return bool(self.anexo_nome)

    def to_dict(self) -> dict:
        return {
            "nome": self.nome,
            "categoria": self.categoria,
            "assunto": self.assunto,
            "urgencia": self.urgencia,
            "descricao": self.descricao,
            "telefone": self.telefone,
            "anexo_nome": self.anexo_nome,
            "anexo_tamanho": self.anexo_tamanho,
        }


@dataclass(frozen=True)
class CancelarChamadoInputDTO:
    chamado_id: str


@dataclass(frozen=True)
class AdicionarComentarioInputDTO:
    """
    DTO de entrada para comentar em um chamado.

    Attributes:
        chamado_id: ID do chamado
        texto: Conteúdo do comentário
        autor_tipo: "USUARIO" ou "ADM"
        autor_nome: Nome exibido do autor
    """

    chamado_id: str
    texto: str
    autor_tipo: str = "USUARIO"
    autor_nome: str = ""


@dataclass(frozen=True)
class AtualizarChamadoInputDTO:
    """
    DTO de entrada para edição administrativa.

    Campos None não são alterados.
    """

    chamado_id: str
    status: Optional[str] = None
    nome: Optional[str] = None
    telefone: Optional[str] = None
    assunto: Optional[str] = None
    descricao: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "chamado_id": self.chamado_id,
            "status": self.status,
            "nome": self.nome,
            "telefone": self.telefone,
            "assunto": self.assunto,
            "descricao": self.descricao,
        }


# =============================================================================
# QUERY DTOs (Filtros de Busca)
# =============================================================================

@dataclass(frozen=True)
class ListarChamadosQueryDTO:
    """
    Filtros da listagem administrativa.

    Attributes:
        status: Valor ou nome do status; "TODOS" não filtra
        texto: Trecho de nome ou assunto
        data_inicio: Primeiro dia do período (desde 00:00:00)
        data_fim: Último dia do período (até 23:59:59)
    """

    status: str = FILTRO_TODOS
    texto: Optional[str] = None
    data_inicio: Optional[date] = None
    data_fim: Optional[date] = None

    @property
    def filtra_status(self) -> bool:
        return bool(self.status) and self.status.strip().upper() != FILTRO_TODOS

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "texto": self.texto,
            "data_inicio": self.data_inicio.isoformat() if self.data_inicio else None,
            "data_fim": self.data_fim.isoformat() if self.data_fim else None,
        }


@dataclass(frozen=True)
class ListarLogsQueryDTO:
    data_inicio: Optional[date] = None
    data_fim: Optional[date] = None
    tipo: Optional[str] = None


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class ComentarioOutputDTO:
    id: str
    chamado_id: str
    autor_tipo: str
    autor_nome: str
    texto: str
    criado_em: datetime

    @classmethod
    def from_entity(cls, entity: ComentarioEntity) -> "ComentarioOutputDTO":
        return cls(
            id=entity.id,
            chamado_id=entity.chamado_id,
            autor_tipo=entity.autor_tipo.value,
            autor_nome=entity.autor_nome,
            texto=entity.texto,
            criado_em=entity.criado_em,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "chamado_id": self.chamado_id,
            "autor_tipo": self.autor_tipo,
            "autor_nome": self.autor_nome,
            "texto": self.texto,
            "criado_em": self.criado_em.isoformat(),
        }


@dataclass
class ChamadoOutputDTO:
    """
    DTO de saída completo com dados do chamado.

    Attributes:
        id: Identificador único
        protocolo: Protocolo legível
        nome: Nome do solicitante
        telefone: Telefone de contato
        categoria: Categoria
        assunto: Assunto
        urgencia: Urgência
        descricao: Descrição
        status: Status atual (valor do enum, ex: "Em Espera")
        criado_em: Data/hora de abertura
        atualizado_em: Data/hora da última atualização
        tempo_abertura: Idade em tempo útil (ex: "Aberto há 2h 5min")
        anexo: Dados do anexo (se houver)
        comentarios: Comentários em ordem cronológica
    """

    id: str
    protocolo: str
    nome: str
    telefone: Optional[str]
    categoria: str
    assunto: str
    urgencia: str
    descricao: str
    status: str
    criado_em: datetime
    atualizado_em: datetime
    tempo_abertura: str
    anexo: Optional[Dict[str, object]] = None
    comentarios: List[ComentarioOutputDTO] = field(default_factory=list)

    @classmethod
    def from_entity(
        cls,
        entity: ChamadoEntity,
        comentarios: Optional[List[ComentarioEntity]] = None,
        agora: Optional[datetime] = None,
        horario: HorarioComercial = HORARIO_PADRAO,
    ) -> "ChamadoOutputDTO":
        """
        Converte entidade em DTO.

        Args:
            entity: Entidade ChamadoEntity
            comentarios: Comentários do chamado (opcional)
            agora: Instante de referência do tempo de abertura
            horario: Janela de expediente

        Returns:
            DTO com tempo de abertura calculado no momento da leitura
        """
        anexo = None
        if entity.anexo is not None:
            anexo = {
                "nome": entity.anexo.nome,
                "tipo": entity.anexo.tipo,
                "dados": entity.anexo.dados,
                "tamanho": entity.anexo.tamanho,
            }

        return cls(
            id=entity.id,
            protocolo=entity.protocolo,
            nome=entity.nome,
            telefone=entity.telefone,
            categoria=entity.categoria,
            assunto=entity.assunto,
            urgencia=entity.urgencia,
            descricao=entity.descricao,
            status=entity.status.value,
            criado_em=entity.criado_em,
            atualizado_em=entity.atualizado_em,
            tempo_abertura=entity.tempo_abertura(agora=agora, horario=horario),
            anexo=anexo,
            comentarios=[
                ComentarioOutputDTO.from_entity(c) for c in (comentarios or [])
            ],
        )

    def to_dict(self) -> dict:
        """Converte para dicionário (serialização JSON)."""
        return {
            "id": self.id,
            "protocolo": self.protocolo,
            "nome": self.nome,
            "telefone": self.telefone,
            "categoria": self.categoria,
            "assunto": self.assunto,
            "urgencia": self.urgencia,
            "descricao": self.descricao,
            "status": self.status,
            "criado_em": self.criado_em.isoformat(),
            "atualizado_em": self.atualizado_em.isoformat(),
            "tempo_abertura": self.tempo_abertura,
            "anexo": self.anexo,
            "comentarios": [c.to_dict() for c in self.comentarios],
        }


@dataclass
class ChamadoListItemDTO:
    """
    DTO otimizado para listagens de chamados.

    Contém apenas campos necessários para exibição em lista.
    """

    id: str
    protocolo: str
    nome: str
    assunto: str
    categoria: str
    urgencia: str
    status: str
    criado_em: datetime
    tempo_abertura: str
    tem_anexo: bool = False

    @classmethod
    def from_entity(
        cls,
        entity: ChamadoEntity,
        agora: Optional[datetime] = None,
        horario: HorarioComercial = HORARIO_PADRAO,
    ) -> "ChamadoListItemDTO":
        return cls(
            id=entity.id,
            protocolo=entity.protocolo,
            nome=entity.nome,
            assunto=entity.assunto,
            categoria=entity.categoria,
            urgencia=entity.urgencia,
            status=entity.status.value,
            criado_em=entity.criado_em,
            tempo_abertura=entity.tempo_abertura(agora=agora, horario=horario),
            tem_anexo=entity.anexo is not None,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "protocolo": self.protocolo,
            "nome": self.nome,
            "assunto": self.assunto,
            "categoria": self.categoria,
            "urgencia": self.urgencia,
            "status": self.status,
            "criado_em": self.criado_em.isoformat(),
            "tempo_abertura": self.tempo_abertura,
            "tem_anexo": self.tem_anexo,
        }


@dataclass
class LogOutputDTO:
    id: str
    tipo: str
    chamado_id: Optional[str]
    ator_tipo: str
    detalhes: str
    criado_em: datetime

    @classmethod
    def from_entity(cls, entity: LogEntity) -> "LogOutputDTO":
        return cls(
            id=entity.id,
            tipo=entity.tipo,
            chamado_id=entity.chamado_id,
            ator_tipo=entity.ator_tipo.value,
            detalhes=entity.detalhes,
            criado_em=entity.criado_em,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tipo": self.tipo,
            "chamado_id": self.chamado_id,
            "ator_tipo": self.ator_tipo,
            "detalhes": self.detalhes,
            "criado_em": self.criado_em.isoformat(),
        }


@dataclass
class ResumoChamadosDTO:
    """
    Resumo para relatório: total e contagem por status.

    Todos os status aparecem em `por_status`, mesmo com contagem zero.
    """

    total: int
    por_status: Dict[str, int]

    @classmethod
    def from_entities(cls, chamados: List[ChamadoEntity]) -> "ResumoChamadosDTO":
        por_status = {status.value: 0 for status in ChamadoStatus}
        for chamado in chamados:
            por_status[chamado.status.value] += 1
        return cls(total=len(chamados), por_status=por_status)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "por_status": dict(self.por_status),
        }
