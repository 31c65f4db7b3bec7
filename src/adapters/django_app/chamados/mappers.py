"""
Mappers para conversão entre Entities (Core) e Models (Django).

Responsabilidades:
- ChamadoEntity ↔ ChamadoModel
- ComentarioEntity ↔ ComentarioModel
- LogEntity ↔ LogModel

Mappers são stateless e não contêm lógica de negócio.
"""

from typing import Any, Dict, Iterable, List

from src.core.chamados.entities import (
    AnexoChamado,
    AtorTipo,
    ChamadoEntity,
    ChamadoStatus,
    ComentarioEntity,
    LogEntity,
)

from .models import ChamadoModel, ComentarioModel, LogModel


class ChamadoMapper:
    """
    Mapper para conversão entre ChamadoEntity e ChamadoModel.
    """

    @staticmethod
    def to_model_data(entity: ChamadoEntity) -> Dict[str, Any]:
        """
        Campos do model (exceto id) para update_or_create.
        """
        anexo = entity.anexo
        return {
            'protocolo': entity.protocolo,
            'nome': entity.nome,
            'telefone': entity.telefone,
            'categoria': entity.categoria,
            'assunto': entity.assunto,
            'urgencia': entity.urgencia,
            'descricao': entity.descricao,
            'status': entity.status.value,
            'criado_em': entity.criado_em,
            'atualizado_em': entity.atualizado_em,
            'anexo_nome': anexo.nome if anexo else None,
            'anexo_tipo': anexo.tipo if anexo else '',
            'anexo_dados': anexo.dados if anexo else '',
            'anexo_tamanho': anexo.tamanho if anexo else 0,
        }

    @staticmethod
    def to_model(entity: ChamadoEntity) -> ChamadoModel:
        """
        Converte ChamadoEntity para ChamadoModel (não salva).
        """
        return ChamadoModel(id=entity.id, **ChamadoMapper.to_model_data(entity))

    @staticmethod
    def to_entity(model: ChamadoModel) -> ChamadoEntity:
        """
        Converte ChamadoModel para ChamadoEntity.

        Note:
            Bypassa validações do factory method .abrir()
            pois dados já foram validados na criação original
        """
        anexo = None
        if model.anexo_nome:
            anexo = AnexoChamado(
                nome=model.anexo_nome,
                tipo=model.anexo_tipo,
                dados=model.anexo_dados,
                tamanho=model.anexo_tamanho,
            )

        return ChamadoEntity(
            id=model.id,
            protocolo=model.protocolo,
            nome=model.nome,
            telefone=model.telefone,
            categoria=model.categoria,
            assunto=model.assunto,
            urgencia=model.urgencia,
            descricao=model.descricao,
            status=ChamadoStatus(model.status),
            criado_em=model.criado_em,
            atualizado_em=model.atualizado_em,
            anexo=anexo,
        )

    @staticmethod
    def to_entity_list(models: Iterable[ChamadoModel]) -> List[ChamadoEntity]:
        return [ChamadoMapper.to_entity(model) for model in models]


class ComentarioMapper:

    @staticmethod
    def to_model(entity: ComentarioEntity) -> ComentarioModel:
        return ComentarioModel(
            id=entity.id,
            chamado_id=entity.chamado_id,
            autor_tipo=entity.autor_tipo.value,
            autor_nome=entity.autor_nome,
            texto=entity.texto,
            criado_em=entity.criado_em,
        )

    @staticmethod
    def to_entity(model: ComentarioModel) -> ComentarioEntity:
        return ComentarioEntity(
            id=model.id,
            chamado_id=model.chamado_id,
            autor_tipo=AtorTipo(model.autor_tipo),
            autor_nome=model.autor_nome,
            texto=model.texto,
            criado_em=model.criado_em,
        )


class LogMapper:

    @staticmethod
    def to_model(entity: LogEntity) -> LogModel:
        return LogModel(
            id=entity.id,
            tipo=entity.tipo,
            chamado_id=entity.chamado_id,
            ator_tipo=entity.ator_tipo.value,
            detalhes=entity.detalhes,
            criado_em=entity.criado_em,
        )

    @staticmethod
    def to_entity(model: LogModel) -> LogEntity:
        return LogEntity(
            id=model.id,
            tipo=model.tipo,
            chamado_id=model.chamado_id,
            ator_tipo=AtorTipo(model.ator_tipo),
            detalhes=model.detalhes,
            criado_em=model.criado_em,
        )
