"""
Use Cases (Application Services) do Domínio de Chamados.

Este módulo contém os casos de uso da aplicação, que orquestram
a lógica de negócio coordenando entidades, repositórios, o gerador
de protocolos, o registro de auditoria e eventos.

Use Cases do usuário:
- AbrirChamadoService: Abre novo chamado com protocolo
- BuscarChamadoPorProtocoloService: Consulta pelo protocolo
- BuscarChamadosPorNomeService: Consulta por trecho do nome
- CancelarChamadoService: Cancela chamado ainda não encerrado
- AdicionarComentarioService / ListarComentariosService

Use Cases do administrador:
- ListarChamadosService: Listagem com filtros
- ObterChamadoService: Detalhe de um chamado
- AtualizarChamadoService: Edição administrativa
- ExcluirChamadoService: Exclusão com comentários
- ListarLogsService: Consulta de auditoria
- ResumoChamadosService: Resumo para relatório

Rotinas agendadas:
- VerificarChamadosEmEsperaService
- LimparLogsAntigosService

Toda operação que altera dados registra uma entrada de auditoria na
mesma transação. Falhas registram a variante ERROR_* fora da
transação desfeita, sem mascarar o erro original.
"""

from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple
import logging

from src.core.shared.interfaces import UnitOfWork
from src.core.shared.exceptions import (
    EntityNotFoundError,
    ValidationError,
)

from .ports import (
    ChamadoRepository,
    ComentarioRepository,
    LogRepository,
)
from .entities import (
    AnexoChamado,
    AtorTipo,
    ChamadoEntity,
    ChamadoStatus,
    ComentarioEntity,
    LogEntity,
    TipoLog,
    agora_utc,
)
from .dtos import (
    AbrirChamadoInputDTO,
    AdicionarComentarioInputDTO,
    AtualizarChamadoInputDTO,
    CancelarChamadoInputDTO,
    ChamadoListItemDTO,
    ChamadoOutputDTO,
    ComentarioOutputDTO,
    ListarChamadosQueryDTO,
    ListarLogsQueryDTO,
    LogOutputDTO,
    ResumoChamadosDTO,
)
from .events import (
    ChamadoAbertoEvent,
    ChamadoAtualizadoEvent,
    ChamadoCanceladoEvent,
    ChamadoExcluidoEvent,
    ComentarioAdicionadoEvent,
)
from .horario_comercial import (
    HORARIO_PADRAO,
    HorarioComercial,
    calcular_inicio_sla,
    calcular_minutos_uteis,
)
from .protocolo import GeradorProtocolo

logger = logging.getLogger(__name__)

TAMANHO_MINIMO_BUSCA_NOME = 2


def registrar_erro(
    log_repo: LogRepository,
    tipo: TipoLog,
    ator_tipo: AtorTipo,
    erro: Exception,
    chamado_id: Optional[str] = None,
) -> None:
    """
    Registra a variante ERROR_* de uma ação que falhou.

    Uma falha ao gravar este registro é logada e descartada, para
    que o erro original continue sendo o propagado.
    """
    try:
        log_repo.registrar(
            LogEntity.criar(
                tipo=tipo.erro,
                ator_tipo=ator_tipo,
                detalhes=str(erro),
                chamado_id=chamado_id,
            )
        )
    except Exception:
        logger.exception(f"Falha ao registrar log de erro {tipo.erro}")


def periodo_do_dia(
    data_inicio: Optional[date],
    data_fim: Optional[date],
    horario: HorarioComercial = HORARIO_PADRAO,
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Converte datas de filtro em instantes no fuso local.

    data_inicio vale desde 00:00:00 e data_fim até 23:59:59.

    Raises:
        ValidationError: Se data_inicio for posterior a data_fim
    """
    if data_inicio and data_fim and data_inicio > data_fim:
        raise ValidationError(
            "Data inicial não pode ser posterior à data final",
            field="data_inicio"
        )

    inicio = None
    fim = None
    if data_inicio:
        inicio = datetime.combine(data_inicio, time.min, tzinfo=horario.tz)
    if data_fim:
        fim = datetime.combine(data_fim, time.max, tzinfo=horario.tz)
    return inicio, fim


def _obter_chamado(chamado_repo: ChamadoRepository, chamado_id: str) -> ChamadoEntity:
    chamado = chamado_repo.get_by_id(chamado_id)

    if not chamado:
        raise EntityNotFoundError(
            f"Chamado {chamado_id} não encontrado",
            entity_type="Chamado",
            entity_id=chamado_id
        )

    return chamado


def _status_do_filtro(valor: str) -> ChamadoStatus:
    try:
        return ChamadoStatus.from_string(valor)
    except ValueError:
        raise ValidationError(f"Status inválido: {valor}", field="status")


class AbrirChamadoService:
    """
    Use Case: Abrir um novo chamado.

    Fluxo:
    1. Validar dados de entrada e anexo
    2. Alocar protocolo (transação própria do contador)
    3. Criar entidade e persistir
    4. Registrar CREATE_CHAMADO
    5. Disparar evento ChamadoAberto

    A alocação termina antes da persistência do chamado. Se a
    persistência falhar, o sequencial alocado fica sem uso; uma nova
    tentativa aloca outro.

    Example:
        service = AbrirChamadoService(chamado_repo, log_repo, gerador, uow)
        output = service.execute(AbrirChamadoInputDTO(
            nome="Maria Souza",
            categoria="Sistema",
            assunto="Erro ao emitir nota",
            urgencia="Alta",
            descricao="O sistema trava ao emitir nota fiscal",
        ))
        print(output.protocolo)  # CH-2025-0001
    """

    def __init__(
        self,
        chamado_repo: ChamadoRepository,
        log_repo: LogRepository,
        gerador_protocolo: GeradorProtocolo,
        uow: UnitOfWork,
        horario: HorarioComercial = HORARIO_PADRAO,
    ):
        self.chamado_repo = chamado_repo
        self.log_repo = log_repo
        self.gerador_protocolo = gerador_protocolo
        self.uow = uow
        self.horario = horario

    def execute(self, input_dto: AbrirChamadoInputDTO) -> ChamadoOutputDTO:
        """
        Raises:
            ValidationError: Se dados inválidos
            StoreUnavailableError: Se o contador estiver inacessível
            TransactionAbortedError: Se a alocação não puder ser comitada
        """
        protocolo = None
        try:
            ChamadoEntity.validar_abertura(
                input_dto.nome,
                input_dto.categoria,
                input_dto.assunto,
                input_dto.urgencia,
                input_dto.descricao,
            )
            anexo = self._montar_anexo(input_dto)

            protocolo = self.gerador_protocolo.gerar()

            with self.uow:
                chamado = ChamadoEntity.abrir(
                    protocolo=protocolo,
                    nome=input_dto.nome,
                    categoria=input_dto.categoria,
                    assunto=input_dto.assunto,
                    urgencia=input_dto.urgencia,
                    descricao=input_dto.descricao,
                    telefone=input_dto.telefone,
                    anexo=anexo,
                )

                self.chamado_repo.save(chamado)

                self.log_repo.registrar(
                    LogEntity.criar(
                        tipo=TipoLog.CREATE_CHAMADO,
                        ator_tipo=AtorTipo.USUARIO,
                        detalhes=f"Chamado aberto: {chamado.assunto}",
                        chamado_id=chamado.protocolo,
                    )
                )

                self.uow.publish_event(
                    ChamadoAbertoEvent(
                        aggregate_id=chamado.id,
                        protocolo=chamado.protocolo,
                        nome=chamado.nome,
                        categoria=chamado.categoria,
                        urgencia=chamado.urgencia,
                    )
                )
        except Exception as e:
            registrar_erro(
                self.log_repo, TipoLog.CREATE_CHAMADO, AtorTipo.USUARIO, e, protocolo
            )
            raise

        logger.info(f"Chamado aberto: {chamado.protocolo}")
        return ChamadoOutputDTO.from_entity(chamado, horario=self.horario)

    def _montar_anexo(self, input_dto: AbrirChamadoInputDTO) -> Optional[AnexoChamado]:
        if not input_dto.tem_anexo:
            return None

        return AnexoChamado(
            nome=input_dto.anexo_nome,
            tipo=input_dto.anexo_tipo,
            dados=input_dto.anexo_dados,
            tamanho=input_dto.anexo_tamanho,
        )


class BuscarChamadoPorProtocoloService:
    """
    Use Case: Consultar chamado pelo protocolo.

    O protocolo informado é normalizado (espaços removidos, maiúsculas).
    Toda consulta é auditada: READ_CHAMADO ou READ_CHAMADO_NOT_FOUND.
    """

    def __init__(
        self,
        chamado_repo: ChamadoRepository,
        comentario_repo: ComentarioRepository,
        log_repo: LogRepository,
        horario: HorarioComercial = HORARIO_PADRAO,
    ):
        self.chamado_repo = chamado_repo
        self.comentario_repo = comentario_repo
        self.log_repo = log_repo
        self.horario = horario

    def execute(self, protocolo: str) -> ChamadoOutputDTO:
        """
        Raises:
            ValidationError: Se protocolo vazio
            EntityNotFoundError: Se nenhum chamado tem o protocolo
        """
        protocolo = (protocolo or "").strip().upper()
        if not protocolo:
            raise ValidationError("Informe o protocolo", field="protocolo")

        chamado = self.chamado_repo.get_by_protocolo(protocolo)

        if not chamado:
            self.log_repo.registrar(
                LogEntity.criar(
                    tipo=TipoLog.READ_CHAMADO_NOT_FOUND,
                    ator_tipo=AtorTipo.USUARIO,
                    detalhes=f"Protocolo não encontrado: {protocolo}",
                    chamado_id=protocolo,
                )
            )
            raise EntityNotFoundError(
                f"Chamado {protocolo} não encontrado",
                entity_type="Chamado",
                entity_id=protocolo
            )

        self.log_repo.registrar(
            LogEntity.criar(
                tipo=TipoLog.READ_CHAMADO,
                ator_tipo=AtorTipo.USUARIO,
                detalhes="Consulta por protocolo",
                chamado_id=protocolo,
            )
        )

        comentarios = self.comentario_repo.list_by_chamado(chamado.id)
        return ChamadoOutputDTO.from_entity(
            chamado, comentarios=comentarios, horario=self.horario
        )


class BuscarChamadosPorNomeService:
    """
    Use Case: Consultar chamados por trecho do nome do solicitante.

    Não usa UoW pois é operação de leitura.
    """

    def __init__(
        self,
        chamado_repo: ChamadoRepository,
        horario: HorarioComercial = HORARIO_PADRAO,
    ):
        self.chamado_repo = chamado_repo
        self.horario = horario

    def execute(self, nome: str) -> List[ChamadoListItemDTO]:
        """
        Raises:
            ValidationError: Se o termo tiver menos de 2 caracteres
        """
        termo = (nome or "").strip()
        if len(termo) < TAMANHO_MINIMO_BUSCA_NOME:
            raise ValidationError(
                f"Informe pelo menos {TAMANHO_MINIMO_BUSCA_NOME} caracteres do nome",
                field="nome"
            )

        agora = agora_utc()
        return [
            ChamadoListItemDTO.from_entity(c, agora=agora, horario=self.horario)
            for c in self.chamado_repo.list_by_nome(termo)
        ]


class CancelarChamadoService:
    """
    Use Case: Usuário cancela o próprio chamado.

    Fluxo:
    1. Buscar chamado existente
    2. Cancelar (regras na entidade)
    3. Persistir e registrar CANCEL_CHAMADO_USUARIO
    4. Disparar evento ChamadoCancelado
    """

    def __init__(
        self,
        chamado_repo: ChamadoRepository,
        log_repo: LogRepository,
        uow: UnitOfWork,
        horario: HorarioComercial = HORARIO_PADRAO,
    ):
        self.chamado_repo = chamado_repo
        self.log_repo = log_repo
        self.uow = uow
        self.horario = horario

    def execute(self, input_dto: CancelarChamadoInputDTO) -> ChamadoOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se chamado não existe
            BusinessRuleViolationError: Se já cancelado ou resolvido
        """
        protocolo = None
        try:
            with self.uow:
                chamado = _obter_chamado(self.chamado_repo, input_dto.chamado_id)
                protocolo = chamado.protocolo
                status_anterior = chamado.status.value

                chamado.cancelar()

                self.chamado_repo.save(chamado)

                self.log_repo.registrar(
                    LogEntity.criar(
                        tipo=TipoLog.CANCEL_CHAMADO_USUARIO,
                        ator_tipo=AtorTipo.USUARIO,
                        detalhes="Chamado cancelado pelo usuário",
                        chamado_id=protocolo,
                    )
                )

                self.uow.publish_event(
                    ChamadoCanceladoEvent(
                        aggregate_id=chamado.id,
                        protocolo=protocolo,
                        status_anterior=status_anterior,
                    )
                )
        except Exception as e:
            registrar_erro(
                self.log_repo, TipoLog.CANCEL_CHAMADO_USUARIO, AtorTipo.USUARIO, e, protocolo
            )
            raise

        return ChamadoOutputDTO.from_entity(chamado, horario=self.horario)


class AdicionarComentarioService:
    """
    Use Case: Adicionar comentário a um chamado.

    Usado pelo solicitante (USUARIO) e pelo atendimento (ADM).
    Chamados cancelados não recebem comentários.
    """

    def __init__(
        self,
        chamado_repo: ChamadoRepository,
        comentario_repo: ComentarioRepository,
        log_repo: LogRepository,
        uow: UnitOfWork,
    ):
        self.chamado_repo = chamado_repo
        self.comentario_repo = comentario_repo
        self.log_repo = log_repo
        self.uow = uow

    def execute(self, input_dto: AdicionarComentarioInputDTO) -> ComentarioOutputDTO:
        """
        Raises:
            ValidationError: Se texto ou autor inválidos
            EntityNotFoundError: Se chamado não existe
            BusinessRuleViolationError: Se chamado cancelado
        """
        try:
            autor_tipo = AtorTipo.from_string(input_dto.autor_tipo)
        except ValueError as e:
            raise ValidationError(str(e), field="autor_tipo")

        protocolo = None
        try:
            with self.uow:
                chamado = _obter_chamado(self.chamado_repo, input_dto.chamado_id)
                protocolo = chamado.protocolo

                chamado.verificar_pode_comentar()

                comentario = ComentarioEntity.criar(
                    chamado_id=chamado.id,
                    autor_tipo=autor_tipo,
                    texto=input_dto.texto,
                    autor_nome=input_dto.autor_nome,
                )
                self.comentario_repo.save(comentario)

                self.log_repo.registrar(
                    LogEntity.criar(
                        tipo=TipoLog.ADD_COMENTARIO,
                        ator_tipo=autor_tipo,
                        detalhes=f"Comentário adicionado por {autor_tipo.value}",
                        chamado_id=protocolo,
                    )
                )

                self.uow.publish_event(
                    ComentarioAdicionadoEvent(
                        aggregate_id=chamado.id,
                        protocolo=protocolo,
                        comentario_id=comentario.id,
                        autor_tipo=autor_tipo.value,
                        autor_nome=comentario.autor_nome or None,
                    )
                )
        except Exception as e:
            registrar_erro(self.log_repo, TipoLog.ADD_COMENTARIO, autor_tipo, e, protocolo)
            raise

        return ComentarioOutputDTO.from_entity(comentario)


class ListarComentariosService:

    def __init__(
        self,
        chamado_repo: ChamadoRepository,
        comentario_repo: ComentarioRepository,
    ):
        self.chamado_repo = chamado_repo
        self.comentario_repo = comentario_repo

    def execute(self, chamado_id: str) -> List[ComentarioOutputDTO]:
        chamado = _obter_chamado(self.chamado_repo, chamado_id)
        return [
            ComentarioOutputDTO.from_entity(c)
            for c in self.comentario_repo.list_by_chamado(chamado.id)
        ]


class ListarChamadosService:
    """
    Use Case: Listagem administrativa com filtros.

    Filtros: status ("TODOS" não filtra), texto em nome ou assunto,
    período de abertura. Mais recentes primeiro.
    """

    def __init__(
        self,
        chamado_repo: ChamadoRepository,
        horario: HorarioComercial = HORARIO_PADRAO,
    ):
        self.chamado_repo = chamado_repo
        self.horario = horario

    def execute(
        self,
        query: Optional[ListarChamadosQueryDTO] = None,
    ) -> List[ChamadoListItemDTO]:
        """
        Raises:
            ValidationError: Se status ou período inválidos
        """
        agora = agora_utc()
        return [
            ChamadoListItemDTO.from_entity(c, agora=agora, horario=self.horario)
            for c in self.buscar(query or ListarChamadosQueryDTO())
        ]

    def buscar(self, query: ListarChamadosQueryDTO) -> List[ChamadoEntity]:
        """Aplica os filtros e retorna as entidades."""
        status = _status_do_filtro(query.status) if query.filtra_status else None
        inicio, fim = periodo_do_dia(query.data_inicio, query.data_fim, self.horario)
        texto = (query.texto or "").strip() or None

        return self.chamado_repo.list_all(
            status=status,
            texto=texto,
            criado_de=inicio,
            criado_ate=fim,
        )


class ObterChamadoService:
    """
    Use Case: Obter detalhes de um chamado específico, com comentários.
    """

    def __init__(
        self,
        chamado_repo: ChamadoRepository,
        comentario_repo: ComentarioRepository,
        horario: HorarioComercial = HORARIO_PADRAO,
    ):
        self.chamado_repo = chamado_repo
        self.comentario_repo = comentario_repo
        self.horario = horario

    def execute(self, chamado_id: str) -> ChamadoOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se chamado não existe
        """
        chamado = _obter_chamado(self.chamado_repo, chamado_id)
        comentarios = self.comentario_repo.list_by_chamado(chamado.id)
        return ChamadoOutputDTO.from_entity(
            chamado, comentarios=comentarios, horario=self.horario
        )


class AtualizarChamadoService:
    """
    Use Case: Edição administrativa de um chamado.

    O administrador pode alterar status, nome, telefone, assunto e
    descrição. Registra UPDATE_CHAMADO com o novo status.
    """

    def __init__(
        self,
        chamado_repo: ChamadoRepository,
        log_repo: LogRepository,
        uow: UnitOfWork,
        horario: HorarioComercial = HORARIO_PADRAO,
    ):
        self.chamado_repo = chamado_repo
        self.log_repo = log_repo
        self.uow = uow
        self.horario = horario

    def execute(self, input_dto: AtualizarChamadoInputDTO) -> ChamadoOutputDTO:
        """
        Raises:
            ValidationError: Se status ou campos inválidos
            EntityNotFoundError: Se chamado não existe
        """
        protocolo = None
        try:
            novo_status = None
            if input_dto.status is not None:
                novo_status = _status_do_filtro(input_dto.status)

            with self.uow:
                chamado = _obter_chamado(self.chamado_repo, input_dto.chamado_id)
                protocolo = chamado.protocolo
                status_anterior = chamado.status.value

                chamado.atualizar(
                    status=novo_status,
                    nome=input_dto.nome,
                    telefone=input_dto.telefone,
                    assunto=input_dto.assunto,
                    descricao=input_dto.descricao,
                )

                self.chamado_repo.save(chamado)

                self.log_repo.registrar(
                    LogEntity.criar(
                        tipo=TipoLog.UPDATE_CHAMADO,
                        ator_tipo=AtorTipo.ADM,
                        detalhes=f"Chamado atualizado. Status: {chamado.status.value}",
                        chamado_id=protocolo,
                    )
                )

                self.uow.publish_event(
                    ChamadoAtualizadoEvent(
                        aggregate_id=chamado.id,
                        protocolo=protocolo,
                        status_anterior=status_anterior,
                        novo_status=chamado.status.value,
                    )
                )
        except Exception as e:
            registrar_erro(self.log_repo, TipoLog.UPDATE_CHAMADO, AtorTipo.ADM, e, protocolo)
            raise

        return ChamadoOutputDTO.from_entity(chamado, horario=self.horario)


class ExcluirChamadoService:
    """
    Use Case: Excluir chamado e seus comentários.
    """

    def __init__(
        self,
        chamado_repo: ChamadoRepository,
        comentario_repo: ComentarioRepository,
        log_repo: LogRepository,
        uow: UnitOfWork,
    ):
        self.chamado_repo = chamado_repo
        self.comentario_repo = comentario_repo
        self.log_repo = log_repo
        self.uow = uow

    def execute(self, chamado_id: str) -> None:
        """
        Raises:
            EntityNotFoundError: Se chamado não existe
        """
        protocolo = None
        try:
            with self.uow:
                chamado = _obter_chamado(self.chamado_repo, chamado_id)
                protocolo = chamado.protocolo

                removidos = self.comentario_repo.delete_by_chamado(chamado.id)
                self.chamado_repo.delete(chamado.id)

                self.log_repo.registrar(
                    LogEntity.criar(
                        tipo=TipoLog.DELETE_CHAMADO,
                        ator_tipo=AtorTipo.ADM,
                        detalhes=f"Chamado excluído com {removidos} comentário(s)",
                        chamado_id=protocolo,
                    )
                )

                self.uow.publish_event(
                    ChamadoExcluidoEvent(
                        aggregate_id=chamado.id,
                        protocolo=protocolo,
                        comentarios_removidos=removidos,
                    )
                )
        except Exception as e:
            registrar_erro(self.log_repo, TipoLog.DELETE_CHAMADO, AtorTipo.ADM, e, protocolo)
            raise

        logger.info(f"Chamado excluído: {protocolo}")


class ListarLogsService:
    """
    Use Case: Consultar registros de auditoria (mais recentes primeiro).
    """

    def __init__(
        self,
        log_repo: LogRepository,
        horario: HorarioComercial = HORARIO_PADRAO,
    ):
        self.log_repo = log_repo
        self.horario = horario

    def execute(self, query: Optional[ListarLogsQueryDTO] = None) -> List[LogOutputDTO]:
        query = query or ListarLogsQueryDTO()
        inicio, fim = periodo_do_dia(query.data_inicio, query.data_fim, self.horario)
        tipo = (query.tipo or "").strip().upper() or None

        return [
            LogOutputDTO.from_entity(log)
            for log in self.log_repo.listar(inicio=inicio, fim=fim, tipo=tipo)
        ]


class ResumoChamadosService:
    """
    Use Case: Resumo para relatório.

    Aplica os mesmos filtros da listagem administrativa e retorna o
    total e a contagem por status. Registra GERAR_RELATORIO.
    """

    def __init__(
        self,
        chamado_repo: ChamadoRepository,
        log_repo: LogRepository,
        horario: HorarioComercial = HORARIO_PADRAO,
    ):
        self.listagem = ListarChamadosService(chamado_repo, horario)
        self.log_repo = log_repo

    def execute(
        self,
        query: Optional[ListarChamadosQueryDTO] = None,
    ) -> ResumoChamadosDTO:
        query = query or ListarChamadosQueryDTO()
        try:
            resumo = ResumoChamadosDTO.from_entities(self.listagem.buscar(query))

            self.log_repo.registrar(
                LogEntity.criar(
                    tipo=TipoLog.GERAR_RELATORIO,
                    ator_tipo=AtorTipo.ADM,
                    detalhes=f"Relatório gerado com {resumo.total} chamado(s)",
                )
            )
        except Exception as e:
            registrar_erro(self.log_repo, TipoLog.GERAR_RELATORIO, AtorTipo.ADM, e)
            raise

        return resumo


class VerificarChamadosEmEsperaService:
    """
    Use Case: Encontrar chamados parados em espera.

    Retorna os chamados com status EM_ESPERA que acumulam pelo menos
    `dias_limite` dias úteis completos de espera.
    """

    def __init__(
        self,
        chamado_repo: ChamadoRepository,
        horario: HorarioComercial = HORARIO_PADRAO,
        dias_limite: int = 2,
    ):
        self.chamado_repo = chamado_repo
        self.horario = horario
        self.dias_limite = dias_limite

    def execute(self, agora: Optional[datetime] = None) -> List[ChamadoListItemDTO]:
        agora = agora or agora_utc()
        limite_minutos = self.dias_limite * self.horario.horas_por_dia * 60

        atrasados = []
        for chamado in self.chamado_repo.list_all(status=ChamadoStatus.EM_ESPERA):
            inicio = calcular_inicio_sla(chamado.criado_em, self.horario)
            if calcular_minutos_uteis(inicio, agora, self.horario) >= limite_minutos:
                atrasados.append(
                    ChamadoListItemDTO.from_entity(chamado, agora=agora, horario=self.horario)
                )

        return atrasados


class LimparLogsAntigosService:
    """
    Use Case: Remover registros de auditoria além da retenção.
    """

    def __init__(self, log_repo: LogRepository, retencao_dias: int = 90):
        self.log_repo = log_repo
        self.retencao_dias = retencao_dias

    def execute(self, agora: Optional[datetime] = None) -> int:
        limite = (agora or agora_utc()) - timedelta(days=self.retencao_dias)
        removidos = self.log_repo.delete_anteriores(limite)
        logger.info(f"{removidos} log(s) anteriores a {limite.isoformat()} removidos")
        return removidos
