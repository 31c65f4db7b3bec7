"""
Repositórios Django para persistência de Chamados.

Implementam as interfaces (Ports) definidas em src/core/chamados/ports.py.
São DRIVEN ADAPTERS - acionados pelo Core em resposta a operações.

Repositórios:
- DjangoChamadoRepository
- DjangoComentarioRepository
- DjangoLogRepository
- DjangoContadorProtocoloStore (contador transacional de protocolos)
"""

from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple, TypeVar
import logging
import time

from django.db import (
    IntegrityError,
    InterfaceError,
    OperationalError,
    connections,
    transaction,
)
from django.db.models import Q

from src.core.chamados.entities import (
    ChamadoEntity,
    ChamadoStatus,
    ComentarioEntity,
    LogEntity,
)
from src.core.chamados.ports import ContadorProtocoloStore, TransacaoContador
from src.core.shared.exceptions import (
    StoreUnavailableError,
    TransactionAbortedError,
)

from .models import (
    ChamadoModel,
    ComentarioModel,
    ContadorProtocoloModel,
    LogModel,
)
from .mappers import ChamadoMapper, ComentarioMapper, LogMapper

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DjangoChamadoRepository:
    """
    Implementação Django do ChamadoRepository.

    Example:
        repo = DjangoChamadoRepository()
        repo.save(chamado)
        chamado = repo.get_by_protocolo("CH-2025-0001")
    """

    def __init__(self):
        self._mapper = ChamadoMapper()

    def save(self, chamado: ChamadoEntity) -> None:
        """
        Persiste chamado (create ou update).

        Note:
            Usa update_or_create para upsert pelo id
        """
        logger.debug(f"Saving chamado: {chamado.protocolo}")

        ChamadoModel.objects.update_or_create(
            id=chamado.id,
            defaults=self._mapper.to_model_data(chamado)
        )

    def get_by_id(self, chamado_id: str) -> Optional[ChamadoEntity]:
        try:
            model = ChamadoModel.objects.get(id=chamado_id)
            return self._mapper.to_entity(model)
        except ChamadoModel.DoesNotExist:
            logger.debug(f"Chamado not found: {chamado_id}")
            return None

    def get_by_protocolo(self, protocolo: str) -> Optional[ChamadoEntity]:
        model = ChamadoModel.objects.filter(protocolo=protocolo).first()
        if model is None:
            return None
        return self._mapper.to_entity(model)

    def list_by_nome(self, nome: str) -> List[ChamadoEntity]:
        models = ChamadoModel.objects.filter(nome__icontains=nome).order_by('-criado_em')
        return self._mapper.to_entity_list(models)

    def list_all(
        self,
        status: Optional[ChamadoStatus] = None,
        texto: Optional[str] = None,
        criado_de: Optional[datetime] = None,
        criado_ate: Optional[datetime] = None,
    ) -> List[ChamadoEntity]:
        """
        Lista chamados com filtros opcionais, mais recentes primeiro.

        Warning:
            Sem paginação
        """
        queryset = ChamadoModel.objects.all()

        if status is not None:
            queryset = queryset.filter(status=status.value)

        if texto:
            queryset = queryset.filter(
                Q(nome__icontains=texto) | Q(assunto__icontains=texto)
            )

        if criado_de is not None:
            queryset = queryset.filter(criado_em__gte=criado_de)

        if criado_ate is not None:
            queryset = queryset.filter(criado_em__lte=criado_ate)

        return self._mapper.to_entity_list(queryset.order_by('-criado_em'))

    def delete(self, chamado_id: str) -> None:
        """
        Note:
            Não lança erro se chamado não existir
        """
        deleted_count, _ = ChamadoModel.objects.filter(id=chamado_id).delete()

        if deleted_count > 0:
            logger.info(f"Chamado deleted: {chamado_id}")

    def exists(self, chamado_id: str) -> bool:
        return ChamadoModel.objects.filter(id=chamado_id).exists()

    def count(self) -> int:
        return ChamadoModel.objects.count()

    def count_by_status(self, status: ChamadoStatus) -> int:
        return ChamadoModel.objects.filter(status=status.value).count()


class DjangoComentarioRepository:
    """Implementação Django do ComentarioRepository."""

    def save(self, comentario: ComentarioEntity) -> None:
        model = ComentarioMapper.to_model(comentario)
        ComentarioModel.objects.update_or_create(
            id=model.id,
            defaults={
                'chamado_id': model.chamado_id,
                'autor_tipo': model.autor_tipo,
                'autor_nome': model.autor_nome,
                'texto': model.texto,
                'criado_em': model.criado_em,
            }
        )

    def list_by_chamado(self, chamado_id: str) -> List[ComentarioEntity]:
        models = ComentarioModel.objects.filter(chamado_id=chamado_id).order_by('criado_em')
        return [ComentarioMapper.to_entity(model) for model in models]

    def delete_by_chamado(self, chamado_id: str) -> int:
        deleted_count, _ = ComentarioModel.objects.filter(chamado_id=chamado_id).delete()
        return deleted_count


class DjangoLogRepository:
    """Implementação Django do LogRepository."""

    def registrar(self, log: LogEntity) -> None:
        LogMapper.to_model(log).save(force_insert=True)

    def listar(
        self,
        inicio: Optional[datetime] = None,
        fim: Optional[datetime] = None,
        tipo: Optional[str] = None,
    ) -> List[LogEntity]:
        queryset = LogModel.objects.all()

        if inicio is not None:
            queryset = queryset.filter(criado_em__gte=inicio)
        if fim is not None:
            queryset = queryset.filter(criado_em__lte=fim)
        if tipo:
            queryset = queryset.filter(tipo=tipo)

        return [LogMapper.to_entity(model) for model in queryset.order_by('-criado_em')]

    def delete_anteriores(self, limite: datetime) -> int:
        deleted_count, _ = LogModel.objects.filter(criado_em__lt=limite).delete()
        return deleted_count


# =============================================================================
# Contador de Protocolos
# =============================================================================

class _TransacaoDjango(TransacaoContador):
    """
    Transação sobre ContadorProtocoloModel.

    Cada linha lida fica bloqueada (select_for_update) até o fim do
    bloco atômico. Leituras enxergam as escritas da própria transação.
    """

    def __init__(self, using: str):
        self._using = using
        self._existentes: Dict[str, bool] = {}
        self._valores: Dict[str, int] = {}

    def ler(self, chave: str) -> Tuple[bool, int]:
        if chave in self._valores:
            return True, self._valores[chave]

        row = (
            ContadorProtocoloModel.objects
            .using(self._using)
            .select_for_update()
            .filter(chave=chave)
            .first()
        )

        self._existentes[chave] = row is not None
        if row is None:
            return False, 0

        self._valores[chave] = row.valor
        return True, row.valor

    def gravar(self, chave: str, valor: int) -> None:
        manager = ContadorProtocoloModel.objects.using(self._using)

        if self._existentes.get(chave):
            manager.filter(chave=chave).update(valor=valor)
        else:
            # Criação concorrente da mesma chave gera IntegrityError
            manager.create(chave=chave, valor=valor)
            self._existentes[chave] = True

        self._valores[chave] = valor


class DjangoContadorProtocoloStore(ContadorProtocoloStore):
    """
    Store de contadores sobre o banco Django.

    Cada chamada a executar_transacao roda em transaction.atomic com
    as linhas de contador bloqueadas via select_for_update. Conflitos
    (IntegrityError/OperationalError) são repetidos até max_tentativas,
    com espera crescente entre as tentativas.

    Attributes:
        max_tentativas: Número máximo de tentativas por alocação
        espera_base: Espera em segundos multiplicada pela tentativa

    Raises (em executar_transacao):
        StoreUnavailableError: Se não há conexão com o banco
        TransactionAbortedError: Se todas as tentativas falharem
    """

    def __init__(
        self,
        max_tentativas: int = 5,
        espera_base: float = 0.05,
        using: str = 'default',
    ):
        if max_tentativas < 1:
            raise ValueError("max_tentativas deve ser >= 1")

        self.max_tentativas = max_tentativas
        self.espera_base = espera_base
        self.using = using

    def _verificar_conexao(self) -> None:
        try:
            connections[self.using].ensure_connection()
        except (OperationalError, InterfaceError) as e:
            logger.error(f"Store de contadores indisponível: {e}")
            raise StoreUnavailableError(
                "Não foi possível acessar o contador de protocolos"
            ) from e

    def executar_transacao(self, fn: Callable[[TransacaoContador], T]) -> T:
        self._verificar_conexao()

        ultimo_erro = None
        for tentativa in range(1, self.max_tentativas + 1):
            try:
                with transaction.atomic(using=self.using):
                    return fn(_TransacaoDjango(self.using))
            except (IntegrityError, OperationalError) as e:
                ultimo_erro = e
                logger.warning(
                    f"Conflito no contador de protocolos "
                    f"(tentativa {tentativa}/{self.max_tentativas}): {e}"
                )
                if tentativa < self.max_tentativas:
                    time.sleep(self.espera_base * tentativa)

        raise TransactionAbortedError(
            f"Não foi possível gerar o protocolo após "
            f"{self.max_tentativas} tentativas",
            tentativas=self.max_tentativas
        ) from ultimo_erro
