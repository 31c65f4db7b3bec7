"""
Ports (Interfaces) do Domínio de Chamados.

Define os contratos que os Adapters de infraestrutura devem implementar
para persistência de chamados, comentários, logs de auditoria e do
contador de protocolos.

Tipos de Ports:
- ContadorProtocoloStore: Store transacional do contador de protocolos
- ChamadoRepository: CRUD e consultas de chamados
- ComentarioRepository: Comentários de um chamado
- LogRepository: Registro e consulta de auditoria

Cada port tem uma implementação em memória neste módulo, usada em
testes unitários e prototipagem.

Princípio:
    Core define interfaces → Adapters implementam
    Dependências sempre apontam para o Core
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Dict, List, Optional, Protocol, Tuple, TypeVar, runtime_checkable
import threading

from src.core.shared.exceptions import (
    StoreUnavailableError,
    TransactionAbortedError,
)

from .entities import (
    ChamadoEntity,
    ChamadoStatus,
    ComentarioEntity,
    LogEntity,
)

T = TypeVar("T")


# =============================================================================
# CONTADOR DE PROTOCOLOS
# =============================================================================

class TransacaoContador(ABC):
    """
    Visão transacional dos contadores durante uma alocação.

    Leituras enxergam as escritas feitas na mesma transação.
    """

    @abstractmethod
    def ler(self, chave: str) -> Tuple[bool, int]:
        """
        Lê um contador.

        Returns:
            (existe, valor); valor é 0 quando não existe
        """
        raise NotImplementedError

    @abstractmethod
    def gravar(self, chave: str, valor: int) -> None:
        """Define o valor de um contador (cria se não existir)."""
        raise NotImplementedError


class ContadorProtocoloStore(ABC):
    """
    Store transacional de contadores.

    Implementações:
    - DjangoContadorProtocoloStore (transaction.atomic + select_for_update)
    - InMemoryContadorProtocoloStore (testes)
    """

    @abstractmethod
    def executar_transacao(self, fn: Callable[[TransacaoContador], T]) -> T:
        """
        Executa `fn` dentro de uma transação.

        Todas as leituras e escritas de `fn` são comitadas juntas ou
        nenhuma é. Conflitos podem ser repetidos pelo adapter.

        Returns:
            Valor retornado por `fn`

        Raises:
            StoreUnavailableError: Store inacessível
            TransactionAbortedError: Transação não comitada após as tentativas
        """
        raise NotImplementedError


class _TransacaoEmMemoria(TransacaoContador):

    def __init__(self, comitados: Dict[str, int]):
        self._comitados = comitados
        self.escritas: Dict[str, int] = {}

    def ler(self, chave: str) -> Tuple[bool, int]:
        if chave in self.escritas:
            return True, self.escritas[chave]
        if chave in self._comitados:
            return True, self._comitados[chave]
        return False, 0

    def gravar(self, chave: str, valor: int) -> None:
        self.escritas[chave] = valor


class InMemoryContadorProtocoloStore(ContadorProtocoloStore):
    """
    Implementação em memória do ContadorProtocoloStore.

    Serializa as transações com um lock e só aplica as escritas ao
    final de uma transação bem-sucedida.

    Hooks de teste:
    - indisponivel: faz toda transação lançar StoreUnavailableError
    - falhar_proximos_commits(n): aborta os próximos n commits

    Example:
        store = InMemoryContadorProtocoloStore({"contadorChamados": 41})
        GeradorProtocolo(store).gerar(2025)  # "CH-2025-0042"
    """

    def __init__(self, valores_iniciais: Optional[Dict[str, int]] = None):
        self._valores: Dict[str, int] = dict(valores_iniciais or {})
        self._lock = threading.Lock()
        self._falhas_pendentes = 0
        self.indisponivel = False
        self.transacoes_comitadas = 0

    def executar_transacao(self, fn: Callable[[TransacaoContador], T]) -> T:
        if self.indisponivel:
            raise StoreUnavailableError("Store de contadores indisponível")

        with self._lock:
            transacao = _TransacaoEmMemoria(self._valores)
            resultado = fn(transacao)

            if self._falhas_pendentes > 0:
                self._falhas_pendentes -= 1
                raise TransactionAbortedError(
                    "Transação do contador abortada",
                    tentativas=1
                )

            self._valores.update(transacao.escritas)
            self.transacoes_comitadas += 1
            return resultado

    def falhar_proximos_commits(self, quantidade: int) -> None:
        with self._lock:
            self._falhas_pendentes = quantidade

    def valor(self, chave: str) -> Optional[int]:
        """Valor comitado de um contador (None se não existe)."""
        with self._lock:
            return self._valores.get(chave)

    def clear(self) -> None:
        with self._lock:
            self._valores.clear()


# =============================================================================
# REPOSITÓRIOS
# =============================================================================

@runtime_checkable
class ChamadoRepository(Protocol):
    """
    Interface para persistência de Chamados.

    Implementações:
    - DjangoChamadoRepository (ORM)
    - InMemoryChamadoRepository (testes)
    """

    def save(self, chamado: ChamadoEntity) -> None:
        """Persiste chamado (create ou update)."""
        ...

    def get_by_id(self, chamado_id: str) -> Optional[ChamadoEntity]:
        ...

    def get_by_protocolo(self, protocolo: str) -> Optional[ChamadoEntity]:
        """
        Busca chamado pelo protocolo exato (ex: "CH-2025-0001").
        """
        ...

    def list_by_nome(self, nome: str) -> List[ChamadoEntity]:
        """
        Busca por trecho do nome, sem diferenciar maiúsculas.

        Returns:
            Chamados encontrados, mais recentes primeiro
        """
        ...

    def list_all(
        self,
        status: Optional[ChamadoStatus] = None,
        texto: Optional[str] = None,
        criado_de: Optional[datetime] = None,
        criado_ate: Optional[datetime] = None,
    ) -> List[ChamadoEntity]:
        """
        Lista chamados com filtros opcionais.

        Args:
            status: Status exato
            texto: Trecho de nome ou assunto (sem diferenciar maiúsculas)
            criado_de: Início do período de abertura (inclusivo)
            criado_ate: Fim do período de abertura (inclusivo)

        Returns:
            Chamados filtrados, mais recentes primeiro
        """
        ...

    def delete(self, chamado_id: str) -> None:
        ...

    def exists(self, chamado_id: str) -> bool:
        ...

    def count(self) -> int:
        ...

    def count_by_status(self, status: ChamadoStatus) -> int:
        ...


@runtime_checkable
class ComentarioRepository(Protocol):
    """Interface para comentários de chamados."""

    def save(self, comentario: ComentarioEntity) -> None:
        ...

    def list_by_chamado(self, chamado_id: str) -> List[ComentarioEntity]:
        """Comentários do chamado em ordem cronológica."""
        ...

    def delete_by_chamado(self, chamado_id: str) -> int:
        """Remove todos os comentários do chamado e retorna quantos."""
        ...


@runtime_checkable
class LogRepository(Protocol):
    """Interface para o registro de auditoria."""

    def registrar(self, log: LogEntity) -> None:
        ...

    def listar(
        self,
        inicio: Optional[datetime] = None,
        fim: Optional[datetime] = None,
        tipo: Optional[str] = None,
    ) -> List[LogEntity]:
        """
        Lista registros, mais recentes primeiro.

        Args:
            inicio: Limite inferior de criado_em (inclusivo)
            fim: Limite superior de criado_em (inclusivo)
            tipo: Tipo exato do registro
        """
        ...

    def delete_anteriores(self, limite: datetime) -> int:
        """Remove registros criados antes de `limite` e retorna quantos."""
        ...


def _mais_recentes_primeiro(itens):
    return sorted(itens, key=lambda item: item.criado_em, reverse=True)


class InMemoryChamadoRepository:
    """
    Implementação em memória do ChamadoRepository.

    Não usar em produção!

    Example:
        repo = InMemoryChamadoRepository()
        repo.save(chamado)
        found = repo.get_by_protocolo("CH-2025-0001")
    """

    def __init__(self):
        self._chamados: Dict[str, ChamadoEntity] = {}

    def save(self, chamado: ChamadoEntity) -> None:
        self._chamados[chamado.id] = chamado

    def get_by_id(self, chamado_id: str) -> Optional[ChamadoEntity]:
        return self._chamados.get(chamado_id)

    def get_by_protocolo(self, protocolo: str) -> Optional[ChamadoEntity]:
        for chamado in self._chamados.values():
            if chamado.protocolo == protocolo:
                return chamado
        return None

    def list_by_nome(self, nome: str) -> List[ChamadoEntity]:
        termo = nome.lower()
        return _mais_recentes_primeiro(
            c for c in self._chamados.values() if termo in c.nome.lower()
        )

    def list_all(
        self,
        status: Optional[ChamadoStatus] = None,
        texto: Optional[str] = None,
        criado_de: Optional[datetime] = None,
        criado_ate: Optional[datetime] = None,
    ) -> List[ChamadoEntity]:
        chamados = list(self._chamados.values())

        if status is not None:
            chamados = [c for c in chamados if c.status == status]

        if texto:
            termo = texto.lower()
            chamados = [
                c for c in chamados
                if termo in c.nome.lower() or termo in c.assunto.lower()
            ]

        if criado_de is not None:
            chamados = [c for c in chamados if c.criado_em >= criado_de]

        if criado_ate is not None:
            chamados = [c for c in chamados if c.criado_em <= criado_ate]

        return _mais_recentes_primeiro(chamados)

    def delete(self, chamado_id: str) -> None:
        self._chamados.pop(chamado_id, None)

    def exists(self, chamado_id: str) -> bool:
        return chamado_id in self._chamados

    def count(self) -> int:
        return len(self._chamados)

    def count_by_status(self, status: ChamadoStatus) -> int:
        return len([c for c in self._chamados.values() if c.status == status])

    def clear(self) -> None:
        """Limpa todos os dados (útil para testes)."""
        self._chamados.clear()


class InMemoryComentarioRepository:
    """Implementação em memória do ComentarioRepository."""

    def __init__(self):
        self._comentarios: List[ComentarioEntity] = []

    def save(self, comentario: ComentarioEntity) -> None:
        self._comentarios = [c for c in self._comentarios if c.id != comentario.id]
        self._comentarios.append(comentario)

    def list_by_chamado(self, chamado_id: str) -> List[ComentarioEntity]:
        return sorted(
            (c for c in self._comentarios if c.chamado_id == chamado_id),
            key=lambda c: c.criado_em,
        )

    def delete_by_chamado(self, chamado_id: str) -> int:
        antes = len(self._comentarios)
        self._comentarios = [c for c in self._comentarios if c.chamado_id != chamado_id]
        return antes - len(self._comentarios)

    def clear(self) -> None:
        self._comentarios.clear()


class InMemoryLogRepository:
    """Implementação em memória do LogRepository."""

    def __init__(self):
        self._logs: List[LogEntity] = []

    def registrar(self, log: LogEntity) -> None:
        self._logs.append(log)

    def listar(
        self,
        inicio: Optional[datetime] = None,
        fim: Optional[datetime] = None,
        tipo: Optional[str] = None,
    ) -> List[LogEntity]:
        logs = self._logs

        if inicio is not None:
            logs = [log for log in logs if log.criado_em >= inicio]
        if fim is not None:
            logs = [log for log in logs if log.criado_em <= fim]
        if tipo:
            logs = [log for log in logs if log.tipo == tipo]

        return _mais_recentes_primeiro(logs)

    def delete_anteriores(self, limite: datetime) -> int:
        antes = len(self._logs)
        self._logs = [log for log in self._logs if log.criado_em >= limite]
        return antes - len(self._logs)

    def tipos(self) -> List[str]:
        """Tipos registrados em ordem de inserção (útil para testes)."""
        return [log.tipo for log in self._logs]

    def clear(self) -> None:
        self._logs.clear()
