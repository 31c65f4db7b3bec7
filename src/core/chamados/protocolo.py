"""
Gerador Sequencial de Protocolos.

Aloca o identificador legível de um chamado no formato
CH-<ano>-<sequencial>, com o sequencial zero-preenchido em 4 dígitos
(ex: CH-2025-0007).

O sequencial vem de um contador por ano mantido em um store
transacional (ContadorProtocoloStore). Toda a leitura e escrita de
uma alocação acontece em uma única transação: ou tudo é comitado,
ou nada é. A política de retry em conflitos pertence ao adapter do
store.

Migração do contador legado:
    Antes dos contadores por ano existia um único contador global
    ("contadorChamados"). Na primeira alocação de um ano sem contador
    próprio, o legado semeia o novo contador e também avança para o
    mesmo valor, nunca regredindo.
"""

from datetime import datetime
from typing import Callable, Optional
import logging

from .ports import ContadorProtocoloStore, TransacaoContador

logger = logging.getLogger(__name__)

PREFIXO_PROTOCOLO = "CH"
CHAVE_CONTADOR_LEGADO = "contadorChamados"


def chave_contador_ano(ano: int) -> str:
    """Chave do contador de um ano (ex: 2025 -> "2025")."""
    return str(ano)


def formatar_protocolo(ano: int, sequencial: int) -> str:
    """
    Formata protocolo legível.

    Example:
        >>> formatar_protocolo(2025, 7)
        'CH-2025-0007'
    """
    return f"{PREFIXO_PROTOCOLO}-{ano}-{sequencial:04d}"


class GeradorProtocolo:
    """
    Aloca protocolos únicos por ano.

    Garantias (sob a atomicidade do store):
    - Duas chamadas concorrentes no mesmo ano nunca recebem o mesmo
      sequencial.
    - Em caso de falha (StoreUnavailableError, TransactionAbortedError)
      nenhum protocolo é retornado e nenhum contador é alterado.
      O erro é propagado sem reinterpretação.

    Attributes:
        store: Store transacional de contadores
        relogio: Função que retorna o instante atual (define o ano)

    Example:
        gerador = GeradorProtocolo(InMemoryContadorProtocoloStore())
        gerador.gerar(2025)  # "CH-2025-0001"
        gerador.gerar(2025)  # "CH-2025-0002"
    """

    def __init__(
        self,
        store: ContadorProtocoloStore,
        relogio: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.relogio = relogio

    def _resolver_ano(self, ano: Optional[int]) -> int:
        """Ano informado ou, na falta dele, o ano atual do relógio."""
        return self.relogio().year if ano is None else ano

    def proximo_sequencial(self, ano: Optional[int] = None) -> int:
        """
        Incrementa atomicamente o contador do ano e retorna o novo valor.

        Args:
            ano: Ano do contador (default: ano atual do relógio)

        Returns:
            Sequencial alocado (>= 1)

        Raises:
            StoreUnavailableError: Se o store estiver inacessível
            TransactionAbortedError: Se a transação não puder ser comitada
        """
        ano = self._resolver_ano(ano)
        chave_ano = chave_contador_ano(ano)

        def incrementar(transacao: TransacaoContador) -> int:
            existe, valor = transacao.ler(chave_ano)
            if existe:
                novo_valor = valor + 1
                transacao.gravar(chave_ano, novo_valor)
                return novo_valor

            existe_legado, valor_legado = transacao.ler(CHAVE_CONTADOR_LEGADO)
            if existe_legado:
                novo_valor = valor_legado + 1
                transacao.gravar(chave_ano, novo_valor)
                transacao.gravar(CHAVE_CONTADOR_LEGADO, novo_valor)
                return novo_valor

            transacao.gravar(chave_ano, 1)
            return 1

        sequencial = self.store.executar_transacao(incrementar)
        logger.debug(f"Sequencial alocado: ano={ano} valor={sequencial}")
        return sequencial

    def gerar(self, ano: Optional[int] = None) -> str:
        """
        Aloca e formata um novo protocolo.

        Args:
            ano: Ano do protocolo (default: ano atual do relógio)

        Returns:
            Protocolo no formato CH-<ano>-<sequencial>
        """
        ano = self._resolver_ano(ano)
        protocolo = formatar_protocolo(ano, self.proximo_sequencial(ano))
        logger.info(f"Protocolo gerado: {protocolo}")
        return protocolo
