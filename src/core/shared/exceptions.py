"""
Exceções de Domínio da Central de Chamados.

Este módulo define exceções específicas do domínio que permitem
comunicar erros de forma clara e tipada entre as camadas.

Hierarquia:
    DomainException (base)
    ├── ValidationError (validação de entrada)
    ├── EntityNotFoundError (entidade não existe)
    ├── BusinessRuleViolationError (regra de negócio violada)
    ├── StoreUnavailableError (store transacional inacessível)
    └── ConcurrencyError (conflito de concorrência)
        └── TransactionAbortedError (transação não comitada após retries)
"""


class DomainException(Exception):
    """
    Exceção base para todos os erros de domínio.

    Todas as exceções específicas do domínio devem herdar desta classe.
    Isso permite capturar qualquer erro de domínio de forma genérica.

    Example:
        try:
            chamado.cancelar()
        except DomainException as e:
            logger.error(f"Erro de domínio: {e}")
    """

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Serializa exceção para dicionário (útil para APIs)."""
        return {
            "error": self.code,
            "message": self.message,
        }


class ValidationError(DomainException):
    """
    Erro de validação de dados de entrada.

    Lançada quando dados fornecidos não atendem aos requisitos
    mínimos para processamento.

    Example:
        if len(assunto) < 3:
            raise ValidationError("Assunto deve ter pelo menos 3 caracteres")
    """

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class EntityNotFoundError(DomainException):
    """
    Entidade não encontrada no repositório.

    Lançada quando uma busca por ID ou protocolo não retorna resultado.
    """

    def __init__(self, message: str, entity_type: str = None, entity_id: str = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "ENTITY_NOT_FOUND")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity_type:
            result["entity_type"] = self.entity_type
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


class BusinessRuleViolationError(DomainException):
    """
    Violação de regra de negócio.

    Lançada quando uma operação viola uma regra de negócio
    estabelecida no domínio.

    Example:
        if chamado.status == ChamadoStatus.RESOLVIDO:
            raise BusinessRuleViolationError(
                "Chamado já resolvido não pode ser cancelado"
            )
    """

    def __init__(self, message: str, rule: str = None):
        self.rule = rule
        super().__init__(message, "BUSINESS_RULE_VIOLATION")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.rule:
            result["rule"] = self.rule
        return result


class StoreUnavailableError(DomainException):
    """
    Store transacional inacessível.

    Lançada pelo adapter de contadores quando não consegue se
    comunicar com o banco. Deve ser propagada sem reinterpretação:
    nenhum protocolo alternativo pode ser gerado no lugar.
    """

    def __init__(self, message: str):
        super().__init__(message, "STORE_UNAVAILABLE")


class ConcurrencyError(DomainException):
    """
    Erro de concorrência/conflito de versão.

    Lançada quando uma operação falha devido a modificação
    concorrente da entidade.
    """

    def __init__(self, message: str, code: str = "CONCURRENCY_ERROR"):
        super().__init__(message, code)


class TransactionAbortedError(ConcurrencyError):
    """
    Transação abortada após esgotar as tentativas.

    Attributes:
        tentativas: Número de tentativas realizadas antes de desistir
    """

    def __init__(self, message: str, tentativas: int = 0):
        self.tentativas = tentativas
        super().__init__(message, "TRANSACTION_ABORTED")

    def to_dict(self) -> dict:
        result = super().to_dict()
        result["tentativas"] = self.tentativas
        return result
