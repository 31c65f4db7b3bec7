"""
Entidades do Domínio de Chamados.

Este módulo define as entidades de domínio que encapsulam
regras de negócio relacionadas a chamados de suporte.

Entidades:
- ChamadoEntity: Agregado principal do domínio
- ComentarioEntity: Mensagem trocada entre usuário e atendimento
- LogEntity: Registro de auditoria de uma ação
- AnexoChamado: Value object do arquivo anexado

Regras de Negócio Encapsuladas:
- Validação de dados na abertura
- Limite de tamanho de anexo
- Cancelamento só para chamados não encerrados
- Chamado cancelado não recebe comentários
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
import uuid

from src.core.shared.exceptions import (
    ValidationError,
    BusinessRuleViolationError,
)

from .horario_comercial import (
    HORARIO_PADRAO,
    HorarioComercial,
    calcular_tempo_abertura,
)

LIMITE_ANEXO_BYTES = 700 * 1024


def agora_utc() -> datetime:
    """Instante atual com fuso UTC (timestamps do servidor)."""
    return datetime.now(timezone.utc)


class ChamadoStatus(Enum):
    """
    Estados possíveis de um chamado.

    Fluxo de Estados:
        EM_ESPERA → EM_ATENDIMENTO → RESOLVIDO
            ↓             ↓
            └──────→ CANCELADO (pelo usuário)

    O administrador pode definir qualquer status na edição.
    """

    EM_ESPERA = "Em Espera"
    EM_ATENDIMENTO = "Em atendimento"
    RESOLVIDO = "Resolvido"
    CANCELADO = "Cancelado"

    @classmethod
    def from_string(cls, value: str) -> "ChamadoStatus":
        """
        Converte string para enum.

        Aceita o nome ("EM_ESPERA") ou o valor ("Em Espera"),
        sem diferenciar maiúsculas.

        Raises:
            ValueError: Se valor inválido
        """
        if not value:
            raise ValueError("Status vazio")

        try:
            return cls[value.strip().upper().replace(" ", "_")]
        except KeyError:
            pass

        for status in cls:
            if status.value.lower() == value.strip().lower():
                return status

        raise ValueError(f"Status inválido: {value}")

    @property
    def esta_encerrado(self) -> bool:
        return self in (ChamadoStatus.RESOLVIDO, ChamadoStatus.CANCELADO)


class AtorTipo(Enum):
    """Quem executou a ação registrada."""

    USUARIO = "USUARIO"
    ADM = "ADM"

    @classmethod
    def from_string(cls, value: str) -> "AtorTipo":
        try:
            return cls[(value or "").strip().upper()]
        except KeyError:
            raise ValueError(f"Tipo de ator inválido: {value}")


class TipoLog(Enum):
    """Tipos de registro de auditoria."""

    CREATE_CHAMADO = "CREATE_CHAMADO"
    READ_CHAMADO = "READ_CHAMADO"
    READ_CHAMADO_NOT_FOUND = "READ_CHAMADO_NOT_FOUND"
    CANCEL_CHAMADO_USUARIO = "CANCEL_CHAMADO_USUARIO"
    UPDATE_CHAMADO = "UPDATE_CHAMADO"
    DELETE_CHAMADO = "DELETE_CHAMADO"
    ADD_COMENTARIO = "ADD_COMENTARIO"
    GERAR_RELATORIO = "GERAR_RELATORIO"

    @property
    def erro(self) -> str:
        """Tipo usado quando a ação falha (ex: ERROR_CREATE_CHAMADO)."""
        return f"ERROR_{self.value}"


@dataclass(frozen=True)
class AnexoChamado:
    """
    Arquivo anexado na abertura do chamado.

    O conteúdo é guardado como data URL base64 junto do chamado,
    por isso o tamanho é limitado a LIMITE_ANEXO_BYTES (~700KB).

    Attributes:
        nome: Nome original do arquivo
        tipo: MIME type
        dados: Data URL base64
        tamanho: Tamanho do arquivo original em bytes
    """

    nome: str
    tipo: str = ""
    dados: str = ""
    tamanho: int = 0

    def __post_init__(self):
        if not self.nome or not self.nome.strip():
            raise ValidationError("Nome do anexo é obrigatório", field="anexo")

        if self.tamanho < 0:
            raise ValidationError("Tamanho do anexo inválido", field="anexo")

        if self.tamanho > LIMITE_ANEXO_BYTES:
            raise ValidationError(
                "O anexo ultrapassa o limite de ~700KB",
                field="anexo"
            )


@dataclass
class ChamadoEntity:
    """
    Entidade de Domínio: Chamado.

    Agregado principal do domínio de atendimento.

    Invariantes:
    - Protocolo é alocado antes da criação e nunca muda
    - Nome, categoria, assunto, urgência e descrição são obrigatórios
    - Chamado resolvido ou cancelado não pode ser cancelado pelo usuário
    - criado_em é imutável após a abertura

    Attributes:
        id: Identificador único (UUID)
        protocolo: Identificador legível (CH-AAAA-NNNN)
        nome: Nome do solicitante
        telefone: Telefone de contato (opcional)
        categoria: Categoria do chamado
        assunto: Assunto resumido
        urgencia: Urgência informada pelo solicitante
        descricao: Descrição detalhada
        status: Estado atual
        criado_em: Data/hora de abertura
        atualizado_em: Data/hora da última atualização
        anexo: Arquivo anexado (opcional)

    Example:
        chamado = ChamadoEntity.abrir(
            protocolo="CH-2025-0001",
            nome="Maria Souza",
            categoria="Sistema",
            assunto="Erro ao emitir nota",
            urgencia="Alta",
            descricao="O sistema trava ao clicar em emitir nota fiscal",
        )
        chamado.cancelar()
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    protocolo: str = ""
    nome: str = ""
    telefone: Optional[str] = None
    categoria: str = ""
    assunto: str = ""
    urgencia: str = ""
    descricao: str = ""

    status: ChamadoStatus = field(default=ChamadoStatus.EM_ESPERA)

    criado_em: datetime = field(default_factory=agora_utc)
    atualizado_em: datetime = field(default_factory=agora_utc)

    anexo: Optional[AnexoChamado] = None

    NOME_MIN_LENGTH = 2
    NOME_MAX_LENGTH = 120
    ASSUNTO_MIN_LENGTH = 3
    ASSUNTO_MAX_LENGTH = 200
    DESCRICAO_MIN_LENGTH = 10
    DESCRICAO_MAX_LENGTH = 5000

    @classmethod
    def abrir(
        cls,
        protocolo: str,
        nome: str,
        categoria: str,
        assunto: str,
        urgencia: str,
        descricao: str,
        telefone: Optional[str] = None,
        anexo: Optional[AnexoChamado] = None,
    ) -> "ChamadoEntity":
        """
        Factory method para abrir chamado com validações.

        Args:
            protocolo: Protocolo já alocado pelo GeradorProtocolo
            nome: Nome do solicitante
            categoria: Categoria do chamado
            assunto: Assunto resumido (min 3 caracteres)
            urgencia: Urgência informada
            descricao: Descrição detalhada (min 10 caracteres)
            telefone: Telefone de contato (opcional)
            anexo: Anexo já validado (opcional)

        Returns:
            Nova instância com status EM_ESPERA

        Raises:
            ValidationError: Se dados de entrada inválidos
        """
        if not protocolo:
            raise ValidationError("Protocolo é obrigatório", field="protocolo")

        cls.validar_abertura(nome, categoria, assunto, urgencia, descricao)

        return cls(
            protocolo=protocolo,
            nome=nome.strip(),
            telefone=(telefone or "").strip() or None,
            categoria=categoria.strip(),
            assunto=assunto.strip(),
            urgencia=urgencia.strip(),
            descricao=descricao.strip(),
            status=ChamadoStatus.EM_ESPERA,
            anexo=anexo,
        )

    @classmethod
    def validar_abertura(
        cls,
        nome: str,
        categoria: str,
        assunto: str,
        urgencia: str,
        descricao: str,
    ) -> None:
        """
        Valida os dados de abertura sem criar a entidade.

        Permite rejeitar entradas inválidas antes de alocar um protocolo.

        Raises:
            ValidationError: No primeiro campo inválido
        """
        cls._validar_nome(nome)
        cls._validar_obrigatorio(categoria, "categoria", "Categoria")
        cls._validar_assunto(assunto)
        cls._validar_obrigatorio(urgencia, "urgencia", "Urgência")
        cls._validar_descricao(descricao)

    @staticmethod
    def _validar_obrigatorio(valor: str, campo: str, rotulo: str) -> None:
        if not valor or not valor.strip():
            raise ValidationError(f"{rotulo} é obrigatória", field=campo)

    @classmethod
    def _validar_nome(cls, nome: str) -> None:
        if not nome or not nome.strip():
            raise ValidationError("Nome é obrigatório", field="nome")

        tamanho = len(nome.strip())
        if tamanho < cls.NOME_MIN_LENGTH:
            raise ValidationError(
                f"Nome deve ter pelo menos {cls.NOME_MIN_LENGTH} caracteres",
                field="nome"
            )
        if tamanho > cls.NOME_MAX_LENGTH:
            raise ValidationError(
                f"Nome deve ter no máximo {cls.NOME_MAX_LENGTH} caracteres",
                field="nome"
            )

    @classmethod
    def _validar_assunto(cls, assunto: str) -> None:
        if not assunto or not assunto.strip():
            raise ValidationError("Assunto é obrigatório", field="assunto")

        tamanho = len(assunto.strip())
        if tamanho < cls.ASSUNTO_MIN_LENGTH:
            raise ValidationError(
                f"Assunto deve ter pelo menos {cls.ASSUNTO_MIN_LENGTH} caracteres",
                field="assunto"
            )
        if tamanho > cls.ASSUNTO_MAX_LENGTH:
            raise ValidationError(
                f"Assunto deve ter no máximo {cls.ASSUNTO_MAX_LENGTH} caracteres",
                field="assunto"
            )

    @classmethod
    def _validar_descricao(cls, descricao: str) -> None:
        if not descricao or not descricao.strip():
            raise ValidationError("Descrição é obrigatória", field="descricao")

        tamanho = len(descricao.strip())
        if tamanho < cls.DESCRICAO_MIN_LENGTH:
            raise ValidationError(
                f"Descrição deve ter pelo menos {cls.DESCRICAO_MIN_LENGTH} caracteres",
                field="descricao"
            )
        if tamanho > cls.DESCRICAO_MAX_LENGTH:
            raise ValidationError(
                f"Descrição deve ter no máximo {cls.DESCRICAO_MAX_LENGTH} caracteres",
                field="descricao"
            )

    def cancelar(self) -> None:
        """
        Cancela o chamado a pedido do solicitante.

        Regras:
        - Chamado já cancelado não pode ser cancelado de novo
        - Chamado resolvido pelo atendimento não pode ser cancelado

        Raises:
            BusinessRuleViolationError: Se regras violadas
        """
        if self.status == ChamadoStatus.CANCELADO:
            raise BusinessRuleViolationError(
                "Este chamado já está com status 'Cancelado'",
                rule="chamado_ja_cancelado"
            )

        if self.status == ChamadoStatus.RESOLVIDO:
            raise BusinessRuleViolationError(
                "Este chamado já foi marcado como 'Resolvido' pelo atendimento",
                rule="chamado_ja_resolvido"
            )

        self.status = ChamadoStatus.CANCELADO
        self._atualizar_timestamp()

    def atualizar(
        self,
        status: Optional[ChamadoStatus] = None,
        nome: Optional[str] = None,
        telefone: Optional[str] = None,
        assunto: Optional[str] = None,
        descricao: Optional[str] = None,
    ) -> None:
        """
        Edição administrativa do chamado.

        Campos None são mantidos. O administrador pode definir
        qualquer status.

        Raises:
            ValidationError: Se algum campo informado for inválido
        """
        if nome is not None:
            self._validar_nome(nome)
        if assunto is not None:
            self._validar_assunto(assunto)
        if descricao is not None:
            self._validar_descricao(descricao)

        if status is not None:
            self.status = status
        if nome is not None:
            self.nome = nome.strip()
        if telefone is not None:
            self.telefone = telefone.strip() or None
        if assunto is not None:
            self.assunto = assunto.strip()
        if descricao is not None:
            self.descricao = descricao.strip()

        self._atualizar_timestamp()

    def verificar_pode_comentar(self) -> None:
        """
        Raises:
            BusinessRuleViolationError: Se o chamado estiver cancelado
        """
        if self.status == ChamadoStatus.CANCELADO:
            raise BusinessRuleViolationError(
                "Não é possível comentar em chamado cancelado",
                rule="chamado_cancelado_sem_comentarios"
            )

    def _atualizar_timestamp(self) -> None:
        self.atualizado_em = agora_utc()

    def tempo_abertura(
        self,
        agora: Optional[datetime] = None,
        horario: HorarioComercial = HORARIO_PADRAO,
    ) -> str:
        """Idade do chamado em tempo útil (ex: "Aberto há 2h 35min")."""
        return calcular_tempo_abertura(self.criado_em, agora=agora, horario=horario)

    @property
    def esta_encerrado(self) -> bool:
        return self.status.esta_encerrado

    def __repr__(self) -> str:
        return (
            f"ChamadoEntity("
            f"protocolo={self.protocolo}, "
            f"assunto='{self.assunto[:20]}', "
            f"status={self.status.value}"
            f")"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChamadoEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass
class ComentarioEntity:
    """
    Comentário trocado em um chamado.

    Attributes:
        id: Identificador único
        chamado_id: ID do chamado
        autor_tipo: USUARIO ou ADM
        autor_nome: Nome exibido do autor
        texto: Conteúdo
        criado_em: Data/hora do comentário
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    chamado_id: str = ""
    autor_tipo: AtorTipo = AtorTipo.USUARIO
    autor_nome: str = ""
    texto: str = ""
    criado_em: datetime = field(default_factory=agora_utc)

    TEXTO_MAX_LENGTH = 2000

    @classmethod
    def criar(
        cls,
        chamado_id: str,
        autor_tipo: AtorTipo,
        texto: str,
        autor_nome: str = "",
    ) -> "ComentarioEntity":
        """
        Raises:
            ValidationError: Se texto vazio ou longo demais
        """
        if not texto or not texto.strip():
            raise ValidationError("Comentário não pode ser vazio", field="texto")

        if len(texto.strip()) > cls.TEXTO_MAX_LENGTH:
            raise ValidationError(
                f"Comentário deve ter no máximo {cls.TEXTO_MAX_LENGTH} caracteres",
                field="texto"
            )

        return cls(
            chamado_id=chamado_id,
            autor_tipo=autor_tipo,
            autor_nome=(autor_nome or "").strip(),
            texto=texto.strip(),
        )


@dataclass
class LogEntity:
    """
    Registro de auditoria.

    Attributes:
        id: Identificador único
        tipo: Tipo da ação (ex: CREATE_CHAMADO, ERROR_CREATE_CHAMADO)
        chamado_id: Protocolo do chamado envolvido (se houver)
        ator_tipo: USUARIO ou ADM
        detalhes: Descrição textual da ação
        criado_em: Data/hora do registro
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    tipo: str = ""
    chamado_id: Optional[str] = None
    ator_tipo: AtorTipo = AtorTipo.USUARIO
    detalhes: str = ""
    criado_em: datetime = field(default_factory=agora_utc)

    @classmethod
    def criar(
        cls,
        tipo: str,
        ator_tipo: AtorTipo,
        detalhes: str,
        chamado_id: Optional[str] = None,
    ) -> "LogEntity":
        if isinstance(tipo, TipoLog):
            tipo = tipo.value
        return cls(
            tipo=tipo,
            chamado_id=chamado_id,
            ator_tipo=ator_tipo,
            detalhes=detalhes,
        )
