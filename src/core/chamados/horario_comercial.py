"""
Motor de Horário Comercial.

Calcula o tempo útil decorrido desde a abertura de um chamado,
respeitando o expediente fixo (segunda a sexta, 09:00 às 18:00 no
fuso configurado), e formata a "idade" do chamado para exibição.

Regras:
- Início do SLA: se o chamado foi aberto dentro do expediente, conta
  a partir da abertura; caso contrário, a partir da próxima abertura
  de expediente (sábado/domingo e sexta após 18h vão para segunda 09:00).
- Minutos úteis: percorre dia a dia, recortando cada dia útil à
  interseção de [09:00, 18:00] com [cursor, agora]. Fins de semana
  são ignorados. Não há calendário de feriados.
- Formatação: um "dia" equivale a exatamente `horas_por_dia` horas
  úteis (9 no padrão), e não ao número de dias de calendário cruzados.

Funções puras: nenhuma guarda estado e nenhuma lança exceção para
entradas ausentes ou inválidas (retornam SEM_DATA).

Example:
    >>> from datetime import datetime
    >>> calcular_tempo_abertura(
    ...     datetime(2025, 3, 4, 10, 0),
    ...     agora=datetime(2025, 3, 4, 10, 5),
    ... )
    'Aberto há 5min'
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo

SEM_DATA = "-"
TEMPO_ZERO = "Aberto há 0min"

SABADO = 5


@dataclass(frozen=True)
class HorarioComercial:
    """
    Janela de expediente usada no cálculo de SLA.

    Attributes:
        hora_inicio: Hora de abertura do expediente (default: 9)
        hora_fim: Hora de encerramento do expediente (default: 18)
        fuso: Nome IANA do fuso local (default: America/Sao_Paulo)
    """

    hora_inicio: int = 9
    hora_fim: int = 18
    fuso: str = "America/Sao_Paulo"

    def __post_init__(self):
        if not 0 <= self.hora_inicio < self.hora_fim <= 23:
            raise ValueError(
                f"Expediente inválido: {self.hora_inicio}h às {self.hora_fim}h"
            )

    @property
    def horas_por_dia(self) -> int:
        """Horas úteis de um dia de expediente."""
        return self.hora_fim - self.hora_inicio

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.fuso)

    def eh_dia_util(self, dia: date) -> bool:
        return dia.weekday() < SABADO

    def abertura(self, dia: date) -> datetime:
        """Instante de abertura do expediente no dia informado."""
        return datetime.combine(dia, time(self.hora_inicio), tzinfo=self.tz)

    def fechamento(self, dia: date) -> datetime:
        """Instante de encerramento do expediente no dia informado."""
        return datetime.combine(dia, time(self.hora_fim), tzinfo=self.tz)

    def proxima_abertura(self, dia: date) -> datetime:
        """Abertura do primeiro dia útil estritamente posterior a `dia`."""
        proximo = dia + timedelta(days=1)
        while not self.eh_dia_util(proximo):
            proximo += timedelta(days=1)
        return self.abertura(proximo)


HORARIO_PADRAO = HorarioComercial()


def _para_local(instante: datetime, horario: HorarioComercial) -> datetime:
    # Datetimes ingênuos já estão no relógio de parede do fuso local
    if instante.tzinfo is None:
        return instante.replace(tzinfo=horario.tz)
    return instante.astimezone(horario.tz)


def _segundos_entre(inicio: datetime, fim: datetime) -> float:
    return (fim.astimezone(timezone.utc) - inicio.astimezone(timezone.utc)).total_seconds()


def _normalizar_entrada(valor: Any) -> Optional[datetime]:
    """Aceita datetime ou string ISO-8601; qualquer outra coisa vira None."""
    if isinstance(valor, datetime):
        return valor
    if isinstance(valor, str) and valor.strip():
        try:
            return datetime.fromisoformat(valor.strip())
        except ValueError:
            return None
    return None


def calcular_inicio_sla(
    criado_em: datetime,
    horario: HorarioComercial = HORARIO_PADRAO,
) -> datetime:
    """
    Calcula o instante em que a contagem de SLA começa.

    Args:
        criado_em: Instante de abertura do chamado
        horario: Janela de expediente

    Returns:
        Datetime com fuso local: o próprio `criado_em` se dentro do
        expediente, senão a próxima abertura de expediente.
    """
    local = _para_local(criado_em, horario)
    dia = local.date()

    if not horario.eh_dia_util(dia):
        return horario.proxima_abertura(dia)

    if local < horario.abertura(dia):
        return horario.abertura(dia)

    if local >= horario.fechamento(dia):
        return horario.proxima_abertura(dia)

    return local


def calcular_minutos_uteis(
    inicio: datetime,
    agora: datetime,
    horario: HorarioComercial = HORARIO_PADRAO,
) -> int:
    """
    Soma os minutos de expediente entre `inicio` e `agora`.

    Args:
        inicio: Início da contagem (normalmente o início do SLA)
        agora: Instante final da contagem
        horario: Janela de expediente

    Returns:
        Minutos úteis inteiros (segundos acumulados truncados);
        0 se `agora <= inicio`.
    """
    inicio = _para_local(inicio, horario)
    agora = _para_local(agora, horario)

    if agora <= inicio:
        return 0

    segundos = 0.0
    cursor = inicio

    while cursor < agora:
        dia = cursor.date()

        if not horario.eh_dia_util(dia):
            cursor = horario.proxima_abertura(dia)
            continue

        trecho_inicio = max(cursor, horario.abertura(dia))
        trecho_fim = min(horario.fechamento(dia), agora)

        if trecho_fim > trecho_inicio:
            segundos += _segundos_entre(trecho_inicio, trecho_fim)

        cursor = horario.proxima_abertura(dia)

    return int(segundos // 60)


def formatar_tempo_abertura(
    minutos: int,
    horario: HorarioComercial = HORARIO_PADRAO,
) -> str:
    """
    Converte minutos úteis em texto de exibição.

    Args:
        minutos: Minutos úteis decorridos
        horario: Janela de expediente (define quantas horas valem um dia)

    Returns:
        "Aberto há N dia(s)", "Aberto há Hh Mmin" ou "Aberto há Mmin"
    """
    horas = minutos // 60

    if horas >= horario.horas_por_dia:
        dias = horas // horario.horas_por_dia
        return f"Aberto há {dias} dia{'s' if dias > 1 else ''}"

    if horas > 0:
        return f"Aberto há {horas}h {minutos % 60}min"

    return f"Aberto há {minutos}min"


def calcular_tempo_abertura(
    criado_em: Any,
    agora: Optional[datetime] = None,
    horario: HorarioComercial = HORARIO_PADRAO,
) -> str:
    """
    Idade do chamado em tempo útil, pronta para exibição.

    Args:
        criado_em: Instante de abertura (datetime ou string ISO-8601)
        agora: Instante de referência; lido do relógio se omitido
        horario: Janela de expediente

    Returns:
        Texto de exibição; SEM_DATA se `criado_em` ausente ou inválido;
        TEMPO_ZERO se o SLA ainda não começou a contar.
    """
    instante = _normalizar_entrada(criado_em)
    if instante is None:
        return SEM_DATA

    if agora is None:
        agora = datetime.now(horario.tz)

    inicio = calcular_inicio_sla(instante, horario)
    minutos = calcular_minutos_uteis(inicio, agora, horario)

    if minutos == 0:
        return TEMPO_ZERO

    return formatar_tempo_abertura(minutos, horario)
