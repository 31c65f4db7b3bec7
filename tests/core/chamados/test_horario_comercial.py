"""
Testes Unitários do Motor de Horário Comercial.

Calendário usado nos exemplos (março de 2025):
- Seg 03, Ter 04, Qua 05, Qui 06, Sex 07
- Sáb 08, Dom 09, Seg 10

Coverage:
- calcular_inicio_sla
- calcular_minutos_uteis
- formatar_tempo_abertura
- calcular_tempo_abertura
"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from src.core.chamados.horario_comercial import (
    HORARIO_PADRAO,
    SEM_DATA,
    TEMPO_ZERO,
    HorarioComercial,
    calcular_inicio_sla,
    calcular_minutos_uteis,
    calcular_tempo_abertura,
    formatar_tempo_abertura,
)

SP = ZoneInfo("America/Sao_Paulo")


def local(dia, hora, minuto=0):
    return datetime(2025, 3, dia, hora, minuto, tzinfo=SP)


# =============================================================================
# TESTES: Início do SLA
# =============================================================================

class TestCalcularInicioSla:

    def test_dentro_do_expediente_conta_imediatamente(self):
        assert calcular_inicio_sla(local(3, 10, 30)) == local(3, 10, 30)

    def test_antes_do_expediente_vai_para_abertura_do_dia(self):
        assert calcular_inicio_sla(local(3, 7, 30)) == local(3, 9)

    def test_apos_expediente_vai_para_proximo_dia_util(self):
        assert calcular_inicio_sla(local(3, 19)) == local(4, 9)

    def test_exatamente_no_fechamento_conta_como_fora(self):
        assert calcular_inicio_sla(local(4, 18)) == local(5, 9)

    def test_sexta_a_noite_vai_para_segunda(self):
        assert calcular_inicio_sla(local(7, 18, 1)) == local(10, 9)

    @pytest.mark.parametrize("dia", [8, 9])
    def test_fim_de_semana_vai_para_segunda(self, dia):
        assert calcular_inicio_sla(local(dia, 11)) == local(10, 9)

    def test_instante_utc_convertido_para_fuso_local(self):
        # 12:00 UTC = 09:00 em São Paulo
        criado = datetime(2025, 3, 4, 12, 0, tzinfo=timezone.utc)
        assert calcular_inicio_sla(criado) == local(4, 9)

    def test_datetime_ingenuo_interpretado_como_local(self):
        assert calcular_inicio_sla(datetime(2025, 3, 4, 20, 0)) == local(5, 9)

    @pytest.mark.parametrize("criado", [
        local(3, 7), local(3, 10), local(3, 18), local(7, 23), local(8, 12), local(9, 9),
    ])
    def test_idempotente(self, criado):
        inicio = calcular_inicio_sla(criado)
        assert calcular_inicio_sla(inicio) == inicio


# =============================================================================
# TESTES: Minutos Úteis
# =============================================================================

class TestCalcularMinutosUteis:

    def test_mesmo_dia(self):
        assert calcular_minutos_uteis(local(4, 10), local(4, 10, 5)) == 5

    def test_agora_antes_do_inicio_retorna_zero(self):
        assert calcular_minutos_uteis(local(4, 10), local(4, 9)) == 0

    def test_agora_igual_ao_inicio_retorna_zero(self):
        assert calcular_minutos_uteis(local(4, 10), local(4, 10)) == 0

    def test_dia_completo(self):
        assert calcular_minutos_uteis(local(3, 9), local(4, 9)) == 9 * 60

    def test_recorta_fora_do_expediente(self):
        # 17:00-18:00 na segunda + 09:00-10:00 na terça
        assert calcular_minutos_uteis(local(3, 17), local(4, 10)) == 120

    def test_ignora_fim_de_semana(self):
        # Sexta 17:00 até segunda 10:00
        assert calcular_minutos_uteis(local(7, 17), local(10, 10)) == 120

    def test_agora_no_fim_de_semana(self):
        assert calcular_minutos_uteis(local(7, 17), local(9, 15)) == 60

    def test_trunca_segundos(self):
        agora = datetime(2025, 3, 4, 10, 1, 59, tzinfo=SP)
        assert calcular_minutos_uteis(local(4, 10), agora) == 1


# =============================================================================
# TESTES: Formatação
# =============================================================================

class TestFormatarTempoAbertura:

    @pytest.mark.parametrize("minutos, esperado", [
        (0, "Aberto há 0min"),
        (59, "Aberto há 59min"),
        (61, "Aberto há 1h 1min"),
        (539, "Aberto há 8h 59min"),
        (540, "Aberto há 1 dia"),
        (1079, "Aberto há 1 dia"),
        (1080, "Aberto há 2 dias"),
    ])
    def test_formatos(self, minutos, esperado):
        assert formatar_tempo_abertura(minutos) == esperado

    def test_dia_segue_horas_do_expediente(self):
        meio_periodo = HorarioComercial(hora_inicio=8, hora_fim=12)
        assert formatar_tempo_abertura(4 * 60, meio_periodo) == "Aberto há 1 dia"


# =============================================================================
# TESTES: Tempo de Abertura
# =============================================================================

class TestCalcularTempoAbertura:

    def test_minutos(self):
        assert calcular_tempo_abertura(local(4, 10), agora=local(4, 10, 5)) == "Aberto há 5min"

    def test_horas(self):
        assert calcular_tempo_abertura(local(4, 9), agora=local(4, 11, 35)) == "Aberto há 2h 35min"

    def test_nove_horas_uteis_em_dois_dias_vira_um_dia(self):
        assert calcular_tempo_abertura(local(3, 14), agora=local(4, 14)) == "Aberto há 1 dia"

    def test_aberto_no_fim_de_semana_ainda_nao_conta(self):
        assert calcular_tempo_abertura(local(8, 10), agora=local(9, 20)) == TEMPO_ZERO

    def test_aceita_string_iso(self):
        resultado = calcular_tempo_abertura(
            "2025-03-04T10:00:00-03:00", agora=local(4, 10, 30)
        )
        assert resultado == "Aberto há 30min"

    @pytest.mark.parametrize("valor", [None, "", "   ", "ontem", 12345, object()])
    def test_entrada_ausente_ou_invalida(self, valor):
        assert calcular_tempo_abertura(valor, agora=local(4, 10)) == SEM_DATA

    def test_sem_agora_usa_relogio(self):
        # Sábado anterior: a contagem só existe a partir de segunda
        resultado = calcular_tempo_abertura(datetime(2000, 1, 1, 10, 0, tzinfo=SP))
        assert resultado.endswith("dias")


class TestHorarioComercial:

    def test_padrao(self):
        assert HORARIO_PADRAO.hora_inicio == 9
        assert HORARIO_PADRAO.hora_fim == 18
        assert HORARIO_PADRAO.horas_por_dia == 9

    @pytest.mark.parametrize("inicio, fim", [(18, 9), (9, 9), (-1, 10), (9, 24)])
    def test_expediente_invalido(self, inicio, fim):
        with pytest.raises(ValueError):
            HorarioComercial(hora_inicio=inicio, hora_fim=fim)

    def test_proxima_abertura_pula_fim_de_semana(self):
        assert HORARIO_PADRAO.proxima_abertura(local(7, 12).date()) == local(10, 9)
