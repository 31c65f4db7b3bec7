"""
API Views JSON para o domínio de Chamados.

Endpoints (prefixo /chamados/api/):
- GET  /            - Listar chamados (filtros administrativos)
- POST /            - Abrir chamado
- GET  /resumo/     - Resumo para relatório
- GET  /logs/       - Registros de auditoria
- GET  /protocolo/<protocolo>/ - Consultar pelo protocolo
- GET  /busca/?nome= - Consultar por nome
- GET|PATCH|DELETE /<id>/ - Detalhar, editar ou excluir
- POST /<id>/cancelar/    - Cancelar
- GET|POST /<id>/comentarios/ - Listar ou adicionar comentários

Formato:
- Entrada: JSON
- Saída: JSON com estrutura {success, data/error, meta}
"""

import json
import logging
from datetime import date
from typing import Any, Dict, Optional

from django.views import View
from django.http import JsonResponse, HttpRequest
from django.utils.dateparse import parse_date
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt

from src.core.chamados.dtos import (
    FILTRO_TODOS,
    AbrirChamadoInputDTO,
    AdicionarComentarioInputDTO,
    AtualizarChamadoInputDTO,
    CancelarChamadoInputDTO,
    ListarChamadosQueryDTO,
    ListarLogsQueryDTO,
)
from src.core.shared.exceptions import (
    ValidationError,
    EntityNotFoundError,
    BusinessRuleViolationError,
    StoreUnavailableError,
    TransactionAbortedError,
    ConcurrencyError,
    DomainException,
)
from src.config.container import get_container

logger = logging.getLogger(__name__)

CAMPOS_EDITAVEIS = ('status', 'nome', 'telefone', 'assunto', 'descricao')


# =============================================================================
# Helpers
# =============================================================================

def json_response(success: bool, data: Any = None, error: str = None,
                  status: int = 200, meta: Dict = None) -> JsonResponse:
    """
    Cria resposta JSON padronizada.

    Args:
        success: Se operação foi bem sucedida
        data: Dados da resposta
        error: Mensagem de erro (se aplicável)
        status: HTTP status code
        meta: Metadados adicionais
    """
    response = {'success': success}

    if data is not None:
        response['data'] = data

    if error is not None:
        response['error'] = error

    if meta is not None:
        response['meta'] = meta

    return JsonResponse(response, status=status)


def parse_json_body(request: HttpRequest) -> Dict:
    """
    Parseia body JSON do request.

    Raises:
        ValueError: Se JSON inválido ou não for um objeto
    """
    if not request.body:
        return {}

    try:
        data = json.loads(request.body)
    except json.JSONDecodeError as e:
        raise ValueError(f"JSON inválido: {e}")

    if not isinstance(data, dict):
        raise ValueError("O corpo da requisição deve ser um objeto JSON")
    return data


def parse_query_date(request: HttpRequest, name: str) -> Optional[date]:
    """
    Lê data ISO (AAAA-MM-DD) da query string.

    Raises:
        ValidationError: Se a data for inválida
    """
    valor = (request.GET.get(name) or '').strip()
    if not valor:
        return None

    try:
        parsed = parse_date(valor)
    except ValueError:
        parsed = None

    if parsed is None:
        raise ValidationError(f"Data inválida: {valor}", field=name)
    return parsed


def tamanho_anexo(anexo: Dict) -> int:
    """
    Tamanho do anexo em bytes.

    Usa o maior entre o tamanho declarado e o estimado a partir do
    conteúdo base64 da data URL.
    """
    try:
        declarado = int(anexo.get('tamanho') or 0)
    except (TypeError, ValueError):
        raise ValidationError("Tamanho do anexo inválido", field="anexo")

    dados = anexo.get('dados') or ''
    conteudo = dados.split(',', 1)[1] if ',' in dados else dados
    padding = len(conteudo) - len(conteudo.rstrip('='))
    estimado = (len(conteudo) * 3) // 4 - padding

    return max(declarado, estimado, 0)


# =============================================================================
# Base API View
# =============================================================================

@method_decorator(csrf_exempt, name='dispatch')
class BaseAPIView(View):
    """
    View base para APIs JSON.

    Fornece:
    - Parsing de JSON
    - Acesso aos services do container DI
    - Tratamento de erros padronizado
    """

    def get_container(self):
        return get_container()

    def get_service(self, service_name: str):
        """Obtém service do container pelo nome do provider."""
        return getattr(self.get_container(), service_name)()

    def parse_body(self, request: HttpRequest) -> Dict:
        return parse_json_body(request)

    def listar_query(self, request: HttpRequest) -> ListarChamadosQueryDTO:
        """Filtros administrativos a partir da query string."""
        return ListarChamadosQueryDTO(
            status=request.GET.get('status') or FILTRO_TODOS,
            texto=request.GET.get('texto') or None,
            data_inicio=parse_query_date(request, 'data_inicio'),
            data_fim=parse_query_date(request, 'data_fim'),
        )

    def handle_exception(self, e: Exception) -> JsonResponse:
        """
        Trata exceções e retorna resposta apropriada.

        Mapeamento:
            ValidationError → 400
            EntityNotFoundError → 404
            BusinessRuleViolationError → 422
            TransactionAbortedError, StoreUnavailableError → 503
            ConcurrencyError → 409
            DomainException, ValueError → 400
            Demais → 500
        """
        if isinstance(e, ValidationError):
            return json_response(
                success=False,
                error=str(e),
                status=400,
                meta={'field': getattr(e, 'field', None)}
            )

        if isinstance(e, EntityNotFoundError):
            return json_response(
                success=False,
                error=str(e),
                status=404
            )

        if isinstance(e, BusinessRuleViolationError):
            return json_response(
                success=False,
                error=str(e),
                status=422,
                meta={'rule': getattr(e, 'rule', None)}
            )

        if isinstance(e, TransactionAbortedError):
            return json_response(
                success=False,
                error=str(e),
                status=503,
                meta={'tentativas': e.tentativas}
            )

        if isinstance(e, StoreUnavailableError):
            return json_response(
                success=False,
                error=str(e),
                status=503
            )

        if isinstance(e, ConcurrencyError):
            return json_response(
                success=False,
                error=str(e),
                status=409
            )

        if isinstance(e, DomainException):
            return json_response(
                success=False,
                error=str(e),
                status=400
            )

        if isinstance(e, ValueError):
            return json_response(
                success=False,
                error=str(e),
                status=400
            )

        logger.exception(f"Erro inesperado na API: {e}")
        return json_response(
            success=False,
            error="Erro interno do servidor",
            status=500
        )


# =============================================================================
# Chamado API Views
# =============================================================================

class ChamadoAPIListView(BaseAPIView):
    """
    GET /chamados/api/ - Lista chamados
    POST /chamados/api/ - Abre chamado
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        """
        Lista chamados com filtros opcionais.

        Query params:
        - status: Status do chamado ou TODOS (default)
        - texto: Trecho de nome ou assunto
        - data_inicio / data_fim: Período de abertura (AAAA-MM-DD)
        """
        try:
            query = self.listar_query(request)
            chamados = self.get_service('listar_chamados_service').execute(query)

            return json_response(
                success=True,
                data=[c.to_dict() for c in chamados],
                meta={'total': len(chamados), 'filtros': query.to_dict()}
            )

        except Exception as e:
            return self.handle_exception(e)

    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Abre novo chamado.

        Body JSON:
        {
            "nome": "string (obrigatório)",
            "telefone": "string (opcional)",
            "categoria": "string (obrigatório)",
            "assunto": "string (obrigatório)",
            "urgencia": "string (obrigatório)",
            "descricao": "string (obrigatório)",
            "anexo": {"nome", "tipo", "dados", "tamanho"} (opcional)
        }
        """
        try:
            data = self.parse_body(request)
            anexo = data.get('anexo') or {}
            if not isinstance(anexo, dict):
                raise ValidationError("Anexo inválido", field="anexo")

            input_dto = AbrirChamadoInputDTO(
                nome=data.get('nome', ''),
                telefone=data.get('telefone'),
                categoria=data.get('categoria', ''),
                assunto=data.get('assunto', ''),
                urgencia=data.get('urgencia', ''),
                descricao=data.get('descricao', ''),
                anexo_nome=anexo.get('nome'),
                anexo_tipo=anexo.get('tipo', ''),
                anexo_dados=anexo.get('dados', ''),
                anexo_tamanho=tamanho_anexo(anexo) if anexo else 0,
            )

            output = self.get_service('abrir_chamado_service').execute(input_dto)

            logger.info(f"API: Chamado aberto: {output.protocolo}")

            return json_response(
                success=True,
                data=output.to_dict(),
                status=201
            )

        except Exception as e:
            return self.handle_exception(e)


class ChamadoAPIDetailView(BaseAPIView):
    """
    GET /chamados/api/<id>/ - Detalha chamado
    PATCH /chamados/api/<id>/ - Edita chamado
    DELETE /chamados/api/<id>/ - Exclui chamado
    """

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            chamado = self.get_service('obter_chamado_service').execute(pk)
            return json_response(success=True, data=chamado.to_dict())

        except Exception as e:
            return self.handle_exception(e)

    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        """
        Body JSON com qualquer subconjunto de:
        status, nome, telefone, assunto, descricao
        """
        try:
            data = self.parse_body(request)
            campos = {k: data[k] for k in CAMPOS_EDITAVEIS if k in data}

            if not campos:
                return json_response(
                    success=False,
                    error="Nenhum campo válido para atualização",
                    status=400
                )

            input_dto = AtualizarChamadoInputDTO(chamado_id=pk, **campos)
            output = self.get_service('atualizar_chamado_service').execute(input_dto)

            return json_response(success=True, data=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)

    def delete(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            self.get_service('excluir_chamado_service').execute(pk)
            logger.info(f"API: Chamado {pk} excluído")
            return json_response(success=True, data={'id': pk})

        except Exception as e:
            return self.handle_exception(e)


class ChamadoAPIProtocoloView(BaseAPIView):
    """GET /chamados/api/protocolo/<protocolo>/"""

    def get(self, request: HttpRequest, protocolo: str) -> JsonResponse:
        try:
            service = self.get_service('buscar_chamado_por_protocolo_service')
            chamado = service.execute(protocolo)
            return json_response(success=True, data=chamado.to_dict())

        except Exception as e:
            return self.handle_exception(e)


class ChamadoAPIBuscaNomeView(BaseAPIView):
    """GET /chamados/api/busca/?nome=<trecho>"""

    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            service = self.get_service('buscar_chamados_por_nome_service')
            chamados = service.execute(request.GET.get('nome', ''))

            return json_response(
                success=True,
                data=[c.to_dict() for c in chamados],
                meta={'total': len(chamados)}
            )

        except Exception as e:
            return self.handle_exception(e)


class ChamadoAPICancelarView(BaseAPIView):
    """POST /chamados/api/<id>/cancelar/"""

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            service = self.get_service('cancelar_chamado_service')
            output = service.execute(CancelarChamadoInputDTO(chamado_id=pk))

            logger.info(f"API: Chamado {output.protocolo} cancelado")

            return json_response(success=True, data=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)


class ChamadoAPIComentariosView(BaseAPIView):
    """
    GET /chamados/api/<id>/comentarios/ - Lista comentários
    POST /chamados/api/<id>/comentarios/ - Adiciona comentário
    """

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            comentarios = self.get_service('listar_comentarios_service').execute(pk)
            return json_response(
                success=True,
                data=[c.to_dict() for c in comentarios],
                meta={'total': len(comentarios)}
            )

        except Exception as e:
            return self.handle_exception(e)

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        """
        Body JSON:
        {
            "texto": "string (obrigatório)",
            "autor_tipo": "USUARIO|ADM (default: USUARIO)",
            "autor_nome": "string (opcional)"
        }
        """
        try:
            data = self.parse_body(request)

            input_dto = AdicionarComentarioInputDTO(
                chamado_id=pk,
                texto=data.get('texto', ''),
                autor_tipo=data.get('autor_tipo', 'USUARIO'),
                autor_nome=data.get('autor_nome', ''),
            )
            output = self.get_service('adicionar_comentario_service').execute(input_dto)

            return json_response(success=True, data=output.to_dict(), status=201)

        except Exception as e:
            return self.handle_exception(e)


class ChamadoAPIResumoView(BaseAPIView):
    """
    GET /chamados/api/resumo/

    Aceita os mesmos filtros da listagem.
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            query = self.listar_query(request)
            resumo = self.get_service('resumo_chamados_service').execute(query)

            return json_response(
                success=True,
                data=resumo.to_dict(),
                meta={'filtros': query.to_dict()}
            )

        except Exception as e:
            return self.handle_exception(e)


class LogAPIListView(BaseAPIView):
    """
    GET /chamados/api/logs/

    Query params: data_inicio, data_fim (AAAA-MM-DD), tipo
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            query = ListarLogsQueryDTO(
                data_inicio=parse_query_date(request, 'data_inicio'),
                data_fim=parse_query_date(request, 'data_fim'),
                tipo=request.GET.get('tipo') or None,
            )
            logs = self.get_service('listar_logs_service').execute(query)

            return json_response(
                success=True,
                data=[log.to_dict() for log in logs],
                meta={'total': len(logs)}
            )

        except Exception as e:
            return self.handle_exception(e)
