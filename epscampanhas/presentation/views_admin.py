# epscampanhas/presentation/views_admin.py
"""
Views administrativas: gestão de usuários e jobs de validação de vendas por planilha.
"""
import logging

from django.http import HttpResponse
from rest_framework import status
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from epscampanhas.core.dependency_injection import (
    get_gerenciar_usuarios_use_case, get_registrar_usuario_use_case, get_gerenciar_jobs_validacao_use_case,
)
from .autenticacao import ator
from .permissions import EhAdministrador, EhGerenteOuAdministrador
from .serializers import (
    serializar, RegistroSerializer, UsuarioAtualizacaoSerializer, StatusUsuarioSerializer,
    PlanilhaValidacaoSerializer, JobValidacaoDetalheSerializer,
)
from .views import paginacao, filtros_da_query, booleano

logger = logging.getLogger(__name__)


# ====================================================================
# 1. USUÁRIOS
# ====================================================================

class UsuarioListaAPIView(APIView):
    """GET: admin vê todos, gerente vê a própria equipe. POST: cadastro feito pelo admin."""
    permission_classes = [EhGerenteOuAdministrador]

    def get(self, request):
        pagina, limite = paginacao(request)
        resultado = get_gerenciar_usuarios_use_case().listar(
            ator(request), filtros_da_query(request, 'papel', 'status', 'gerente_id', 'busca', 'cpf'), pagina, limite
        )
        return Response(serializar(resultado))

    def post(self, request):
        serializer = RegistroSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        usuario = get_registrar_usuario_use_case().executar(dict(serializer.validated_data), ator=ator(request))
        return Response(serializar(usuario), status=status.HTTP_201_CREATED)


class UsuarioDetalheAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, usuario_id):
        return Response(serializar(get_gerenciar_usuarios_use_case().obter(ator(request), usuario_id)))

    def patch(self, request, usuario_id):
        serializer = UsuarioAtualizacaoSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        usuario = get_gerenciar_usuarios_use_case().atualizar(ator(request), usuario_id, dict(serializer.validated_data))
        return Response(serializar(usuario))

    def delete(self, request, usuario_id):
        get_gerenciar_usuarios_use_case().excluir(ator(request), usuario_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class UsuarioStatusAPIView(APIView):
    permission_classes = [EhAdministrador]

    def patch(self, request, usuario_id):
        serializer = StatusUsuarioSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        usuario = get_gerenciar_usuarios_use_case().definir_status(
            ator(request), usuario_id, serializer.validated_data['status']
        )
        return Response(serializar(usuario))


class VendedoresDoGerenteAPIView(APIView):
    """Equipe de um gerente; sem gerente_id na rota, a do próprio gerente logado."""
    permission_classes = [EhGerenteOuAdministrador]

    def get(self, request, gerente_id=None):
        vendedores = get_gerenciar_usuarios_use_case().vendedores_do_gerente(ator(request), gerente_id)
        return Response(serializar(vendedores))


class UsuarioEstatisticasAPIView(APIView):
    permission_classes = [EhAdministrador]

    def get(self, request):
        return Response(get_gerenciar_usuarios_use_case().estatisticas(ator(request)))


# ====================================================================
# 2. JOBS DE VALIDAÇÃO (PLANILHAS)
# ====================================================================

def _ler_upload(request):
    serializer = PlanilhaValidacaoSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    dados = serializer.validated_data
    arquivo = dados['arquivo']
    return arquivo.read(), arquivo.name, dados['mapeamentos'], dados.get('configuracao')


class JobValidacaoListaAPIView(APIView):
    """
    GET: histórico de jobs.
    POST: envia a planilha (multipart: arquivo, mapeamentos, configuracao) e processa as linhas.
    """
    permission_classes = [EhAdministrador]
    parser_classes = [MultiPartParser, FormParser]

    def get(self, request):
        filtros = filtros_da_query(request, 'status', 'admin_id', 'campanha_id', 'busca')
        if booleano(request.query_params.get('simulacao')) is not None:
            filtros['simulacao'] = booleano(request.query_params.get('simulacao'))
        pagina, limite = paginacao(request)
        return Response(serializar(get_gerenciar_jobs_validacao_use_case().listar(ator(request), filtros, pagina, limite)))

    def post(self, request):
        conteudo, nome_arquivo, mapeamentos, configuracao = _ler_upload(request)
        job = get_gerenciar_jobs_validacao_use_case().enviar_planilha(
            ator(request), conteudo, nome_arquivo, mapeamentos, configuracao
        )
        return Response(JobValidacaoDetalheSerializer(job).data, status=status.HTTP_201_CREATED)


class JobValidacaoPreVisualizarAPIView(APIView):
    """Valida as primeiras linhas sem gravar nada."""
    permission_classes = [EhAdministrador]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        conteudo, nome_arquivo, mapeamentos, configuracao = _ler_upload(request)
        resultado = get_gerenciar_jobs_validacao_use_case().pre_visualizar(
            ator(request), conteudo, nome_arquivo, mapeamentos, configuracao
        )
        return Response(resultado)


class JobValidacaoDetalheAPIView(APIView):
    permission_classes = [EhAdministrador]

    def get(self, request, job_id):
        job = get_gerenciar_jobs_validacao_use_case().obter(ator(request), job_id)
        return Response(JobValidacaoDetalheSerializer(job).data)

    def delete(self, request, job_id):
        get_gerenciar_jobs_validacao_use_case().excluir(ator(request), job_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class JobValidacaoReprocessarAPIView(APIView):
    permission_classes = [EhAdministrador]

    def post(self, request, job_id):
        forcar = bool(booleano(request.query_params.get('forcar')))
        job = get_gerenciar_jobs_validacao_use_case().reprocessar(ator(request), job_id, forcar)
        return Response(JobValidacaoDetalheSerializer(job).data)


class JobValidacaoExportarAPIView(APIView):
    """Resultado linha a linha em CSV."""
    permission_classes = [EhAdministrador]

    def get(self, request, job_id):
        conteudo = get_gerenciar_jobs_validacao_use_case().exportar_resultados(ator(request), job_id)
        response = HttpResponse(conteudo, content_type='text/csv; charset=utf-8')
        response['Content-Disposition'] = f'attachment; filename="validacao_{job_id}.csv"'
        return response


class JobValidacaoEstatisticasAPIView(APIView):
    permission_classes = [EhAdministrador]

    def get(self, request):
        periodo = request.query_params.get('periodo', '30d')
        return Response(serializar(get_gerenciar_jobs_validacao_use_case().estatisticas(ator(request), periodo)))
