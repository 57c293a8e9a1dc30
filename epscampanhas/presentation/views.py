# epscampanhas/presentation/views.py
"""
API REST das operações do dia a dia: campanhas, submissões, ganhos, prêmios,
notificações, atividades, painéis e ranking.

As views apenas validam a entrada, chamam o caso de uso e serializam o retorno.
Erros da Core são convertidos em respostas HTTP por presentation.excecoes.
"""
import logging

from django.conf import settings
from rest_framework import status
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from epscampanhas.core.dependency_injection import (
    get_gerenciar_campanhas_use_case, get_criar_submissao_use_case, get_validar_submissao_use_case,
    get_gerenciar_submissoes_use_case, get_gerenciar_ganhos_use_case, get_resgatar_premio_use_case,
    get_gerenciar_premios_use_case, get_gerenciar_notificacoes_use_case, get_listar_atividades_use_case,
    get_dashboard_use_case,
)
from .autenticacao import ator
from .permissions import EhAdministrador, EhGerenteOuAdministrador
from .serializers import (
    serializar, CampanhaEntradaSerializer, StatusCampanhaSerializer, SubmissaoEntradaSerializer,
    SubmissaoAtualizacaoSerializer, ValidacaoSubmissaoSerializer, ValidacaoLoteSerializer,
    TransferenciaSubmissaoSerializer, DuplicacaoSubmissaoSerializer, FiltrosGanhoSerializer,
    PremioEntradaSerializer, EstoqueSerializer, ImportacaoPremiosSerializer,
)

logger = logging.getLogger(__name__)


# ====================================================================
# HELPERS DE REQUISIÇÃO
# ====================================================================

def paginacao(request):
    """Lê ?pagina= e ?limite=; valores inválidos são recusados pela Core."""
    limite = request.query_params.get('limite', settings.PAGINACAO_LIMITE_PADRAO)
    try:
        limite = min(int(limite), settings.PAGINACAO_LIMITE_MAXIMO)
    except (TypeError, ValueError):
        pass
    return request.query_params.get('pagina', 1), limite


def filtros_da_query(request, *campos):
    return {campo: request.query_params[campo] for campo in campos if request.query_params.get(campo) not in (None, '')}


def booleano(valor):
    """'true'/'false' da query string; None quando ausente."""
    if valor in (None, ''):
        return None
    return str(valor).lower() in ('1', 'true', 'sim', 'yes')


def validar(serializer_class, data, partial=False):
    serializer = serializer_class(data=data, partial=partial)
    serializer.is_valid(raise_exception=True)
    return dict(serializer.validated_data)


# ====================================================================
# 1. CAMPANHAS
# ====================================================================

class CampanhaListaAPIView(APIView):
    """GET: campanhas visíveis ao usuário. POST: cria campanha (admin)."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        pagina, limite = paginacao(request)
        resultado = get_gerenciar_campanhas_use_case().listar(
            ator(request), filtros_da_query(request, 'status', 'busca'), pagina, limite
        )
        return Response(serializar(resultado))

    def post(self, request):
        dados = validar(CampanhaEntradaSerializer, request.data)
        campanha = get_gerenciar_campanhas_use_case().criar(ator(request), dados)
        return Response(serializar(campanha), status=status.HTTP_201_CREATED)


class CampanhaDetalheAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, campanha_id):
        """Campanha com a cartela atual do usuário e o progresso de cada meta."""
        return Response(serializar(get_gerenciar_campanhas_use_case().detalhar(ator(request), campanha_id)))

    def patch(self, request, campanha_id):
        dados = validar(CampanhaEntradaSerializer, request.data, partial=True)
        campanha = get_gerenciar_campanhas_use_case().atualizar(ator(request), campanha_id, dados)
        return Response(serializar(campanha))

    put = patch

    def delete(self, request, campanha_id):
        get_gerenciar_campanhas_use_case().excluir(ator(request), campanha_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CampanhaStatusAPIView(APIView):
    permission_classes = [EhAdministrador]

    def patch(self, request, campanha_id):
        dados = validar(StatusCampanhaSerializer, request.data)
        campanha = get_gerenciar_campanhas_use_case().alternar_status(ator(request), campanha_id, dados['status'])
        return Response(serializar(campanha))


class CampanhaDuplicarAPIView(APIView):
    permission_classes = [EhAdministrador]

    def post(self, request, campanha_id):
        campanha = get_gerenciar_campanhas_use_case().duplicar(ator(request), campanha_id)
        return Response(serializar(campanha), status=status.HTTP_201_CREATED)


class CampanhaEstatisticasAPIView(APIView):
    permission_classes = [EhGerenteOuAdministrador]

    def get(self, request, campanha_id):
        return Response(serializar(get_gerenciar_campanhas_use_case().estatisticas(ator(request), campanha_id)))


class CampanhasAtivasAPIView(APIView):
    """Campanhas ativas no período, com o progresso do usuário logado."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(serializar(get_gerenciar_campanhas_use_case().ativas_para_usuario(ator(request).id)))


# ====================================================================
# 2. SUBMISSÕES
# ====================================================================

FILTROS_SUBMISSAO = (
    'status', 'campanha_id', 'usuario_id', 'meta_id', 'kit_id', 'busca',
    'data_inicio', 'data_fim', 'quantidade_min', 'quantidade_max',
)


class SubmissaoListaAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        pagina, limite = paginacao(request)
        resultado = get_gerenciar_submissoes_use_case().listar(
            ator(request), filtros_da_query(request, *FILTROS_SUBMISSAO), pagina, limite
        )
        return Response(serializar(resultado))

    def post(self, request):
        """Vendedor declara uma venda para uma meta da campanha."""
        dados = validar(SubmissaoEntradaSerializer, request.data)
        submissao = get_criar_submissao_use_case().executar(ator(request), dados)
        return Response(serializar(submissao), status=status.HTTP_201_CREATED)


class SubmissaoDetalheAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, submissao_id):
        return Response(serializar(get_gerenciar_submissoes_use_case().obter(ator(request), submissao_id)))

    def patch(self, request, submissao_id):
        dados = validar(SubmissaoAtualizacaoSerializer, request.data, partial=True)
        submissao = get_gerenciar_submissoes_use_case().atualizar(ator(request), submissao_id, dados)
        return Response(serializar(submissao))

    def delete(self, request, submissao_id):
        get_gerenciar_submissoes_use_case().excluir(ator(request), submissao_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class SubmissaoValidarAPIView(APIView):
    permission_classes = [EhGerenteOuAdministrador]

    def post(self, request, submissao_id):
        dados = validar(ValidacaoSubmissaoSerializer, request.data)
        submissao, ganhos = get_validar_submissao_use_case().executar_detalhado(
            ator(request), submissao_id, dados['status'], dados.get('mensagem')
        )
        return Response({'submissao': serializar(submissao), 'ganhos': serializar(ganhos)})


class SubmissaoValidacaoLoteAPIView(APIView):
    permission_classes = [EhGerenteOuAdministrador]

    def post(self, request):
        dados = validar(ValidacaoLoteSerializer, request.data)
        resultado = get_validar_submissao_use_case().validar_em_lote(
            ator(request), dados['submissao_ids'], dados['acao'], dados.get('mensagem')
        )
        return Response(resultado)


class SubmissoesPendentesAPIView(APIView):
    permission_classes = [EhGerenteOuAdministrador]

    def get(self, request):
        pagina, limite = paginacao(request)
        return Response(serializar(get_gerenciar_submissoes_use_case().pendentes(ator(request), pagina, limite)))


class SubmissaoEstatisticasAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        resultado = get_gerenciar_submissoes_use_case().estatisticas_usuario(
            ator(request), request.query_params.get('usuario_id')
        )
        return Response(resultado)


class SubmissoesPorKitAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, kit_id):
        return Response(serializar(get_gerenciar_submissoes_use_case().por_kit(ator(request), kit_id)))


class SubmissaoTransferirAPIView(APIView):
    permission_classes = [EhAdministrador]

    def post(self, request, submissao_id):
        dados = validar(TransferenciaSubmissaoSerializer, request.data)
        submissao = get_gerenciar_submissoes_use_case().transferir(ator(request), submissao_id, dados['kit_destino_id'])
        return Response(serializar(submissao))


class SubmissaoDuplicarAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, submissao_id):
        dados = validar(DuplicacaoSubmissaoSerializer, request.data)
        submissao = get_gerenciar_submissoes_use_case().duplicar(ator(request), submissao_id, dados['numero_pedido'])
        return Response(serializar(submissao), status=status.HTTP_201_CREATED)


class SubmissaoRelatorioAPIView(APIView):
    permission_classes = [EhGerenteOuAdministrador]

    def get(self, request):
        resultado = get_gerenciar_submissoes_use_case().relatorio(
            ator(request), filtros_da_query(request, *FILTROS_SUBMISSAO)
        )
        return Response(serializar(resultado))


# ====================================================================
# 3. GANHOS
# ====================================================================

class GanhoListaAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        filtros = validar(FiltrosGanhoSerializer, request.query_params)
        pagina, limite = paginacao(request)
        resultado = get_gerenciar_ganhos_use_case().listar(ator(request), filtros, pagina, limite)
        return Response(serializar(resultado))


class GanhoResumoAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(get_gerenciar_ganhos_use_case().resumo(ator(request)))


class GanhoPagarAPIView(APIView):
    permission_classes = [EhAdministrador]

    def post(self, request, ganho_id):
        return Response(serializar(get_gerenciar_ganhos_use_case().marcar_como_pago(ator(request), ganho_id)))


class GanhoCancelarAPIView(APIView):
    permission_classes = [EhAdministrador]

    def post(self, request, ganho_id):
        return Response(serializar(get_gerenciar_ganhos_use_case().cancelar(ator(request), ganho_id)))


# ====================================================================
# 4. PRÊMIOS
# ====================================================================

class PremioListaAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        filtros = filtros_da_query(request, 'categoria', 'busca', 'pontos_max')
        if booleano(request.query_params.get('ativo')) is not None:
            filtros['ativo'] = booleano(request.query_params.get('ativo'))
        pagina, limite = paginacao(request)
        return Response(serializar(get_gerenciar_premios_use_case().listar(ator(request), filtros, pagina, limite)))

    def post(self, request):
        dados = validar(PremioEntradaSerializer, request.data)
        premio = get_gerenciar_premios_use_case().criar(ator(request), dados)
        return Response(serializar(premio), status=status.HTTP_201_CREATED)


class PremioDetalheAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, premio_id):
        return Response(serializar(get_gerenciar_premios_use_case().obter(premio_id)))

    def patch(self, request, premio_id):
        dados = validar(PremioEntradaSerializer, request.data, partial=True)
        return Response(serializar(get_gerenciar_premios_use_case().atualizar(ator(request), premio_id, dados)))

    def delete(self, request, premio_id):
        get_gerenciar_premios_use_case().excluir(ator(request), premio_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class PremioResgatarAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, premio_id):
        resgate = get_resgatar_premio_use_case().executar(ator(request), premio_id)
        return Response(serializar(resgate), status=status.HTTP_201_CREATED)


class PremioEstoqueAPIView(APIView):
    permission_classes = [EhAdministrador]

    def post(self, request, premio_id):
        dados = validar(EstoqueSerializer, request.data)
        premio = get_gerenciar_premios_use_case().atualizar_estoque(
            ator(request), premio_id, dados['quantidade'], dados['operacao'], dados.get('motivo')
        )
        return Response(serializar(premio))


class PremioPodeResgatarAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, premio_id):
        resultado = get_gerenciar_premios_use_case().pode_resgatar(
            ator(request), premio_id, request.query_params.get('usuario_id')
        )
        return Response(resultado)


class PremiosDisponiveisAPIView(APIView):
    """Prêmios que o usuário já pode resgatar com os pontos atuais."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        premios = get_gerenciar_premios_use_case().disponiveis_para_usuario(
            ator(request), request.query_params.get('usuario_id')
        )
        return Response(serializar(premios))


class PremiosCatalogoAPIView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        return Response(serializar(get_gerenciar_premios_use_case().catalogo_publico()))


class PremiosPopularesAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        limite = request.query_params.get('limite', 10)
        try:
            limite = max(1, min(int(limite), 50))
        except ValueError:
            limite = 10
        return Response(serializar(get_gerenciar_premios_use_case().populares(limite)))


class HistoricoResgatesAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        resgates = get_gerenciar_premios_use_case().historico_usuario(
            ator(request), request.query_params.get('usuario_id')
        )
        return Response(serializar(resgates))


class PremiosEstoqueBaixoAPIView(APIView):
    permission_classes = [EhAdministrador]

    def get(self, request):
        try:
            limite = int(request.query_params.get('limite', 5))
        except ValueError:
            limite = 5
        return Response(serializar(get_gerenciar_premios_use_case().estoque_baixo(ator(request), limite)))


class PremiosSemEstoqueAPIView(APIView):
    permission_classes = [EhAdministrador]

    def get(self, request):
        return Response(serializar(get_gerenciar_premios_use_case().sem_estoque(ator(request))))


class PremioEstatisticasAPIView(APIView):
    permission_classes = [EhAdministrador]

    def get(self, request):
        return Response(get_gerenciar_premios_use_case().estatisticas(ator(request)))


class PremiosImportarAPIView(APIView):
    permission_classes = [EhAdministrador]

    def post(self, request):
        dados = validar(ImportacaoPremiosSerializer, request.data)
        resultado = get_gerenciar_premios_use_case().importar_em_lote(ator(request), dados['premios'])
        return Response(resultado, status=status.HTTP_201_CREATED if resultado['sucesso'] else status.HTTP_200_OK)


# ====================================================================
# 5. NOTIFICAÇÕES E ATIVIDADES
# ====================================================================

class NotificacaoListaAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        pagina, limite = paginacao(request)
        resultado = get_gerenciar_notificacoes_use_case().listar(
            ator(request), booleano(request.query_params.get('lida')), pagina, limite
        )
        return Response(serializar(resultado))


class NotificacaoLidaAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def patch(self, request, notificacao_id):
        notificacao = get_gerenciar_notificacoes_use_case().marcar_como_lida(ator(request), notificacao_id)
        return Response(serializar(notificacao))


class NotificacoesMarcarTodasAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        total = get_gerenciar_notificacoes_use_case().marcar_todas_como_lidas(ator(request))
        return Response({'atualizadas': total})


class NotificacoesNaoLidasAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({'nao_lidas': get_gerenciar_notificacoes_use_case().contar_nao_lidas(ator(request))})


class AtividadeListaAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        pagina, limite = paginacao(request)
        resultado = get_listar_atividades_use_case().executar(
            ator(request), request.query_params.get('usuario_id'), pagina, limite
        )
        return Response(serializar(resultado))


# ====================================================================
# 6. PAINÉIS E RANKING
# ====================================================================

class DashboardVendedorAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        painel = get_dashboard_use_case().vendedor(ator(request), request.query_params.get('usuario_id'))
        return Response(serializar(painel))


class DashboardGerenteAPIView(APIView):
    permission_classes = [EhGerenteOuAdministrador]

    def get(self, request):
        painel = get_dashboard_use_case().gerente(ator(request), request.query_params.get('gerente_id'))
        return Response(serializar(painel))


class DashboardAdminAPIView(APIView):
    permission_classes = [EhAdministrador]

    def get(self, request):
        return Response(serializar(get_dashboard_use_case().admin(ator(request))))


class RankingAPIView(APIView):
    """?filtro=Geral|Mensal|Semanal&limite=N"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        try:
            limite = int(request.query_params.get('limite', 10))
        except ValueError:
            limite = 10
        ranking = get_dashboard_use_case().ranking(request.query_params.get('filtro', 'Geral'), limite)
        return Response(ranking)
