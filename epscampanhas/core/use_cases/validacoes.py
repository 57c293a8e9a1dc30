# epscampanhas/core/use_cases/validacoes.py
"""
Validação de vendas a partir de planilhas enviadas pelo administrador.

Cada linha da planilha é mapeada para os campos de destino (pedido, CPF do vendedor,
CNPJ da ótica, data e valor da venda), validada e, fora do modo simulação, usada para
validar a submissão pendente correspondente pelo fluxo normal de validação.
"""
import logging
import os
import time
from datetime import timedelta
from decimal import Decimal
from typing import Optional, Dict, Any, List, Set

from epscampanhas.core.entities import (
    JobValidacao, Usuario, Pagina, CampoAlvo, StatusJobValidacao, StatusLinhaValidacao,
    StatusSubmissao, TipoAtividade, agora,
)
from epscampanhas.core.exceptions import (
    BaseErroCore, JobValidacaoNaoEncontradoError, CampanhaNaoEncontradaError,
    DadosInvalidosError, OperacaoNaoPermitidaError, StatusInvalidoError,
)
from epscampanhas.core.ports import (
    IJobValidacaoRepository, ISubmissaoRepository, IUsuarioRepository, ICampanhaRepository, ILeitorPlanilha,
)
from epscampanhas.core.validadores import somente_digitos, cpf_valido, cnpj_valido, interpretar_data, interpretar_valor
from epscampanhas.core.use_cases.acesso import exigir_admin, normalizar_paginacao
from epscampanhas.core.use_cases.atividades import RegistrarAtividadeUseCase
from epscampanhas.core.use_cases.ganhos import pontos_do_valor
from epscampanhas.core.use_cases.submissoes import ValidarSubmissaoUseCase

logger = logging.getLogger(__name__)

EXTENSOES_SUPORTADAS = ('.csv',)
LINHAS_PRE_VISUALIZACAO = 10
TITULO_VALIDACAO_MANUAL = 'Validação Manual'

PERIODOS_ESTATISTICAS = {'7d': 7, '30d': 30, '90d': 90, 'all': None}

NOMES_CAMPOS = {
    CampoAlvo.NUMERO_PEDIDO: 'Número do Pedido',
    CampoAlvo.CPF_VENDEDOR: 'CPF do Vendedor',
}


def configuracao_padrao(carencia_dias: int) -> Dict[str, Any]:
    return {
        'campanha_id': None,
        'simulacao': False,
        'validar_cpf': True,
        'validar_cnpj': True,
        'validar_datas': True,
        'periodo_carencia_dias': carencia_dias,
        'valor_minimo': None,
        'valor_maximo': None,
    }


def validar_mapeamentos(mapeamentos: Dict[str, str]) -> Dict[str, str]:
    if not isinstance(mapeamentos, dict) or not mapeamentos:
        raise DadosInvalidosError("Informe o mapeamento das colunas da planilha.")
    invalidos = [campo for campo in mapeamentos.values() if campo not in CampoAlvo.TODOS]
    if invalidos:
        raise DadosInvalidosError(f"Campo de destino inválido: {', '.join(invalidos)}")
    mapeados = set(mapeamentos.values())
    if CampoAlvo.NUMERO_PEDIDO not in mapeados or CampoAlvo.CPF_VENDEDOR not in mapeados:
        raise DadosInvalidosError("O mapeamento deve incluir as colunas de número do pedido e CPF do vendedor.")
    return mapeamentos


def mapear_linha(linha: List[str], cabecalhos: List[str], mapeamentos: Dict[str, str]) -> Dict[str, str]:
    """Converte uma linha da planilha em {campo_alvo: valor}. Colunas IGNORE ou sem mapeamento são descartadas."""
    dados = {}
    for indice, cabecalho in enumerate(cabecalhos):
        campo = mapeamentos.get(cabecalho)
        if not campo or campo == CampoAlvo.IGNORAR:
            continue
        valor = linha[indice] if indice < len(linha) else ''
        dados[campo] = str(valor if valor is not None else '').strip()
    return dados


def validar_linha(dados: Dict[str, str], config: Dict[str, Any], numero_linha: int,
                  pedidos_vistos: Optional[Set[str]] = None) -> Dict[str, Any]:
    """Aplica as regras de validação a uma linha já mapeada."""
    resultado = {
        'linha': numero_linha,
        'status': StatusLinhaValidacao.VALIDA,
        'mensagem': 'Linha válida',
        'avisos': [],
        'dados': dados,
        'submissao_id': None,
        'pontos': 0,
    }

    def erro(mensagem):
        resultado['status'] = StatusLinhaValidacao.ERRO
        resultado['mensagem'] = mensagem
        return resultado

    def aviso(mensagem):
        resultado['status'] = StatusLinhaValidacao.AVISO
        resultado['avisos'].append(mensagem)

    for campo in (CampoAlvo.NUMERO_PEDIDO, CampoAlvo.CPF_VENDEDOR):
        if not dados.get(campo):
            return erro(f"Campo obrigatório ausente: {NOMES_CAMPOS[campo]}")

    if config.get('validar_cpf', True) and not cpf_valido(dados[CampoAlvo.CPF_VENDEDOR]):
        return erro("CPF inválido")

    cnpj = dados.get(CampoAlvo.CNPJ_OTICA)
    if cnpj and config.get('validar_cnpj', True) and not cnpj_valido(cnpj):
        return erro("CNPJ inválido")

    if pedidos_vistos is not None:
        pedido = dados[CampoAlvo.NUMERO_PEDIDO]
        if pedido in pedidos_vistos:
            return erro("Número de pedido duplicado")
        pedidos_vistos.add(pedido)

    data_texto = dados.get(CampoAlvo.DATA_VENDA)
    if data_texto and config.get('validar_datas', True):
        data_venda = interpretar_data(data_texto)
        if data_venda is None:
            return erro("Data inválida")
        hoje = agora().replace(tzinfo=None)
        carencia = int(config.get('periodo_carencia_dias') or 0)
        if carencia and data_venda < hoje - timedelta(days=carencia):
            return erro("Venda fora do período de carência")
        if data_venda > hoje:
            aviso("Data de venda é futura")

    valor_texto = dados.get(CampoAlvo.VALOR_VENDA)
    if valor_texto:
        valor = interpretar_valor(valor_texto)
        if valor <= 0:
            return erro("Valor de venda inválido")
        minimo, maximo = config.get('valor_minimo'), config.get('valor_maximo')
        if minimo not in (None, '') and valor < Decimal(str(minimo)):
            aviso(f"Valor abaixo do mínimo (R$ {minimo})")
        if maximo not in (None, '') and valor > Decimal(str(maximo)):
            aviso(f"Valor acima do máximo (R$ {maximo})")

    return resultado


class GerenciarJobsValidacaoUseCase:
    def __init__(
        self,
        job_repo: IJobValidacaoRepository,
        submissao_repo: ISubmissaoRepository,
        usuario_repo: IUsuarioRepository,
        campanha_repo: ICampanhaRepository,
        leitor_planilha: ILeitorPlanilha,
        validar_submissao: ValidarSubmissaoUseCase,
        registrar_atividade: RegistrarAtividadeUseCase,
        tamanho_maximo_mb: int = 50,
        maximo_linhas: int = 100000,
        carencia_padrao_dias: int = 30,
    ):
        self.job_repo = job_repo
        self.submissao_repo = submissao_repo
        self.usuario_repo = usuario_repo
        self.campanha_repo = campanha_repo
        self.leitor_planilha = leitor_planilha
        self.validar_submissao = validar_submissao
        self.registrar_atividade = registrar_atividade
        self.tamanho_maximo_mb = tamanho_maximo_mb
        self.maximo_linhas = maximo_linhas
        self.carencia_padrao_dias = carencia_padrao_dias

    # --- Leitura da planilha ---

    def _ler_planilha(self, conteudo: bytes, nome_arquivo: str) -> Dict[str, Any]:
        if len(conteudo) > self.tamanho_maximo_mb * 1024 * 1024:
            raise DadosInvalidosError(f"Arquivo muito grande (máximo {self.tamanho_maximo_mb}MB)")
        if os.path.splitext(nome_arquivo or '')[1].lower() not in EXTENSOES_SUPORTADAS:
            raise DadosInvalidosError("Formato de arquivo não suportado. Envie um arquivo CSV.")

        planilha = self.leitor_planilha.ler(conteudo, nome_arquivo)
        if len(planilha['linhas']) > self.maximo_linhas:
            raise DadosInvalidosError(f"Número máximo de linhas excedido (máximo {self.maximo_linhas})")
        return planilha

    def _configuracao(self, configuracao: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        config = configuracao_padrao(self.carencia_padrao_dias)
        config.update({k: v for k, v in (configuracao or {}).items() if k in config})
        return config

    # --- Operações ---

    def pre_visualizar(self, ator: Usuario, conteudo: bytes, nome_arquivo: str,
                       mapeamentos: Dict[str, str], configuracao: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        exigir_admin(ator)
        planilha = self._ler_planilha(conteudo, nome_arquivo)
        mapeamentos = validar_mapeamentos(mapeamentos)
        config = self._configuracao(configuracao)

        amostra = planilha['linhas'][:LINHAS_PRE_VISUALIZACAO]
        pedidos: Set[str] = set()
        validacao = [
            validar_linha(mapear_linha(linha, planilha['cabecalhos'], mapeamentos), config, numero, pedidos)
            for numero, linha in enumerate(amostra, start=1)
        ]
        return {
            'cabecalhos': planilha['cabecalhos'],
            'linhas_amostra': amostra,
            'total_linhas': len(planilha['linhas']),
            'validacao': validacao,
        }

    def enviar_planilha(self, ator: Usuario, conteudo: bytes, nome_arquivo: str,
                        mapeamentos: Dict[str, str], configuracao: Optional[Dict[str, Any]] = None) -> JobValidacao:
        exigir_admin(ator)
        planilha = self._ler_planilha(conteudo, nome_arquivo)
        mapeamentos = validar_mapeamentos(mapeamentos)
        config = self._configuracao(configuracao)

        titulo_campanha = TITULO_VALIDACAO_MANUAL
        if config.get('campanha_id'):
            campanha = self.campanha_repo.buscar_por_id(config['campanha_id'])
            if not campanha:
                raise CampanhaNaoEncontradaError()
            titulo_campanha = campanha.titulo

        linhas = [mapear_linha(linha, planilha['cabecalhos'], mapeamentos) for linha in planilha['linhas']]
        job = self.job_repo.criar(JobValidacao(
            nome_arquivo=nome_arquivo,
            admin_id=ator.id,
            titulo_campanha=titulo_campanha,
            campanha_id=config.get('campanha_id'),
            simulacao=bool(config.get('simulacao')),
            total_linhas=len(planilha['linhas']),
            tamanho_arquivo=len(conteudo),
            configuracao={**config, 'mapeamentos': mapeamentos},
            # Linhas mapeadas ficam guardadas para um eventual reprocessamento
            detalhes=[{'linha': numero, 'dados': dados} for numero, dados in enumerate(linhas, start=1)],
        ))

        return self._processar(ator, job, linhas)

    def _processar(self, ator: Usuario, job: JobValidacao, linhas: List[Dict[str, str]]) -> JobValidacao:
        inicio = time.monotonic()
        job.status = StatusJobValidacao.PROCESSANDO
        job.inicio_processamento = agora()
        job.total_linhas = len(linhas)
        config = job.configuracao

        try:
            resultados = []
            pedidos: Set[str] = set()
            for numero, dados in enumerate(linhas, start=1):
                resultado = validar_linha(dados, config, numero, pedidos)
                if resultado['status'] != StatusLinhaValidacao.ERRO and not job.simulacao:
                    self._aplicar_venda(ator, job, resultado)
                resultados.append(resultado)
        except Exception:
            logger.exception("Falha ao processar o job de validação %s", job.id)
            job.status = StatusJobValidacao.FALHOU
            job.fim_processamento = agora()
            self.job_repo.salvar(job)
            raise

        job.detalhes = resultados
        job.vendas_validadas = sum(1 for r in resultados if r['status'] == StatusLinhaValidacao.VALIDA)
        job.erros = sum(1 for r in resultados if r['status'] == StatusLinhaValidacao.ERRO)
        job.avisos = sum(1 for r in resultados if r['status'] == StatusLinhaValidacao.AVISO)
        job.pontos_distribuidos = sum(r['pontos'] for r in resultados)
        job.status = StatusJobValidacao.CONCLUIDO
        job.fim_processamento = agora()
        job.duracao_ms = int((time.monotonic() - inicio) * 1000)
        job = self.job_repo.salvar(job)

        self.registrar_atividade.executar(
            usuario_id=ator.id,
            tipo=TipoAtividade.ADMIN_VALIDATION_PROCESSED,
            descricao=f"Validação processada: {job.nome_arquivo} ({job.vendas_validadas}/{job.total_linhas} válidas)",
            metadados={
                'job_id': str(job.id),
                'total_linhas': job.total_linhas,
                'vendas_validadas': job.vendas_validadas,
                'erros': job.erros,
                'avisos': job.avisos,
                'simulacao': job.simulacao,
            },
        )
        logger.info(
            "Job de validação %s concluído: %s linhas, %s válidas, %s erros, %s avisos",
            job.id, job.total_linhas, job.vendas_validadas, job.erros, job.avisos,
        )
        return job

    def _aplicar_venda(self, ator: Usuario, job: JobValidacao, resultado: Dict[str, Any]) -> None:
        """Valida a submissão pendente do pedido quando ela pertence ao vendedor do CPF informado."""
        dados = resultado['dados']
        submissao = self.submissao_repo.buscar_por_numero_pedido(dados[CampoAlvo.NUMERO_PEDIDO])
        if not submissao:
            resultado['avisos'].append("Nenhuma submissão encontrada para o pedido")
            return
        if submissao.status != StatusSubmissao.PENDENTE:
            resultado['avisos'].append("Submissão do pedido já foi processada")
            return
        if job.campanha_id and str(submissao.campanha_id) != str(job.campanha_id):
            resultado['avisos'].append("Submissão pertence a outra campanha")
            return

        vendedor = self.usuario_repo.buscar_por_id(submissao.usuario_id)
        if not vendedor or somente_digitos(vendedor.cpf) != somente_digitos(dados[CampoAlvo.CPF_VENDEDOR]):
            resultado['status'] = StatusLinhaValidacao.ERRO
            resultado['mensagem'] = "Vendedor não encontrado"
            return

        try:
            submissao, ganhos = self.validar_submissao.executar_detalhado(
                ator, submissao.id, StatusSubmissao.VALIDADA, f"Validada pela planilha {job.nome_arquivo}",
            )
        except BaseErroCore as e:
            resultado['status'] = StatusLinhaValidacao.ERRO
            resultado['mensagem'] = str(e)
            return

        resultado['submissao_id'] = str(submissao.id)
        resultado['pontos'] = sum(pontos_do_valor(ganho.valor) for ganho in ganhos)

    def listar(self, ator: Usuario, filtros: Optional[Dict[str, Any]] = None, pagina=1, limite=20) -> Pagina:
        exigir_admin(ator)
        pagina, limite = normalizar_paginacao(pagina, limite)
        filtros = {k: v for k, v in (filtros or {}).items() if v not in (None, '')}
        if filtros.get('status') and filtros['status'] not in StatusJobValidacao.TODOS:
            raise StatusInvalidoError(f"Status de job inválido: {filtros['status']}.")
        return self.job_repo.listar(filtros, pagina, limite)

    def obter(self, ator: Usuario, job_id: str) -> JobValidacao:
        exigir_admin(ator)
        job = self.job_repo.buscar_por_id(job_id)
        if not job:
            raise JobValidacaoNaoEncontradoError()
        return job

    def excluir(self, ator: Usuario, job_id: str) -> None:
        job = self.obter(ator, job_id)
        if job.status == StatusJobValidacao.PROCESSANDO:
            raise OperacaoNaoPermitidaError("Não é possível excluir job em processamento")
        self.job_repo.excluir(job.id)
        logger.info("Job de validação %s excluído por %s", job_id, ator.id)

    def reprocessar(self, ator: Usuario, job_id: str, forcar: bool = False) -> JobValidacao:
        """Reprocessa as linhas mapeadas guardadas no job com a configuração original."""
        job = self.obter(ator, job_id)
        if job.status == StatusJobValidacao.PROCESSANDO and not forcar:
            raise OperacaoNaoPermitidaError("Job ainda está processando")

        linhas = [detalhe['dados'] for detalhe in job.detalhes if detalhe.get('dados')]
        if not linhas:
            raise OperacaoNaoPermitidaError("Job não possui linhas armazenadas para reprocessar")
        logger.info("Reprocessando job de validação %s (%s linhas)", job.id, len(linhas))
        return self._processar(ator, job, linhas)

    def exportar_resultados(self, ator: Usuario, job_id: str) -> bytes:
        job = self.obter(ator, job_id)
        if job.status != StatusJobValidacao.CONCLUIDO:
            raise OperacaoNaoPermitidaError("Job ainda não foi concluído")

        registros = []
        for detalhe in job.detalhes:
            registro = {
                'linha': detalhe.get('linha'),
                'status': detalhe.get('status'),
                'mensagem': detalhe.get('mensagem'),
                'avisos': '; '.join(detalhe.get('avisos') or []),
                'pontos': detalhe.get('pontos', 0),
            }
            registro.update(detalhe.get('dados') or {})
            registros.append(registro)
        return self.leitor_planilha.exportar_csv(registros)

    def estatisticas(self, ator: Usuario, periodo: str = '30d') -> Dict[str, Any]:
        exigir_admin(ator)
        if periodo not in PERIODOS_ESTATISTICAS:
            raise DadosInvalidosError("Período inválido. Use 7d, 30d, 90d ou all.")
        dias = PERIODOS_ESTATISTICAS[periodo]
        desde = agora() - timedelta(days=dias) if dias else None
        estatisticas = self.job_repo.estatisticas(desde)
        estatisticas['periodo'] = periodo
        return estatisticas
