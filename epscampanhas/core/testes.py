# epscampanhas/core/testes.py

import unittest
from unittest.mock import Mock, MagicMock
from decimal import Decimal
from datetime import timedelta

from epscampanhas.core.entities import (
    Usuario, Campanha, MetaCampanha, KitCampanha, Submissao, Ganho, Premio, Notificacao, JobValidacao,
    PapelUsuario, StatusUsuario, StatusCampanha, StatusSubmissao, StatusKit, StatusGanho, TipoGanho, TipoAtividade,
    StatusLinhaValidacao, StatusJobValidacao, CampoAlvo, Pagina, agora,
)
from epscampanhas.core.exceptions import (
    AcessoNegadoError, CampanhaNaoEncontradaError, CredenciaisInvalidasError, DadosInvalidosError,
    EstoqueInsuficienteError, MetaNaoEncontradaError, NotificacaoNaoEncontradaError, OperacaoNaoPermitidaError,
    PedidoDuplicadoError, PontosInsuficientesError, StatusInvalidoError, UsuarioBloqueadoError,
)
from epscampanhas.core.use_cases import (
    CriarSubmissaoUseCase, ValidarSubmissaoUseCase, CriarGanhoUseCase, GerenciarCampanhasUseCase,
    ResgatarPremioUseCase, RegistrarUsuarioUseCase, AutenticarUsuarioUseCase, AlterarSenhaUseCase,
    GerenciarNotificacoesUseCase, RegistrarAtividadeUseCase, GerenciarJobsValidacaoUseCase, DashboardUseCase,
    GerenciarSubmissoesUseCase, GerenciarGanhosUseCase, GerenciarPremiosUseCase, GerenciarUsuariosUseCase,
)
from epscampanhas.core.use_cases.acesso import normalizar_paginacao
from epscampanhas.core.use_cases.campanhas import calcular_progresso
from epscampanhas.core.use_cases.ganhos import pontos_do_valor
from epscampanhas.core.use_cases.submissoes import descrever_quantidade
from epscampanhas.core.use_cases.validacoes import validar_linha, mapear_linha, validar_mapeamentos
from epscampanhas.core.validadores import cpf_valido, cnpj_valido, interpretar_valor, somente_digitos

CPF_VALIDO = '52998224725'
CNPJ_VALIDO = '11222333000181'


def campanha_ativa(**kwargs):
    """Campanha ativa no período atual com duas metas."""
    dados = dict(
        titulo='Lentes Premium',
        descricao='Campanha de teste',
        data_inicio=agora() - timedelta(days=5),
        data_fim=agora() + timedelta(days=25),
        pontos_por_conclusao=100,
        percentual_gerente=Decimal('10'),
        status=StatusCampanha.ATIVA,
        id='campanha-1',
        metas=[
            MetaCampanha(descricao='Lente A', quantidade=2, campanha_id='campanha-1', id='meta-1'),
            MetaCampanha(descricao='Lente B', quantidade=1, campanha_id='campanha-1', id='meta-2'),
        ],
    )
    dados.update(kwargs)
    return Campanha(**dados)


# ====================================================================
# VALIDADORES E FUNÇÕES AUXILIARES
# ====================================================================

class TestValidadores(unittest.TestCase):

    def test_cpf_valido_aceita_com_ou_sem_mascara(self):
        """
        Cenário: O CPF é validado pelos dígitos verificadores, com ou sem pontuação.
        """
        self.assertTrue(cpf_valido('529.982.247-25'))
        self.assertTrue(cpf_valido(CPF_VALIDO))
        self.assertFalse(cpf_valido('52998224724'))
        self.assertFalse(cpf_valido('111.111.111-11'))
        self.assertFalse(cpf_valido(''))

    def test_cnpj_valido(self):
        self.assertTrue(cnpj_valido('11.222.333/0001-81'))
        self.assertFalse(cnpj_valido('11222333000180'))
        self.assertFalse(cnpj_valido('123'))

    def test_interpretar_valor_em_formato_brasileiro(self):
        self.assertEqual(interpretar_valor('R$ 1.234,56'), Decimal('1234.56'))
        self.assertEqual(interpretar_valor('99.90'), Decimal('99.90'))
        self.assertEqual(interpretar_valor('abc'), Decimal('0'))

    def test_somente_digitos(self):
        self.assertEqual(somente_digitos('(11) 98888-7777'), '11988887777')
        self.assertEqual(somente_digitos(None), '')

    def test_pontos_do_valor_arredonda_meio_para_cima(self):
        self.assertEqual(pontos_do_valor(Decimal('12.5')), 13)
        self.assertEqual(pontos_do_valor(Decimal('12.49')), 12)
        self.assertEqual(pontos_do_valor(Decimal('100')), 100)

    def test_descrever_quantidade_pluraliza_por_tipo_de_unidade(self):
        par = MetaCampanha(descricao='Armação', quantidade=1, tipo_unidade='PAIR')
        self.assertEqual(descrever_quantidade(1, par), '1 par')
        self.assertEqual(descrever_quantidade(2, par), '2 pares')
        self.assertEqual(descrever_quantidade(3, None), '3 unidades')

    def test_normalizar_paginacao_limita_e_valida(self):
        self.assertEqual(normalizar_paginacao('2', '500'), (2, 100))
        self.assertEqual(normalizar_paginacao(None, None), (1, 20))
        with self.assertRaises(DadosInvalidosError):
            normalizar_paginacao('0', '10')
        with self.assertRaises(DadosInvalidosError):
            normalizar_paginacao('abc', '10')


class TestCalcularProgresso(unittest.TestCase):

    def test_progresso_e_media_das_metas(self):
        """
        Cenário: Meta A com 1/2 (50%) e meta B com 1/1 (100%) resultam em 75% gerais.
        """
        metas = [
            MetaCampanha(descricao='A', quantidade=2, id='a'),
            MetaCampanha(descricao='B', quantidade=1, id='b'),
        ]
        progresso = calcular_progresso({'a': 1, 'b': 3}, metas)

        self.assertEqual(progresso.progresso_geral, 75)
        self.assertEqual(progresso.metas[0].progresso, 50)
        self.assertFalse(progresso.metas[0].concluida)
        # Excedente não passa de 100%
        self.assertEqual(progresso.metas[1].progresso, 100)
        self.assertTrue(progresso.metas[1].concluida)

    def test_campanha_sem_metas_esta_completa(self):
        self.assertEqual(calcular_progresso({}, []).progresso_geral, 100)


# ====================================================================
# SUBMISSÕES
# ====================================================================

class TestCriarSubmissao(unittest.TestCase):

    def setUp(self):
        self.submissao_repo_mock = Mock()
        self.campanha_repo_mock = Mock()
        self.kit_repo_mock = Mock()
        self.registrar_atividade_mock = Mock()

        self.use_case = CriarSubmissaoUseCase(
            submissao_repo=self.submissao_repo_mock,
            campanha_repo=self.campanha_repo_mock,
            kit_repo=self.kit_repo_mock,
            registrar_atividade=self.registrar_atividade_mock,
            uow=MagicMock(),
        )

        self.vendedor = Usuario(nome='João', email='joao@eps.com', id='vendedor-1', gerente_id='gerente-1')
        self.campanha = campanha_ativa()
        self.dados = {'numero_pedido': ' PED-001 ', 'campanha_id': 'campanha-1', 'meta_id': 'meta-1', 'quantidade': 2}

    def test_criar_submissao_com_sucesso(self):
        """
        Cenário: Vendedor submete uma venda para uma meta de campanha ativa.
        """
        # ARRANGE
        self.campanha_repo_mock.buscar_por_id.return_value = self.campanha
        self.campanha_repo_mock.buscar_meta.return_value = self.campanha.metas[0]
        self.submissao_repo_mock.existe_numero_pedido.return_value = False
        self.kit_repo_mock.buscar_ou_criar_em_andamento.return_value = KitCampanha(
            campanha_id='campanha-1', usuario_id='vendedor-1', id='kit-1'
        )
        self.submissao_repo_mock.criar.side_effect = lambda submissao: submissao

        # ACT
        submissao = self.use_case.executar(self.vendedor, self.dados)

        # ASSERT
        self.assertEqual(submissao.numero_pedido, 'PED-001')
        self.assertEqual(submissao.status, StatusSubmissao.PENDENTE)
        self.assertEqual(submissao.kit_id, 'kit-1')
        self.assertEqual(submissao.quantidade, 2)
        self.kit_repo_mock.buscar_ou_criar_em_andamento.assert_called_once_with('vendedor-1', 'campanha-1')
        args = self.registrar_atividade_mock.executar.call_args.kwargs
        self.assertEqual(args['tipo'], TipoAtividade.VENDA)
        self.assertIn('2 unidades', args['descricao'])

    def test_apenas_vendedor_pode_submeter(self):
        gerente = Usuario(nome='Maria', email='maria@eps.com', papel=PapelUsuario.GERENTE)

        with self.assertRaises(AcessoNegadoError):
            self.use_case.executar(gerente, self.dados)

        self.submissao_repo_mock.criar.assert_not_called()

    def test_campanha_inativa_falha(self):
        """
        Cenário: Campanha em rascunho não aceita submissões.
        """
        self.campanha_repo_mock.buscar_por_id.return_value = campanha_ativa(status=StatusCampanha.RASCUNHO)

        with self.assertRaisesRegex(OperacaoNaoPermitidaError, 'Campanha não está ativa'):
            self.use_case.executar(self.vendedor, self.dados)

    def test_campanha_fora_do_periodo_falha(self):
        self.campanha_repo_mock.buscar_por_id.return_value = campanha_ativa(
            data_inicio=agora() + timedelta(days=1), data_fim=agora() + timedelta(days=10)
        )

        with self.assertRaisesRegex(OperacaoNaoPermitidaError, 'fora do período'):
            self.use_case.executar(self.vendedor, self.dados)

    def test_campanha_inexistente_falha(self):
        self.campanha_repo_mock.buscar_por_id.return_value = None

        with self.assertRaises(CampanhaNaoEncontradaError):
            self.use_case.executar(self.vendedor, self.dados)

    def test_meta_de_outra_campanha_falha(self):
        self.campanha_repo_mock.buscar_por_id.return_value = self.campanha
        self.campanha_repo_mock.buscar_meta.return_value = MetaCampanha(
            descricao='Outra', quantidade=1, campanha_id='campanha-2', id='meta-9'
        )

        with self.assertRaisesRegex(DadosInvalidosError, 'Meta não pertence'):
            self.use_case.executar(self.vendedor, self.dados)

    def test_meta_inexistente_falha(self):
        self.campanha_repo_mock.buscar_por_id.return_value = self.campanha
        self.campanha_repo_mock.buscar_meta.return_value = None

        with self.assertRaises(MetaNaoEncontradaError):
            self.use_case.executar(self.vendedor, self.dados)

    def test_numero_de_pedido_duplicado_falha(self):
        self.campanha_repo_mock.buscar_por_id.return_value = self.campanha
        self.campanha_repo_mock.buscar_meta.return_value = self.campanha.metas[0]
        self.submissao_repo_mock.existe_numero_pedido.return_value = True

        with self.assertRaises(PedidoDuplicadoError):
            self.use_case.executar(self.vendedor, self.dados)

        self.kit_repo_mock.buscar_ou_criar_em_andamento.assert_not_called()

    def test_quantidade_invalida_falha(self):
        for quantidade in (0, -1, 'abc'):
            with self.assertRaises(DadosInvalidosError):
                self.use_case.executar(self.vendedor, {**self.dados, 'quantidade': quantidade})


class TestValidarSubmissao(unittest.TestCase):

    def setUp(self):
        self.submissao_repo_mock = Mock()
        self.campanha_repo_mock = Mock()
        self.kit_repo_mock = Mock()
        self.usuario_repo_mock = Mock()
        self.criar_ganho_mock = Mock()
        self.registrar_atividade_mock = Mock()
        self.criar_notificacao_mock = Mock()

        self.use_case = ValidarSubmissaoUseCase(
            submissao_repo=self.submissao_repo_mock,
            campanha_repo=self.campanha_repo_mock,
            kit_repo=self.kit_repo_mock,
            usuario_repo=self.usuario_repo_mock,
            criar_ganho=self.criar_ganho_mock,
            registrar_atividade=self.registrar_atividade_mock,
            criar_notificacao=self.criar_notificacao_mock,
            uow=MagicMock(),
        )

        self.gerente = Usuario(nome='Maria', email='maria@eps.com', papel=PapelUsuario.GERENTE, id='gerente-1')
        self.vendedor = Usuario(nome='João', email='joao@eps.com', id='vendedor-1', gerente_id='gerente-1')
        self.campanha = campanha_ativa()
        self.kit = KitCampanha(campanha_id='campanha-1', usuario_id='vendedor-1', id='kit-1')
        self.submissao = Submissao(
            numero_pedido='PED-001', campanha_id='campanha-1', meta_id='meta-2', usuario_id='vendedor-1',
            kit_id='kit-1', id='sub-1', usuario_gerente_id='gerente-1',
        )

        self.submissao_repo_mock.buscar_por_id.return_value = self.submissao
        self.submissao_repo_mock.salvar.side_effect = lambda submissao: submissao
        self.kit_repo_mock.buscar_por_id.return_value = self.kit
        self.campanha_repo_mock.buscar_por_id.return_value = self.campanha
        self.usuario_repo_mock.buscar_por_id.return_value = self.vendedor
        self.criar_ganho_mock.executar.side_effect = lambda **kwargs: Ganho(
            tipo=kwargs['tipo'], usuario_id=kwargs['usuario_id'], valor=kwargs['valor'], descricao=kwargs['descricao']
        )

    def test_validacao_que_completa_a_cartela_gera_ganhos(self):
        """
        Cenário: A última meta pendente é validada; a cartela é concluída e são gerados
        o ganho do vendedor (100 pontos) e o do gerente (10% = 10 pontos).
        """
        # ARRANGE
        self.kit_repo_mock.somar_quantidades_validadas.return_value = {'meta-1': 2, 'meta-2': 1}

        # ACT
        submissao, ganhos = self.use_case.executar_detalhado(self.gerente, 'sub-1', StatusSubmissao.VALIDADA)

        # ASSERT
        self.assertEqual(submissao.status, StatusSubmissao.VALIDADA)
        self.assertEqual(submissao.validado_por_id, 'gerente-1')
        self.assertIsNotNone(submissao.data_validacao)
        self.kit_repo_mock.marcar_concluido.assert_called_once()
        self.assertEqual([g.tipo for g in ganhos], [TipoGanho.VENDEDOR, TipoGanho.GERENTE])
        self.assertEqual(ganhos[0].valor, Decimal('100'))
        self.assertEqual(ganhos[1].valor, Decimal('10'))
        self.assertEqual(ganhos[1].usuario_id, 'gerente-1')

        # A atividade de conclusão não carrega pontos (já registrados pelo ganho)
        conquistas = [
            c.kwargs for c in self.registrar_atividade_mock.executar.call_args_list
            if c.kwargs['tipo'] == TipoAtividade.CONQUISTA
        ]
        self.assertEqual(len(conquistas), 1)
        self.assertNotIn('pontos', conquistas[0])

    def test_validacao_sem_completar_cartela_nao_gera_ganhos(self):
        self.kit_repo_mock.somar_quantidades_validadas.return_value = {'meta-1': 1, 'meta-2': 1}

        submissao, ganhos = self.use_case.executar_detalhado(self.gerente, 'sub-1', StatusSubmissao.VALIDADA)

        self.assertEqual(ganhos, [])
        self.kit_repo_mock.marcar_concluido.assert_not_called()
        self.criar_ganho_mock.executar.assert_not_called()

    def test_cartela_ja_concluida_nao_gera_ganhos_novamente(self):
        self.kit.status = StatusKit.CONCLUIDO

        _, ganhos = self.use_case.executar_detalhado(self.gerente, 'sub-1', StatusSubmissao.VALIDADA)

        self.assertEqual(ganhos, [])
        self.criar_ganho_mock.executar.assert_not_called()

    def test_cartela_concluida_por_outra_validacao_nao_paga_novamente(self):
        """
        Cenário: A cartela foi lida em andamento, mas outra validação simultânea
        a concluiu antes; a atualização condicional não altera nenhuma linha.
        """
        self.kit_repo_mock.somar_quantidades_validadas.return_value = {'meta-1': 2, 'meta-2': 1}
        self.kit_repo_mock.marcar_concluido.return_value = False

        _, ganhos = self.use_case.executar_detalhado(self.gerente, 'sub-1', StatusSubmissao.VALIDADA)

        self.assertEqual(ganhos, [])
        self.criar_ganho_mock.executar.assert_not_called()
        tipos = [c.kwargs['tipo'] for c in self.registrar_atividade_mock.executar.call_args_list]
        self.assertNotIn(TipoAtividade.CONQUISTA, tipos)

    def test_vendedor_sem_gerente_gera_apenas_o_proprio_ganho(self):
        self.vendedor.gerente_id = None
        self.kit_repo_mock.somar_quantidades_validadas.return_value = {'meta-1': 2, 'meta-2': 1}

        _, ganhos = self.use_case.executar_detalhado(self.gerente, 'sub-1', StatusSubmissao.VALIDADA)

        self.assertEqual([g.tipo for g in ganhos], [TipoGanho.VENDEDOR])

    def test_rejeicao_notifica_o_vendedor(self):
        submissao = self.use_case.executar(self.gerente, 'sub-1', StatusSubmissao.REJEITADA, 'Pedido não localizado')

        self.assertEqual(submissao.status, StatusSubmissao.REJEITADA)
        self.assertEqual(submissao.mensagem_validacao, 'Pedido não localizado')
        self.kit_repo_mock.somar_quantidades_validadas.assert_not_called()
        args = self.criar_notificacao_mock.executar.call_args.kwargs
        self.assertEqual(args['usuario_id'], 'vendedor-1')
        self.assertIn('Pedido não localizado', args['mensagem'])

    def test_submissao_ja_processada_falha(self):
        self.submissao.status = StatusSubmissao.VALIDADA

        with self.assertRaisesRegex(StatusInvalidoError, 'Apenas submissões pendentes'):
            self.use_case.executar(self.gerente, 'sub-1', StatusSubmissao.VALIDADA)

    def test_gerente_de_outra_equipe_nao_valida(self):
        """
        Cenário: Um gerente tenta validar a submissão de um vendedor de outra equipe.
        """
        outro_gerente = Usuario(nome='Pedro', email='pedro@eps.com', papel=PapelUsuario.GERENTE, id='gerente-2')

        with self.assertRaises(AcessoNegadoError):
            self.use_case.executar(outro_gerente, 'sub-1', StatusSubmissao.VALIDADA)

        self.submissao_repo_mock.salvar.assert_not_called()

    def test_vendedor_nao_valida(self):
        with self.assertRaises(AcessoNegadoError):
            self.use_case.executar(self.vendedor, 'sub-1', StatusSubmissao.VALIDADA)

    def test_status_invalido_falha(self):
        with self.assertRaises(StatusInvalidoError):
            self.use_case.executar(self.gerente, 'sub-1', StatusSubmissao.PENDENTE)

    def test_validacao_em_lote_contabiliza_falhas(self):
        """
        Cenário: Lote com uma submissão válida e uma inexistente.
        """
        self.kit_repo_mock.somar_quantidades_validadas.return_value = {}
        self.submissao_repo_mock.buscar_por_id.side_effect = lambda sid: self.submissao if sid == 'sub-1' else None

        resultado = self.use_case.validar_em_lote(self.gerente, ['sub-1', 'sub-x'], 'validate')

        self.assertEqual(resultado['processadas'], 2)
        self.assertEqual(resultado['validadas'], 1)
        self.assertEqual(resultado['falhas'], 1)
        self.assertFalse(resultado['detalhes'][1]['sucesso'])

    def test_validacao_em_lote_acao_invalida(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.validar_em_lote(self.gerente, ['sub-1'], 'aprovar')


# ====================================================================
# GANHOS
# ====================================================================

class TestCriarGanho(unittest.TestCase):

    def setUp(self):
        self.ganho_repo_mock = Mock()
        self.usuario_repo_mock = Mock()
        self.registrar_atividade_mock = Mock()
        self.use_case = CriarGanhoUseCase(
            ganho_repo=self.ganho_repo_mock,
            usuario_repo=self.usuario_repo_mock,
            registrar_atividade=self.registrar_atividade_mock,
            uow=MagicMock(),
        )
        self.usuario_repo_mock.buscar_por_id.return_value = Usuario(nome='Maria', email='maria@eps.com', id='g-1')
        self.ganho_repo_mock.criar.side_effect = lambda ganho: ganho

    def test_credita_pontos_arredondados(self):
        """
        Cenário: Ganho de 12,5 credita 13 pontos ao usuário.
        """
        ganho = self.use_case.executar(TipoGanho.GERENTE, 'g-1', Decimal('12.5'), 'Bônus da equipe')

        self.assertEqual(ganho.valor, Decimal('12.5'))
        self.assertEqual(ganho.usuario_nome, 'Maria')
        self.usuario_repo_mock.incrementar_pontos.assert_called_once_with('g-1', 13)
        self.assertEqual(self.registrar_atividade_mock.executar.call_args.kwargs['pontos'], 13)

    def test_valor_nao_positivo_falha(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.executar(TipoGanho.VENDEDOR, 'g-1', Decimal('0'), 'Nada')
        self.ganho_repo_mock.criar.assert_not_called()


# ====================================================================
# CAMPANHAS
# ====================================================================

class TestGerenciarCampanhas(unittest.TestCase):

    def setUp(self):
        self.campanha_repo_mock = Mock()
        self.registrar_atividade_mock = Mock()
        self.use_case = GerenciarCampanhasUseCase(
            campanha_repo=self.campanha_repo_mock,
            kit_repo=Mock(),
            submissao_repo=Mock(),
            ganho_repo=Mock(),
            registrar_atividade=self.registrar_atividade_mock,
        )
        self.admin = Usuario(nome='Admin', email='admin@eps.com', papel=PapelUsuario.ADMIN, id='admin-1')
        self.dados = {
            'titulo': 'Nova Campanha',
            'descricao': 'Teste',
            'data_inicio': agora(),
            'data_fim': agora() + timedelta(days=30),
            'pontos_por_conclusao': 50,
            'percentual_gerente': 10,
            'metas': [{'descricao': 'Lente', 'quantidade': 3, 'tipo_unidade': 'PAIR'}],
        }
        self.campanha_repo_mock.criar.side_effect = lambda campanha: campanha
        self.campanha_repo_mock.atualizar.side_effect = lambda campanha, **kwargs: campanha

    def test_criar_campanha_comeca_em_rascunho(self):
        campanha = self.use_case.criar(self.admin, self.dados)

        self.assertEqual(campanha.status, StatusCampanha.RASCUNHO)
        self.assertEqual(campanha.percentual_gerente, Decimal('10'))
        self.assertEqual(len(campanha.metas), 1)
        self.assertEqual(campanha.metas[0].tipo_unidade, 'PAIR')
        self.assertEqual(
            self.registrar_atividade_mock.executar.call_args.kwargs['tipo'], TipoAtividade.ADMIN_CAMPAIGN_CREATED
        )

    def test_criar_campanha_sem_metas_falha(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.criar(self.admin, {**self.dados, 'metas': []})

    def test_criar_campanha_com_datas_invertidas_falha(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.criar(self.admin, {**self.dados, 'data_fim': agora() - timedelta(days=1)})

    def test_apenas_admin_cria_campanha(self):
        gerente = Usuario(nome='Maria', email='maria@eps.com', papel=PapelUsuario.GERENTE)
        with self.assertRaises(AcessoNegadoError):
            self.use_case.criar(gerente, self.dados)

    def test_nao_ativa_campanha_encerrada(self):
        self.campanha_repo_mock.buscar_por_id.return_value = campanha_ativa(
            status=StatusCampanha.INATIVA, data_inicio=agora() - timedelta(days=30), data_fim=agora() - timedelta(days=1)
        )
        with self.assertRaises(OperacaoNaoPermitidaError):
            self.use_case.alternar_status(self.admin, 'campanha-1', StatusCampanha.ATIVA)

    def test_alternar_status_registra_atividade(self):
        self.campanha_repo_mock.buscar_por_id.return_value = campanha_ativa()

        campanha = self.use_case.alternar_status(self.admin, 'campanha-1', StatusCampanha.INATIVA)

        self.assertEqual(campanha.status, StatusCampanha.INATIVA)
        self.assertEqual(
            self.registrar_atividade_mock.executar.call_args.kwargs['tipo'], TipoAtividade.CAMPAIGN_DEACTIVATED
        )

    def test_nao_exclui_campanha_com_submissoes(self):
        self.campanha_repo_mock.buscar_por_id.return_value = campanha_ativa()
        self.campanha_repo_mock.possui_submissoes.return_value = True

        with self.assertRaises(OperacaoNaoPermitidaError):
            self.use_case.excluir(self.admin, 'campanha-1')
        self.campanha_repo_mock.excluir.assert_not_called()

    def test_duplicar_cria_copia_em_rascunho(self):
        self.campanha_repo_mock.buscar_por_id.return_value = campanha_ativa()

        copia = self.use_case.duplicar(self.admin, 'campanha-1')

        self.assertEqual(copia.titulo, 'Lentes Premium (Cópia)')
        self.assertEqual(copia.status, StatusCampanha.RASCUNHO)
        self.assertEqual(len(copia.metas), 2)
        self.assertNotEqual(copia.metas[0].id, 'meta-1')


# ====================================================================
# PRÊMIOS
# ====================================================================

class TestResgatarPremio(unittest.TestCase):

    def setUp(self):
        self.premio_repo_mock = Mock()
        self.usuario_repo_mock = Mock()
        self.criar_notificacao_mock = Mock()
        self.use_case = ResgatarPremioUseCase(
            premio_repo=self.premio_repo_mock,
            usuario_repo=self.usuario_repo_mock,
            registrar_atividade=Mock(),
            criar_notificacao=self.criar_notificacao_mock,
            uow=MagicMock(),
        )
        self.usuario = Usuario(nome='João', email='joao@eps.com', id='vendedor-1', pontos=300)
        self.premio = Premio(titulo='Vale-presente', descricao='R$ 100', pontos_necessarios=200, estoque=3, id='p-1')
        self.usuario_repo_mock.buscar_por_id.return_value = self.usuario
        self.premio_repo_mock.buscar_por_id.return_value = self.premio
        self.premio_repo_mock.criar_resgate.side_effect = lambda resgate: resgate

    def test_resgate_com_sucesso(self):
        """
        Cenário: Usuário com saldo suficiente resgata um prêmio em estoque.
        """
        resgate = self.use_case.executar(self.usuario, 'p-1')

        self.assertEqual(resgate.pontos_resgatados, 200)
        self.premio_repo_mock.buscar_por_id.assert_called_once_with('p-1', bloquear=True)
        self.premio_repo_mock.ajustar_estoque.assert_called_once_with('p-1', -1)
        self.usuario_repo_mock.incrementar_pontos.assert_called_once_with('vendedor-1', -200)
        self.criar_notificacao_mock.executar.assert_called_once()

    def test_pontos_insuficientes(self):
        self.usuario.pontos = 150

        with self.assertRaises(PontosInsuficientesError):
            self.use_case.executar(self.usuario, 'p-1')
        self.premio_repo_mock.ajustar_estoque.assert_not_called()

    def test_sem_estoque(self):
        self.premio.estoque = 0

        with self.assertRaises(EstoqueInsuficienteError):
            self.use_case.executar(self.usuario, 'p-1')
        self.usuario_repo_mock.incrementar_pontos.assert_not_called()

    def test_premio_inativo_nao_pode_ser_resgatado(self):
        self.premio.ativo = False

        with self.assertRaises(EstoqueInsuficienteError):
            self.use_case.executar(self.usuario, 'p-1')


# ====================================================================
# USUÁRIOS E AUTENTICAÇÃO
# ====================================================================

class TestRegistrarUsuario(unittest.TestCase):

    def setUp(self):
        self.usuario_repo_mock = Mock()
        self.usuario_repo_mock.buscar_por_email.return_value = None
        self.usuario_repo_mock.buscar_por_cpf.return_value = None
        self.usuario_repo_mock.criar.side_effect = lambda usuario, senha: usuario
        self.gerente = Usuario(nome='Maria', email='maria@eps.com', papel=PapelUsuario.GERENTE, id='gerente-1')
        self.usuario_repo_mock.buscar_por_id.return_value = self.gerente
        self.use_case = RegistrarUsuarioUseCase(usuario_repo=self.usuario_repo_mock)
        self.dados = {
            'nome': 'Ana', 'email': '  Ana@EPS.com ', 'senha': 'segredo1', 'cpf': '529.982.247-25',
            'papel': PapelUsuario.VENDEDOR, 'gerente_id': 'gerente-1', 'whatsapp': '(11) 98888-7777',
        }

    def test_registro_normaliza_email_cpf_e_whatsapp(self):
        usuario = self.use_case.executar(self.dados)

        self.assertEqual(usuario.email, 'ana@eps.com')
        self.assertEqual(usuario.cpf, CPF_VALIDO)
        self.assertEqual(usuario.whatsapp, '11988887777')
        self.assertEqual(usuario.status, StatusUsuario.ATIVO)
        self.usuario_repo_mock.criar.assert_called_once_with(usuario, 'segredo1')

    def test_registro_publico_nao_cria_admin(self):
        with self.assertRaises(AcessoNegadoError):
            self.use_case.executar({**self.dados, 'papel': PapelUsuario.ADMIN, 'gerente_id': None})

    def test_email_duplicado(self):
        self.usuario_repo_mock.buscar_por_email.return_value = Usuario(nome='X', email='ana@eps.com', id='outro')

        with self.assertRaisesRegex(DadosInvalidosError, 'e-mail já está cadastrado'):
            self.use_case.executar(self.dados)

    def test_cpf_invalido(self):
        with self.assertRaisesRegex(DadosInvalidosError, 'CPF inválido'):
            self.use_case.executar({**self.dados, 'cpf': '123.456.789-00'})

    def test_vendedor_precisa_de_gerente(self):
        with self.assertRaisesRegex(DadosInvalidosError, 'gerente associado'):
            self.use_case.executar({**self.dados, 'gerente_id': None})

    def test_senha_curta(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.executar({**self.dados, 'senha': '123'})


class TestAutenticarUsuario(unittest.TestCase):

    def setUp(self):
        self.usuario_repo_mock = Mock()
        self.use_case = AutenticarUsuarioUseCase(usuario_repo=self.usuario_repo_mock)
        self.usuario = Usuario(nome='João', email='joao@eps.com', id='u-1')

    def test_login_valido(self):
        self.usuario_repo_mock.buscar_por_email.return_value = self.usuario
        self.usuario_repo_mock.verificar_senha.return_value = True

        self.assertEqual(self.use_case.executar(' JOAO@eps.com', 'password123'), self.usuario)
        self.usuario_repo_mock.buscar_por_email.assert_called_once_with('joao@eps.com')

    def test_senha_incorreta(self):
        self.usuario_repo_mock.buscar_por_email.return_value = self.usuario
        self.usuario_repo_mock.verificar_senha.return_value = False

        with self.assertRaises(CredenciaisInvalidasError):
            self.use_case.executar('joao@eps.com', 'errada')

    def test_usuario_bloqueado(self):
        self.usuario.status = StatusUsuario.BLOQUEADO
        self.usuario_repo_mock.buscar_por_email.return_value = self.usuario
        self.usuario_repo_mock.verificar_senha.return_value = True

        with self.assertRaisesRegex(UsuarioBloqueadoError, 'Usuário bloqueado'):
            self.use_case.executar('joao@eps.com', 'password123')


class TestAlterarSenha(unittest.TestCase):

    def test_senha_atual_incorreta(self):
        usuario_repo_mock = Mock()
        usuario_repo_mock.verificar_senha.return_value = False
        use_case = AlterarSenhaUseCase(usuario_repo=usuario_repo_mock)

        with self.assertRaisesRegex(DadosInvalidosError, 'Senha atual incorreta'):
            use_case.executar(Usuario(nome='A', email='a@eps.com', id='u-1'), 'errada', 'nova-senha')
        usuario_repo_mock.definir_senha.assert_not_called()


# ====================================================================
# NOTIFICAÇÕES E ATIVIDADES
# ====================================================================

class TestNotificacoes(unittest.TestCase):

    def setUp(self):
        self.notificacao_repo_mock = Mock()
        self.use_case = GerenciarNotificacoesUseCase(notificacao_repo=self.notificacao_repo_mock)
        self.usuario = Usuario(nome='João', email='joao@eps.com', id='u-1')

    def test_notificacao_de_outro_usuario_e_tratada_como_inexistente(self):
        self.notificacao_repo_mock.buscar_por_id.return_value = Notificacao(
            usuario_id='u-2', titulo='Oi', mensagem='Teste', id='n-1'
        )

        with self.assertRaises(NotificacaoNaoEncontradaError):
            self.use_case.marcar_como_lida(self.usuario, 'n-1')
        self.notificacao_repo_mock.marcar_como_lida.assert_not_called()

    def test_listar_inclui_contagem_de_nao_lidas(self):
        self.notificacao_repo_mock.listar.return_value = Pagina(itens=[], total=0)
        self.notificacao_repo_mock.contar_nao_lidas.return_value = 4

        pagina = self.use_case.listar(self.usuario, lida=False)

        self.assertEqual(pagina.resumo, {'nao_lidas': 4})
        self.notificacao_repo_mock.listar.assert_called_once_with('u-1', False, 1, 20)


class TestRegistrarAtividade(unittest.TestCase):

    def test_falha_no_historico_nao_interrompe_a_operacao(self):
        """
        Cenário: O repositório de atividades falha; o erro é registrado em log e nada é propagado.
        """
        atividade_repo_mock = Mock()
        atividade_repo_mock.criar.side_effect = RuntimeError('banco indisponível')
        use_case = RegistrarAtividadeUseCase(atividade_repo=atividade_repo_mock)

        with self.assertLogs('epscampanhas.core.use_cases.atividades', level='ERROR'):
            resultado = use_case.executar('u-1', TipoAtividade.VENDA, 'Venda submetida')

        self.assertIsNone(resultado)


# ====================================================================
# VALIDAÇÃO POR PLANILHA
# ====================================================================

class TestValidarLinha(unittest.TestCase):

    def setUp(self):
        self.config = {'validar_cpf': True, 'validar_cnpj': True, 'validar_datas': True, 'periodo_carencia_dias': 30}

    def test_linha_valida(self):
        dados = {CampoAlvo.NUMERO_PEDIDO: 'PED-1', CampoAlvo.CPF_VENDEDOR: CPF_VALIDO, CampoAlvo.CNPJ_OTICA: CNPJ_VALIDO}
        resultado = validar_linha(dados, self.config, 1, set())
        self.assertEqual(resultado['status'], StatusLinhaValidacao.VALIDA)

    def test_campo_obrigatorio_ausente(self):
        resultado = validar_linha({CampoAlvo.NUMERO_PEDIDO: 'PED-1'}, self.config, 1)
        self.assertEqual(resultado['status'], StatusLinhaValidacao.ERRO)
        self.assertIn('CPF do Vendedor', resultado['mensagem'])

    def test_cpf_invalido(self):
        resultado = validar_linha({CampoAlvo.NUMERO_PEDIDO: 'PED-1', CampoAlvo.CPF_VENDEDOR: '123'}, self.config, 1)
        self.assertEqual(resultado['mensagem'], 'CPF inválido')

    def test_pedido_repetido_na_planilha(self):
        vistos = set()
        dados = {CampoAlvo.NUMERO_PEDIDO: 'PED-1', CampoAlvo.CPF_VENDEDOR: CPF_VALIDO}
        validar_linha(dict(dados), self.config, 1, vistos)
        resultado = validar_linha(dict(dados), self.config, 2, vistos)
        self.assertEqual(resultado['mensagem'], 'Número de pedido duplicado')

    def test_venda_fora_da_carencia(self):
        antiga = (agora() - timedelta(days=60)).strftime('%d/%m/%Y')
        dados = {CampoAlvo.NUMERO_PEDIDO: 'PED-1', CampoAlvo.CPF_VENDEDOR: CPF_VALIDO, CampoAlvo.DATA_VENDA: antiga}
        resultado = validar_linha(dados, self.config, 1)
        self.assertEqual(resultado['mensagem'], 'Venda fora do período de carência')

    def test_valor_acima_do_maximo_gera_aviso(self):
        dados = {CampoAlvo.NUMERO_PEDIDO: 'PED-1', CampoAlvo.CPF_VENDEDOR: CPF_VALIDO, CampoAlvo.VALOR_VENDA: '1.500,00'}
        resultado = validar_linha(dados, {**self.config, 'valor_maximo': 1000}, 1)
        self.assertEqual(resultado['status'], StatusLinhaValidacao.AVISO)
        self.assertEqual(len(resultado['avisos']), 1)

    def test_mapear_linha_ignora_colunas(self):
        dados = mapear_linha(
            [' PED-1 ', CPF_VALIDO, 'qualquer'], ['pedido', 'cpf', 'obs'],
            {'pedido': CampoAlvo.NUMERO_PEDIDO, 'cpf': CampoAlvo.CPF_VENDEDOR, 'obs': CampoAlvo.IGNORAR},
        )
        self.assertEqual(dados, {CampoAlvo.NUMERO_PEDIDO: 'PED-1', CampoAlvo.CPF_VENDEDOR: CPF_VALIDO})

    def test_mapeamento_exige_pedido_e_cpf(self):
        with self.assertRaises(DadosInvalidosError):
            validar_mapeamentos({'pedido': CampoAlvo.NUMERO_PEDIDO})


class TestJobsValidacao(unittest.TestCase):

    def setUp(self):
        self.job_repo_mock = Mock()
        self.submissao_repo_mock = Mock()
        self.usuario_repo_mock = Mock()
        self.leitor_mock = Mock()
        self.validar_submissao_mock = Mock()
        self.use_case = GerenciarJobsValidacaoUseCase(
            job_repo=self.job_repo_mock,
            submissao_repo=self.submissao_repo_mock,
            usuario_repo=self.usuario_repo_mock,
            campanha_repo=Mock(),
            leitor_planilha=self.leitor_mock,
            validar_submissao=self.validar_submissao_mock,
            registrar_atividade=Mock(),
            tamanho_maximo_mb=1,
            maximo_linhas=10,
        )
        self.admin = Usuario(nome='Admin', email='admin@eps.com', papel=PapelUsuario.ADMIN, id='admin-1')
        self.mapeamentos = {'pedido': CampoAlvo.NUMERO_PEDIDO, 'cpf': CampoAlvo.CPF_VENDEDOR}
        self.leitor_mock.ler.return_value = {
            'cabecalhos': ['pedido', 'cpf'],
            'linhas': [['PED-1', CPF_VALIDO], ['PED-2', '000']],
        }
        self.job_repo_mock.criar.side_effect = lambda job: job
        self.job_repo_mock.salvar.side_effect = lambda job: job

    def test_envio_valida_submissao_pendente_do_vendedor(self):
        """
        Cenário: Planilha com uma linha válida (pedido pendente do vendedor do CPF) e uma com CPF inválido.
        """
        # ARRANGE
        submissao = Submissao(
            numero_pedido='PED-1', campanha_id='c-1', meta_id='m-1', usuario_id='vendedor-1', id='sub-1'
        )
        self.submissao_repo_mock.buscar_por_numero_pedido.return_value = submissao
        self.usuario_repo_mock.buscar_por_id.return_value = Usuario(
            nome='João', email='joao@eps.com', id='vendedor-1', cpf=CPF_VALIDO
        )
        self.validar_submissao_mock.executar_detalhado.return_value = (
            submissao, [Ganho(tipo=TipoGanho.VENDEDOR, usuario_id='vendedor-1', valor=Decimal('100'), descricao='x')]
        )

        # ACT
        job = self.use_case.enviar_planilha(self.admin, b'conteudo', 'vendas.csv', self.mapeamentos)

        # ASSERT
        self.assertEqual(job.total_linhas, 2)
        self.assertEqual(job.vendas_validadas, 1)
        self.assertEqual(job.erros, 1)
        self.assertEqual(job.pontos_distribuidos, 100)
        self.assertEqual(job.detalhes[0]['submissao_id'], 'sub-1')
        self.validar_submissao_mock.executar_detalhado.assert_called_once()

    def test_simulacao_nao_altera_submissoes(self):
        job = self.use_case.enviar_planilha(
            self.admin, b'conteudo', 'vendas.csv', self.mapeamentos, {'simulacao': True}
        )

        self.assertTrue(job.simulacao)
        self.assertEqual(job.vendas_validadas, 1)
        self.submissao_repo_mock.buscar_por_numero_pedido.assert_not_called()
        self.validar_submissao_mock.executar_detalhado.assert_not_called()

    def test_cpf_diferente_do_vendedor_da_submissao(self):
        self.submissao_repo_mock.buscar_por_numero_pedido.return_value = Submissao(
            numero_pedido='PED-1', campanha_id='c-1', meta_id='m-1', usuario_id='vendedor-1'
        )
        self.usuario_repo_mock.buscar_por_id.return_value = Usuario(
            nome='João', email='joao@eps.com', id='vendedor-1', cpf='11144477735'
        )

        job = self.use_case.enviar_planilha(self.admin, b'conteudo', 'vendas.csv', self.mapeamentos)

        self.assertEqual(job.detalhes[0]['mensagem'], 'Vendedor não encontrado')
        self.validar_submissao_mock.executar_detalhado.assert_not_called()

    def test_formato_nao_suportado(self):
        with self.assertRaisesRegex(DadosInvalidosError, 'Formato de arquivo'):
            self.use_case.enviar_planilha(self.admin, b'conteudo', 'vendas.pdf', self.mapeamentos)

    def test_apenas_admin_envia_planilha(self):
        vendedor = Usuario(nome='João', email='joao@eps.com')
        with self.assertRaises(AcessoNegadoError):
            self.use_case.enviar_planilha(vendedor, b'conteudo', 'vendas.csv', self.mapeamentos)

    def test_falha_no_processamento_preserva_linhas_para_reprocessar(self):
        """
        Cenário: O processamento falha no meio da planilha; o job fica FALHOU com as
        linhas mapeadas guardadas, e o reprocessamento percorre todas elas.
        """
        # ARRANGE
        self.submissao_repo_mock.buscar_por_numero_pedido.side_effect = RuntimeError('conexão perdida')

        # ACT
        with self.assertRaises(RuntimeError):
            self.use_case.enviar_planilha(self.admin, b'conteudo', 'vendas.csv', self.mapeamentos)

        # ASSERT
        job = self.job_repo_mock.salvar.call_args.args[0]
        self.assertEqual(job.status, StatusJobValidacao.FALHOU)
        self.assertEqual([d['dados'][CampoAlvo.NUMERO_PEDIDO] for d in job.detalhes], ['PED-1', 'PED-2'])

        self.submissao_repo_mock.buscar_por_numero_pedido.side_effect = None
        self.submissao_repo_mock.buscar_por_numero_pedido.return_value = None
        self.job_repo_mock.buscar_por_id.return_value = job

        reprocessado = self.use_case.reprocessar(self.admin, 'job-1')

        self.assertEqual(reprocessado.status, StatusJobValidacao.CONCLUIDO)
        self.assertEqual(reprocessado.total_linhas, 2)
        self.assertEqual(reprocessado.erros, 1)

    def test_reprocessar_job_sem_linhas_armazenadas(self):
        self.job_repo_mock.buscar_por_id.return_value = JobValidacao(
            nome_arquivo='a.csv', admin_id='admin-1', status=StatusJobValidacao.FALHOU, total_linhas=500,
        )

        with self.assertRaisesRegex(OperacaoNaoPermitidaError, 'linhas armazenadas'):
            self.use_case.reprocessar(self.admin, 'job-1')
        self.job_repo_mock.salvar.assert_not_called()

    def test_pre_visualizar_valida_amostra_sem_criar_job(self):
        resultado = self.use_case.pre_visualizar(self.admin, b'conteudo', 'vendas.csv', self.mapeamentos)

        self.assertEqual(resultado['cabecalhos'], ['pedido', 'cpf'])
        self.assertEqual(resultado['total_linhas'], 2)
        self.assertEqual(
            [linha['status'] for linha in resultado['validacao']],
            [StatusLinhaValidacao.VALIDA, StatusLinhaValidacao.ERRO],
        )
        self.job_repo_mock.criar.assert_not_called()
        self.submissao_repo_mock.buscar_por_numero_pedido.assert_not_called()

    def test_exportar_job_nao_concluido(self):
        self.job_repo_mock.buscar_por_id.return_value = JobValidacao(
            nome_arquivo='a.csv', admin_id='admin-1', status=StatusJobValidacao.FALHOU,
        )

        with self.assertRaisesRegex(OperacaoNaoPermitidaError, 'Job ainda não foi concluído'):
            self.use_case.exportar_resultados(self.admin, 'job-1')
        self.leitor_mock.exportar_csv.assert_not_called()

    def test_exportar_job_concluido_junta_resultado_e_dados_da_linha(self):
        self.job_repo_mock.buscar_por_id.return_value = JobValidacao(
            nome_arquivo='a.csv', admin_id='admin-1', status=StatusJobValidacao.CONCLUIDO,
            detalhes=[{
                'linha': 1, 'status': StatusLinhaValidacao.AVISO, 'mensagem': None,
                'avisos': ['Nenhuma submissão encontrada para o pedido', 'Valor alto'], 'pontos': 0,
                'dados': {CampoAlvo.NUMERO_PEDIDO: 'PED-1'},
            }],
        )
        self.leitor_mock.exportar_csv.return_value = b'csv'

        self.assertEqual(self.use_case.exportar_resultados(self.admin, 'job-1'), b'csv')
        registro = self.leitor_mock.exportar_csv.call_args.args[0][0]
        self.assertEqual(registro['linha'], 1)
        self.assertEqual(registro['avisos'], 'Nenhuma submissão encontrada para o pedido; Valor alto')
        self.assertEqual(registro[CampoAlvo.NUMERO_PEDIDO], 'PED-1')

    def test_reprocessar_job_em_processamento_sem_forcar(self):
        self.job_repo_mock.buscar_por_id.return_value = JobValidacao(nome_arquivo='a.csv', admin_id='admin-1')

        with self.assertRaises(OperacaoNaoPermitidaError):
            self.use_case.reprocessar(self.admin, 'job-1')


# ====================================================================
# RANKING
# ====================================================================

class TestRanking(unittest.TestCase):

    def setUp(self):
        self.usuario_repo_mock = Mock()
        self.atividade_repo_mock = Mock()
        self.use_case = DashboardUseCase(
            usuario_repo=self.usuario_repo_mock,
            submissao_repo=Mock(),
            kit_repo=Mock(),
            campanha_repo=Mock(),
            ganho_repo=Mock(),
            premio_repo=Mock(),
            atividade_repo=self.atividade_repo_mock,
            gerenciar_campanhas=Mock(),
        )
        self.joao = Usuario(nome='João', email='joao@eps.com', id='u-1', pontos=500)
        self.ana = Usuario(nome='Ana', email='ana@eps.com', id='u-2', pontos=300)

    def test_ranking_geral_usa_pontos_acumulados(self):
        self.usuario_repo_mock.ranking_por_pontos.return_value = [self.joao, self.ana]

        ranking = self.use_case.ranking('Geral', 10)

        self.assertEqual([r['nome'] for r in ranking], ['João', 'Ana'])
        self.assertEqual(ranking[0]['posicao'], 1)
        self.assertEqual(ranking[0]['pontos'], 500)

    def test_ranking_mensal_usa_pontos_do_periodo(self):
        """
        Cenário: No mês, Ana pontuou mais que João, mesmo com menos pontos acumulados.
        """
        self.usuario_repo_mock.ranking_por_pontos.return_value = [self.joao, self.ana]
        self.atividade_repo_mock.somar_pontos_por_usuario.return_value = {'u-1': 50, 'u-2': 120}

        ranking = self.use_case.ranking('Mensal')

        self.assertEqual([r['usuario_id'] for r in ranking], ['u-2', 'u-1'])
        self.assertEqual(ranking[0]['pontos'], 120)

    def test_filtro_invalido(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.ranking('Anual')


# ====================================================================
# MANUTENÇÃO DE SUBMISSÕES
# ====================================================================

class TestGerenciarSubmissoes(unittest.TestCase):

    def setUp(self):
        self.submissao_repo_mock = Mock()
        self.kit_repo_mock = Mock()
        self.validar_submissao_mock = Mock()
        self.registrar_atividade_mock = Mock()
        self.use_case = GerenciarSubmissoesUseCase(
            submissao_repo=self.submissao_repo_mock,
            campanha_repo=Mock(),
            kit_repo=self.kit_repo_mock,
            usuario_repo=Mock(),
            validar_submissao=self.validar_submissao_mock,
            registrar_atividade=self.registrar_atividade_mock,
            uow=MagicMock(),
        )
        self.admin = Usuario(nome='Admin', email='admin@eps.com', papel=PapelUsuario.ADMIN, id='admin-1')
        self.vendedor = Usuario(nome='João', email='joao@eps.com', id='vendedor-1', gerente_id='gerente-1')
        self.submissao = Submissao(
            numero_pedido='PED-001', campanha_id='campanha-1', meta_id='meta-1', usuario_id='vendedor-1',
            kit_id='kit-1', quantidade=2, id='sub-1', usuario_gerente_id='gerente-1',
        )
        self.submissao_repo_mock.buscar_por_id.return_value = self.submissao
        self.submissao_repo_mock.salvar.side_effect = lambda submissao: submissao
        self.submissao_repo_mock.criar.side_effect = lambda submissao: submissao

    def test_transferir_move_para_cartela_de_destino(self):
        """
        Cenário: O admin move uma submissão pendente para a cartela de outro vendedor
        na mesma campanha; a conclusão da cartela de destino é verificada.
        """
        # ARRANGE
        self.kit_repo_mock.buscar_por_id.return_value = KitCampanha(
            campanha_id='campanha-1', usuario_id='vendedor-2', id='kit-2'
        )

        # ACT
        submissao = self.use_case.transferir(self.admin, 'sub-1', 'kit-2')

        # ASSERT
        self.assertEqual(submissao.kit_id, 'kit-2')
        self.assertEqual(submissao.usuario_id, 'vendedor-2')
        self.validar_submissao_mock.processar_conclusao_kit.assert_called_once_with('kit-2')

    def test_transferir_para_cartela_concluida_falha(self):
        self.kit_repo_mock.buscar_por_id.return_value = KitCampanha(
            campanha_id='campanha-1', usuario_id='vendedor-2', status=StatusKit.CONCLUIDO, id='kit-2'
        )

        with self.assertRaises(OperacaoNaoPermitidaError):
            self.use_case.transferir(self.admin, 'sub-1', 'kit-2')
        self.submissao_repo_mock.salvar.assert_not_called()

    def test_transferir_para_cartela_de_outra_campanha_falha(self):
        self.kit_repo_mock.buscar_por_id.return_value = KitCampanha(
            campanha_id='campanha-2', usuario_id='vendedor-2', id='kit-2'
        )

        with self.assertRaises(DadosInvalidosError):
            self.use_case.transferir(self.admin, 'sub-1', 'kit-2')

    def test_transferir_submissao_validada_falha(self):
        self.submissao.status = StatusSubmissao.VALIDADA

        with self.assertRaises(StatusInvalidoError):
            self.use_case.transferir(self.admin, 'sub-1', 'kit-2')

    def test_apenas_admin_transfere(self):
        with self.assertRaises(AcessoNegadoError):
            self.use_case.transferir(self.vendedor, 'sub-1', 'kit-2')

    def test_vendedor_altera_submissao_pendente(self):
        submissao = self.use_case.atualizar(self.vendedor, 'sub-1', {'quantidade': '3', 'observacoes': 'Cliente VIP'})

        self.assertEqual(submissao.quantidade, 3)
        self.assertEqual(submissao.observacoes, 'Cliente VIP')

    def test_submissao_processada_nao_pode_ser_alterada_nem_excluida(self):
        self.submissao.status = StatusSubmissao.VALIDADA

        with self.assertRaisesRegex(StatusInvalidoError, 'pendentes podem ser alteradas'):
            self.use_case.atualizar(self.vendedor, 'sub-1', {'quantidade': 3})
        with self.assertRaisesRegex(StatusInvalidoError, 'pendentes podem ser excluídas'):
            self.use_case.excluir(self.vendedor, 'sub-1')
        self.submissao_repo_mock.salvar.assert_not_called()
        self.submissao_repo_mock.excluir.assert_not_called()

    def test_vendedor_nao_altera_submissao_de_outro(self):
        outro = Usuario(nome='Pedro', email='pedro@eps.com', id='vendedor-2', gerente_id='gerente-1')

        with self.assertRaises(AcessoNegadoError):
            self.use_case.atualizar(outro, 'sub-1', {'quantidade': 3})

    def test_excluir_submissao_pendente(self):
        self.use_case.excluir(self.vendedor, 'sub-1')

        self.submissao_repo_mock.excluir.assert_called_once_with('sub-1')
        self.registrar_atividade_mock.executar.assert_called_once()

    def test_duplicar_cria_submissao_pendente_na_cartela_em_andamento(self):
        # ARRANGE
        self.submissao.status = StatusSubmissao.VALIDADA
        self.submissao_repo_mock.existe_numero_pedido.return_value = False
        self.kit_repo_mock.buscar_ou_criar_em_andamento.return_value = KitCampanha(
            campanha_id='campanha-1', usuario_id='vendedor-1', id='kit-3'
        )

        # ACT
        copia = self.use_case.duplicar(self.vendedor, 'sub-1', ' PED-002 ')

        # ASSERT
        self.assertEqual(copia.numero_pedido, 'PED-002')
        self.assertEqual(copia.status, StatusSubmissao.PENDENTE)
        self.assertEqual(copia.kit_id, 'kit-3')
        self.assertEqual(copia.quantidade, 2)
        self.assertNotEqual(copia.id, 'sub-1')

    def test_duplicar_com_pedido_existente_falha(self):
        self.submissao_repo_mock.existe_numero_pedido.return_value = True

        with self.assertRaises(PedidoDuplicadoError):
            self.use_case.duplicar(self.vendedor, 'sub-1', 'PED-001')
        self.submissao_repo_mock.criar.assert_not_called()


# ====================================================================
# CICLO DE PAGAMENTO DOS GANHOS
# ====================================================================

class TestGerenciarGanhos(unittest.TestCase):

    def setUp(self):
        self.ganho_repo_mock = Mock()
        self.usuario_repo_mock = Mock()
        self.registrar_atividade_mock = Mock()
        self.use_case = GerenciarGanhosUseCase(
            ganho_repo=self.ganho_repo_mock,
            usuario_repo=self.usuario_repo_mock,
            registrar_atividade=self.registrar_atividade_mock,
            uow=MagicMock(),
        )
        self.admin = Usuario(nome='Admin', email='admin@eps.com', papel=PapelUsuario.ADMIN, id='admin-1')
        self.ganho = Ganho(
            tipo=TipoGanho.VENDEDOR, usuario_id='vendedor-1', valor=Decimal('100'), descricao='Cartela', id='g-1'
        )
        self.ganho_repo_mock.buscar_por_id.return_value = self.ganho
        self.ganho_repo_mock.salvar.side_effect = lambda ganho: ganho

    def test_cancelar_estorna_os_pontos(self):
        ganho = self.use_case.cancelar(self.admin, 'g-1')

        self.assertEqual(ganho.status, StatusGanho.CANCELADO)
        self.usuario_repo_mock.incrementar_pontos.assert_called_once_with('vendedor-1', -100)
        atividade = self.registrar_atividade_mock.executar.call_args.kwargs
        self.assertEqual(atividade['pontos'], -100)
        self.assertEqual(atividade['metadados']['ganho_id'], 'g-1')

    def test_marcar_como_pago(self):
        ganho = self.use_case.marcar_como_pago(self.admin, 'g-1')

        self.assertEqual(ganho.status, StatusGanho.PAGO)
        self.assertIsNotNone(ganho.data_pagamento)
        self.usuario_repo_mock.incrementar_pontos.assert_not_called()

    def test_apenas_ganhos_pendentes_mudam_de_status(self):
        self.ganho.status = StatusGanho.PAGO

        with self.assertRaisesRegex(StatusInvalidoError, 'pendentes podem ser pagos'):
            self.use_case.marcar_como_pago(self.admin, 'g-1')
        with self.assertRaisesRegex(StatusInvalidoError, 'pendentes podem ser cancelados'):
            self.use_case.cancelar(self.admin, 'g-1')
        self.usuario_repo_mock.incrementar_pontos.assert_not_called()

    def test_apenas_admin_cancela(self):
        vendedor = Usuario(nome='João', email='joao@eps.com', id='vendedor-1')

        with self.assertRaises(AcessoNegadoError):
            self.use_case.cancelar(vendedor, 'g-1')


# ====================================================================
# CATÁLOGO DE PRÊMIOS
# ====================================================================

class TestGerenciarPremios(unittest.TestCase):

    def setUp(self):
        self.premio_repo_mock = Mock()
        self.use_case = GerenciarPremiosUseCase(
            premio_repo=self.premio_repo_mock,
            usuario_repo=Mock(),
            registrar_atividade=Mock(),
            uow=MagicMock(),
        )
        self.admin = Usuario(nome='Admin', email='admin@eps.com', papel=PapelUsuario.ADMIN, id='admin-1')
        self.premio = Premio(titulo='Vale-presente', descricao='R$ 100', pontos_necessarios=200, estoque=3, id='p-1')
        self.premio_repo_mock.buscar_por_id.return_value = self.premio

    def test_adicionar_estoque(self):
        premio = self.use_case.atualizar_estoque(self.admin, 'p-1', '5', 'add', 'Reposição')

        self.assertEqual(premio.estoque, 8)
        self.premio_repo_mock.ajustar_estoque.assert_called_once_with('p-1', 5)

    def test_remocao_nao_deixa_estoque_negativo(self):
        with self.assertRaises(EstoqueInsuficienteError):
            self.use_case.atualizar_estoque(self.admin, 'p-1', 4, 'remove')
        self.premio_repo_mock.ajustar_estoque.assert_not_called()

    def test_operacao_de_estoque_invalida(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.atualizar_estoque(self.admin, 'p-1', 1, 'set')

    def test_nao_exclui_premio_ja_resgatado(self):
        self.premio_repo_mock.possui_resgates.return_value = True

        with self.assertRaisesRegex(OperacaoNaoPermitidaError, 'já foram resgatados'):
            self.use_case.excluir(self.admin, 'p-1')
        self.premio_repo_mock.excluir.assert_not_called()

    def test_exclui_premio_sem_resgates(self):
        self.premio_repo_mock.possui_resgates.return_value = False

        self.use_case.excluir(self.admin, 'p-1')

        self.premio_repo_mock.excluir.assert_called_once_with('p-1')

    def test_importar_em_lote_retorna_resultado_por_item(self):
        """
        Cenário: Um item válido e dois inválidos; os erros não impedem a criação do item válido.
        """
        # ARRANGE
        self.premio_repo_mock.criar.side_effect = lambda premio: premio
        itens = [
            {'titulo': 'Fone', 'descricao': 'Bluetooth', 'pontos_necessarios': 150, 'estoque': 10},
            {'titulo': 'Mochila', 'descricao': 'Executiva'},
            {'titulo': 'Caneca', 'descricao': 'Térmica', 'pontos_necessarios': 'muitos'},
        ]

        # ACT
        resultado = self.use_case.importar_em_lote(self.admin, itens)

        # ASSERT
        self.assertEqual((resultado['total'], resultado['sucesso'], resultado['falhas']), (3, 1, 2))
        self.assertTrue(resultado['resultados'][0]['sucesso'])
        self.assertIsNotNone(resultado['resultados'][0]['premio_id'])
        self.assertEqual(resultado['resultados'][1]['mensagem'], 'O campo pontos_necessarios é obrigatório.')
        self.assertEqual(resultado['resultados'][2]['indice'], 3)
        self.assertEqual(self.premio_repo_mock.criar.call_count, 1)


# ====================================================================
# ADMINISTRAÇÃO DE USUÁRIOS
# ====================================================================

class TestGerenciarUsuarios(unittest.TestCase):

    def setUp(self):
        self.usuario_repo_mock = Mock()
        self.registrar_atividade_mock = Mock()
        self.use_case = GerenciarUsuariosUseCase(self.usuario_repo_mock, self.registrar_atividade_mock)

        self.admin = Usuario(nome='Admin', email='admin@eps.com', papel=PapelUsuario.ADMIN, id='admin-1')
        self.gerente = Usuario(nome='Maria', email='maria@eps.com', papel=PapelUsuario.GERENTE, id='gerente-1')
        self.outro_gerente = Usuario(nome='Paula', email='paula@eps.com', papel=PapelUsuario.GERENTE, id='gerente-2')
        self.vendedor = Usuario(nome='João', email='joao@eps.com', id='vendedor-1', gerente_id='gerente-1')
        usuarios = {u.id: u for u in (self.admin, self.gerente, self.outro_gerente, self.vendedor)}

        self.usuario_repo_mock.buscar_por_id.side_effect = lambda usuario_id, **kwargs: usuarios.get(usuario_id)
        self.usuario_repo_mock.salvar.side_effect = lambda usuario: usuario
        self.usuario_repo_mock.ids_da_equipe.return_value = []

    def test_vendedor_altera_apenas_campos_do_proprio_perfil(self):
        usuario = self.use_case.atualizar(self.vendedor, 'vendedor-1', {
            'nome': ' João Silva ', 'whatsapp': '(11) 98888-7777', 'papel': PapelUsuario.ADMIN, 'pontos': 999,
        })

        self.assertEqual(usuario.nome, 'João Silva')
        self.assertEqual(usuario.whatsapp, '11988887777')
        self.assertEqual(usuario.papel, PapelUsuario.VENDEDOR)
        self.assertEqual(usuario.pontos, 0)

    def test_perfil_sem_campos_permitidos_falha(self):
        with self.assertRaisesRegex(DadosInvalidosError, 'Nenhuma alteração permitida'):
            self.use_case.atualizar(self.vendedor, 'vendedor-1', {'papel': PapelUsuario.ADMIN})

    def test_gerente_nao_altera_dados_do_vendedor(self):
        with self.assertRaises(AcessoNegadoError):
            self.use_case.atualizar(self.gerente, 'vendedor-1', {'nome': 'Outro Nome'})

    def test_usuario_nao_pode_ser_seu_proprio_gerente(self):
        with self.assertRaisesRegex(DadosInvalidosError, 'seu próprio gerente'):
            self.use_case.atualizar(self.admin, 'vendedor-1', {'gerente_id': 'vendedor-1'})

    def test_admin_troca_o_gerente_do_vendedor(self):
        usuario = self.use_case.atualizar(self.admin, 'vendedor-1', {'gerente_id': 'gerente-2'})

        self.assertEqual(usuario.gerente_id, 'gerente-2')

    def test_gerente_id_vazio_e_gravado_como_nulo(self):
        usuario = self.use_case.atualizar(self.admin, 'gerente-1', {'gerente_id': ''})

        self.assertIsNone(usuario.gerente_id)
        self.assertIsNone(self.usuario_repo_mock.salvar.call_args.args[0].gerente_id)

    def test_bloqueio_registra_atividade_do_admin(self):
        usuario = self.use_case.definir_status(self.admin, 'vendedor-1', StatusUsuario.BLOQUEADO)

        self.assertEqual(usuario.status, StatusUsuario.BLOQUEADO)
        atividade = self.registrar_atividade_mock.executar.call_args.kwargs
        self.assertEqual(atividade['tipo'], TipoAtividade.ADMIN_USER_BLOCKED)
        self.assertEqual(atividade['usuario_id'], 'admin-1')
        self.assertEqual(atividade['metadados'], {'usuario_bloqueado_id': 'vendedor-1'})

    def test_desbloqueio_nao_registra_atividade(self):
        self.vendedor.status = StatusUsuario.BLOQUEADO

        self.use_case.definir_status(self.admin, 'vendedor-1', StatusUsuario.ATIVO)

        self.registrar_atividade_mock.executar.assert_not_called()

    def test_admin_nao_bloqueia_a_si_mesmo(self):
        with self.assertRaises(OperacaoNaoPermitidaError):
            self.use_case.definir_status(self.admin, 'admin-1', StatusUsuario.BLOQUEADO)

    def test_nao_exclui_gerente_com_vendedores(self):
        self.usuario_repo_mock.listar_vendedores.return_value = [self.vendedor]

        with self.assertRaisesRegex(OperacaoNaoPermitidaError, 'vendedores associados'):
            self.use_case.excluir(self.admin, 'gerente-1')
        self.usuario_repo_mock.listar_vendedores.assert_called_once_with('gerente-1', incluir_bloqueados=True)
        self.usuario_repo_mock.excluir.assert_not_called()

    def test_exclui_gerente_sem_vendedores(self):
        self.usuario_repo_mock.listar_vendedores.return_value = []

        self.use_case.excluir(self.admin, 'gerente-2')

        self.usuario_repo_mock.excluir.assert_called_once_with('gerente-2')


# ====================================================================
# PAINÉIS
# ====================================================================

class TestDashboards(unittest.TestCase):

    def setUp(self):
        self.usuario_repo_mock = Mock()
        self.submissao_repo_mock = Mock()
        self.kit_repo_mock = Mock()
        self.campanha_repo_mock = Mock()
        self.ganho_repo_mock = Mock()
        self.premio_repo_mock = Mock()
        self.atividade_repo_mock = Mock()
        self.gerenciar_campanhas_mock = Mock()
        self.use_case = DashboardUseCase(
            usuario_repo=self.usuario_repo_mock,
            submissao_repo=self.submissao_repo_mock,
            kit_repo=self.kit_repo_mock,
            campanha_repo=self.campanha_repo_mock,
            ganho_repo=self.ganho_repo_mock,
            premio_repo=self.premio_repo_mock,
            atividade_repo=self.atividade_repo_mock,
            gerenciar_campanhas=self.gerenciar_campanhas_mock,
        )
        self.admin = Usuario(nome='Admin', email='admin@eps.com', papel=PapelUsuario.ADMIN, id='admin-1')
        self.gerente = Usuario(nome='Maria', email='maria@eps.com', papel=PapelUsuario.GERENTE, id='gerente-1')
        self.vendedor = Usuario(nome='João', email='joao@eps.com', id='vendedor-1', gerente_id='gerente-1', pontos=100)
        self.colega = Usuario(nome='Pedro', email='pedro@eps.com', id='vendedor-2', gerente_id='gerente-1', pontos=250)
        usuarios = {u.id: u for u in (self.admin, self.gerente, self.vendedor, self.colega)}

        self.usuario_repo_mock.buscar_por_id.side_effect = lambda usuario_id, **kwargs: usuarios.get(usuario_id)
        self.ganho_repo_mock.totais_por_status.return_value = {StatusGanho.PENDENTE: Decimal('100')}

    def test_painel_do_vendedor(self):
        """
        Cenário: O vendedor vê seus pontos, a posição no ranking geral e o resumo das submissões.
        """
        # ARRANGE
        self.usuario_repo_mock.ranking_por_pontos.return_value = [self.colega, self.vendedor]
        self.submissao_repo_mock.contar_por_status.return_value = {
            StatusSubmissao.PENDENTE: 1, StatusSubmissao.VALIDADA: 2,
        }
        self.gerenciar_campanhas_mock.ativas_para_usuario.return_value = []
        self.atividade_repo_mock.listar_do_usuario.return_value = Pagina(itens=[], total=0)

        # ACT
        painel = self.use_case.vendedor(self.vendedor)

        # ASSERT
        self.assertEqual(painel['pontos'], 100)
        self.assertEqual(painel['ranking'], {'posicao': 2, 'total': 2})
        self.assertEqual(painel['submissoes'], {'total': 3, 'pendentes': 1, 'validadas': 2, 'rejeitadas': 0})
        self.submissao_repo_mock.contar_por_status.assert_called_once_with({'usuario_id': 'vendedor-1'})

    def test_vendedor_nao_ve_painel_de_outro_vendedor(self):
        with self.assertRaises(AcessoNegadoError):
            self.use_case.vendedor(self.vendedor, 'vendedor-2')

    def test_painel_do_gerente(self):
        # ARRANGE
        self.usuario_repo_mock.listar_vendedores.return_value = [self.vendedor, self.colega]
        self.submissao_repo_mock.contar_por_status.return_value = {StatusSubmissao.PENDENTE: 3}
        self.kit_repo_mock.contar_por_status.return_value = {StatusKit.CONCLUIDO: 2}

        # ACT
        painel = self.use_case.gerente(self.gerente)

        # ASSERT
        self.assertEqual(painel['tamanho_equipe'], 2)
        self.assertEqual(painel['pontos_equipe'], 350)
        self.assertEqual(painel['submissoes_pendentes'], 3)
        self.assertEqual(painel['kits_concluidos'], 2)
        self.assertEqual([e['nome'] for e in painel['ranking_equipe']], ['Pedro', 'João'])
        self.kit_repo_mock.contar_por_status.assert_called_once_with(usuario_ids=['vendedor-1', 'vendedor-2'])

    def test_painel_de_gerente_para_usuario_que_nao_e_gerente(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.gerente(self.admin, 'vendedor-1')

    def test_painel_do_admin(self):
        # ARRANGE
        self.usuario_repo_mock.contar_por_papel_e_status.return_value = {
            PapelUsuario.VENDEDOR: {StatusUsuario.ATIVO: 3, StatusUsuario.BLOQUEADO: 1},
            PapelUsuario.GERENTE: {StatusUsuario.ATIVO: 1},
        }
        self.campanha_repo_mock.contar_por_status.return_value = {StatusCampanha.ATIVA: 2, StatusCampanha.RASCUNHO: 1}
        self.submissao_repo_mock.contar_por_status.return_value = {StatusSubmissao.PENDENTE: 4}
        self.premio_repo_mock.estatisticas.return_value = {'total': 5}

        # ACT
        painel = self.use_case.admin(self.admin)

        # ASSERT
        self.assertEqual(painel['usuarios'], {PapelUsuario.ADMIN: 0, PapelUsuario.GERENTE: 1, PapelUsuario.VENDEDOR: 4})
        self.assertEqual(painel['campanhas_ativas'], 2)
        self.assertEqual(painel['submissoes_pendentes'], 4)
        self.assertEqual(painel['premios'], {'total': 5})

    def test_painel_do_admin_exige_admin(self):
        with self.assertRaises(AcessoNegadoError):
            self.use_case.admin(self.gerente)
