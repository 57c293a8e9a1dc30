from datetime import timedelta
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone

# Importamos as classes que queremos testar
from epscampanhas.infrastructure.models import (
    Usuario as UsuarioModel, Campanha as CampanhaModel, KitCampanha as KitModel, Notificacao as NotificacaoModel,
)
from epscampanhas.infrastructure.repositories import (
    UsuarioRepositoryDjango, CampanhaRepositoryDjango, KitRepositoryDjango, SubmissaoRepositoryDjango,
    PremioRepositoryDjango, NotificacaoRepositoryDjango, AtividadeRepositoryDjango, GanhoRepositoryDjango,
)
from epscampanhas.infrastructure.gateways import LeitorPlanilhaPandas
from epscampanhas.core.entities import (
    Usuario, Campanha, MetaCampanha, Submissao, Premio, ResgatePremio, Notificacao, Atividade,
    StatusCampanha, StatusKit, StatusSubmissao, StatusGanho, TipoAtividade,
)
from epscampanhas.core.exceptions import (
    DadosInvalidosError, PedidoDuplicadoError, UsuarioNaoEncontradoError,
)
from epscampanhas.core.dependency_injection import (
    get_criar_submissao_use_case, get_validar_submissao_use_case, get_criar_ganho_use_case,
    get_gerenciar_ganhos_use_case,
)


def criar_campanha_ativa(repo, **kwargs):
    dados = dict(
        titulo='Lentes de Verão',
        descricao='Campanha de teste',
        data_inicio=timezone.now() - timedelta(days=1),
        data_fim=timezone.now() + timedelta(days=30),
        pontos_por_conclusao=100,
        percentual_gerente=Decimal('10'),
        status=StatusCampanha.ATIVA,
        metas=[
            MetaCampanha(descricao='Lente Multifocal', quantidade=2),
            MetaCampanha(descricao='Armação Premium', quantidade=1),
        ],
    )
    dados.update(kwargs)
    return repo.criar(Campanha(**dados))


class UsuarioRepositoryTestCase(TestCase):

    def setUp(self):
        self.repository = UsuarioRepositoryDjango()
        self.gerente = self.repository.criar(
            Usuario(nome='Gerente Teste', email='gerente@eps.com', papel='GERENTE', cpf='11144477735'),
            'senha123',
        )

    def test_criar_usuario_grava_senha_com_hash(self):
        """
        Cenário: O usuário é criado com a senha em hash e pode ser verificado depois.
        """
        # ACT
        vendedor = self.repository.criar(
            Usuario(nome='Ana', email='ana@eps.com', cpf='52998224725', gerente_id=self.gerente.id),
            'segredo1',
        )

        # ASSERT
        model = UsuarioModel.objects.get(pk=vendedor.id)
        self.assertNotEqual(model.password, 'segredo1')
        self.assertTrue(self.repository.verificar_senha(vendedor.id, 'segredo1'))
        self.assertFalse(self.repository.verificar_senha(vendedor.id, 'errada'))
        self.assertEqual(vendedor.gerente_id, self.gerente.id)

    def test_email_duplicado_levanta_dados_invalidos(self):
        """
        Cenário: O índice único do e-mail vira um erro de negócio, não um IntegrityError.
        """
        with self.assertRaises(DadosInvalidosError):
            self.repository.criar(Usuario(nome='Outro', email='gerente@eps.com'), 'senha123')

    def test_usuario_bloqueado_fica_inativo_para_o_django(self):
        """
        Cenário: Ao salvar um usuário bloqueado, is_active acompanha o status.
        """
        # ARRANGE
        self.gerente.status = 'BLOCKED'

        # ACT
        self.repository.salvar(self.gerente)

        # ASSERT
        self.assertFalse(UsuarioModel.objects.get(pk=self.gerente.id).is_active)

    def test_incrementar_pontos_e_atomico(self):
        """
        Cenário: Incrementos sucessivos somam no banco sem ler o saldo antes.
        """
        # ACT
        self.repository.incrementar_pontos(self.gerente.id, 10)
        self.repository.incrementar_pontos(self.gerente.id, 5)

        # ASSERT
        self.assertEqual(self.repository.buscar_por_id(self.gerente.id).pontos, 15)

    def test_incrementar_pontos_usuario_inexistente(self):
        with self.assertRaises(UsuarioNaoEncontradoError):
            self.repository.incrementar_pontos('00000000-0000-0000-0000-000000000000', 10)

    def test_buscar_por_id_mal_formado_retorna_none(self):
        self.assertIsNone(self.repository.buscar_por_id('nao-e-um-uuid'))

    def test_ranking_ordena_por_pontos_e_ignora_bloqueados(self):
        """
        Cenário: O ranking traz apenas vendedores ativos, do maior para o menor saldo.
        """
        # ARRANGE
        ana = self.repository.criar(Usuario(nome='Ana', email='ana@eps.com'), 'senha123')
        bia = self.repository.criar(Usuario(nome='Bia', email='bia@eps.com'), 'senha123')
        caio = self.repository.criar(Usuario(nome='Caio', email='caio@eps.com', status='BLOCKED'), 'senha123')
        self.repository.incrementar_pontos(ana.id, 50)
        self.repository.incrementar_pontos(bia.id, 80)
        self.repository.incrementar_pontos(caio.id, 500)

        # ACT
        ranking = self.repository.ranking_por_pontos('VENDEDOR')

        # ASSERT
        self.assertEqual([u.nome for u in ranking], ['Bia', 'Ana'])

    def test_listar_vendedores_da_equipe(self):
        # ARRANGE
        self.repository.criar(Usuario(nome='Ana', email='ana@eps.com', gerente_id=self.gerente.id), 'senha123')
        self.repository.criar(
            Usuario(nome='Bruno', email='bruno@eps.com', gerente_id=self.gerente.id, status='BLOCKED'), 'senha123'
        )
        self.repository.criar(Usuario(nome='Sem Equipe', email='livre@eps.com'), 'senha123')

        # ACT / ASSERT
        self.assertEqual([u.nome for u in self.repository.listar_vendedores(self.gerente.id)], ['Ana'])
        self.assertEqual(len(self.repository.listar_vendedores(self.gerente.id, incluir_bloqueados=True)), 2)
        self.assertEqual(len(self.repository.ids_da_equipe(self.gerente.id)), 2)

    def test_listar_com_busca_e_paginacao(self):
        # ARRANGE
        for i in range(3):
            self.repository.criar(Usuario(nome=f'Vendedor {i}', email=f'v{i}@eps.com'), 'senha123')

        # ACT
        pagina = self.repository.listar({'busca': 'vendedor', 'papel': 'VENDEDOR'}, pagina=1, limite=2)

        # ASSERT
        self.assertEqual(pagina.total, 3)
        self.assertEqual(len(pagina.itens), 2)


class CampanhaRepositoryTestCase(TestCase):

    def setUp(self):
        self.repository = CampanhaRepositoryDjango()

    def test_criar_campanha_com_metas(self):
        """
        Cenário: A campanha e suas metas são gravadas juntas e voltam na leitura.
        """
        # ACT
        campanha = criar_campanha_ativa(self.repository)

        # ASSERT
        self.assertEqual(len(campanha.metas), 2)
        self.assertTrue(all(meta.campanha_id == campanha.id for meta in campanha.metas))
        meta = self.repository.buscar_meta(campanha.metas[0].id)
        self.assertEqual(meta.campanha_id, campanha.id)

    def test_atualizar_substituindo_metas(self):
        # ARRANGE
        campanha = criar_campanha_ativa(self.repository)
        campanha.metas = [MetaCampanha(descricao='Solar', quantidade=5)]

        # ACT
        atualizada = self.repository.atualizar(campanha, substituir_metas=True)

        # ASSERT
        self.assertEqual([m.descricao for m in atualizada.metas], ['Solar'])

    def test_expirar_campanhas_vencidas(self):
        """
        Cenário: Apenas campanhas ATIVAS com data_fim no passado passam para EXPIRADA.
        """
        # ARRANGE
        vencida = criar_campanha_ativa(
            self.repository,
            data_inicio=timezone.now() - timedelta(days=10),
            data_fim=timezone.now() - timedelta(days=1),
        )
        vigente = criar_campanha_ativa(self.repository)
        criar_campanha_ativa(
            self.repository,
            status=StatusCampanha.RASCUNHO,
            data_inicio=timezone.now() - timedelta(days=10),
            data_fim=timezone.now() - timedelta(days=1),
        )

        # ACT
        total = self.repository.expirar_campanhas(timezone.now())

        # ASSERT
        self.assertEqual(total, 1)
        self.assertEqual(CampanhaModel.objects.get(pk=vencida.id).status, StatusCampanha.EXPIRADA)
        self.assertEqual([c.id for c in self.repository.listar_ativas(timezone.now())], [vigente.id])


class KitESubmissaoRepositoryTestCase(TestCase):

    def setUp(self):
        self.vendedor = UsuarioRepositoryDjango().criar(Usuario(nome='Ana', email='ana@eps.com'), 'senha123')
        self.campanha = criar_campanha_ativa(CampanhaRepositoryDjango())
        self.meta = self.campanha.metas[0]
        self.kit_repo = KitRepositoryDjango()
        self.submissao_repo = SubmissaoRepositoryDjango()

    def _submissao(self, numero_pedido, quantidade=1, status=StatusSubmissao.PENDENTE, kit_id=None, meta=None):
        return self.submissao_repo.criar(Submissao(
            numero_pedido=numero_pedido,
            campanha_id=self.campanha.id,
            meta_id=(meta or self.meta).id,
            usuario_id=self.vendedor.id,
            kit_id=kit_id,
            quantidade=quantidade,
            status=status,
        ))

    def test_buscar_ou_criar_kit_reaproveita_o_em_andamento(self):
        """
        Cenário: Duas chamadas seguidas devolvem a mesma cartela em andamento.
        """
        # ACT
        primeiro = self.kit_repo.buscar_ou_criar_em_andamento(self.vendedor.id, self.campanha.id)
        segundo = self.kit_repo.buscar_ou_criar_em_andamento(self.vendedor.id, self.campanha.id)

        # ASSERT
        self.assertEqual(primeiro.id, segundo.id)
        self.assertEqual(KitModel.objects.count(), 1)

    def test_marcar_concluido_so_conclui_uma_vez(self):
        kit = self.kit_repo.buscar_ou_criar_em_andamento(self.vendedor.id, self.campanha.id)

        self.assertTrue(self.kit_repo.marcar_concluido(kit.id, timezone.now()))
        self.assertFalse(self.kit_repo.marcar_concluido(kit.id, timezone.now()))
        self.assertEqual(KitModel.objects.get(pk=kit.id).status, StatusKit.CONCLUIDO)

    def test_nova_cartela_apos_conclusao(self):
        # ARRANGE
        kit = self.kit_repo.buscar_ou_criar_em_andamento(self.vendedor.id, self.campanha.id)
        self.kit_repo.marcar_concluido(kit.id, timezone.now())

        # ACT
        novo = self.kit_repo.buscar_ou_criar_em_andamento(self.vendedor.id, self.campanha.id)

        # ASSERT
        self.assertNotEqual(novo.id, kit.id)
        self.assertEqual(novo.status, StatusKit.EM_ANDAMENTO)
        self.assertEqual(self.kit_repo.contar_por_status(self.campanha.id),
                         {StatusKit.CONCLUIDO: 1, StatusKit.EM_ANDAMENTO: 1})

    def test_somar_quantidades_validadas_por_meta(self):
        """
        Cenário: Apenas submissões validadas entram na soma, agrupadas por meta.
        """
        # ARRANGE
        kit = self.kit_repo.buscar_ou_criar_em_andamento(self.vendedor.id, self.campanha.id)
        self._submissao('PED-1', 1, StatusSubmissao.VALIDADA, kit.id)
        self._submissao('PED-2', 2, StatusSubmissao.VALIDADA, kit.id)
        self._submissao('PED-3', 5, StatusSubmissao.PENDENTE, kit.id)
        self._submissao('PED-4', 1, StatusSubmissao.VALIDADA, kit.id, meta=self.campanha.metas[1])

        # ACT
        somas = self.kit_repo.somar_quantidades_validadas(kit.id)

        # ASSERT
        self.assertEqual(somas, {self.meta.id: 3, self.campanha.metas[1].id: 1})

    def test_numero_pedido_duplicado(self):
        """
        Cenário: O índice único do número do pedido vira PedidoDuplicadoError.
        """
        # ARRANGE
        self._submissao('PED-1')

        # ACT e ASSERT
        self.assertTrue(self.submissao_repo.existe_numero_pedido('PED-1'))
        with self.assertRaises(PedidoDuplicadoError):
            self._submissao('PED-1')

    def test_submissao_traz_dados_relacionados(self):
        # ACT
        submissao = self._submissao('PED-1')

        # ASSERT
        self.assertEqual(submissao.usuario_nome, 'Ana')
        self.assertEqual(submissao.campanha_titulo, 'Lentes de Verão')
        self.assertEqual(submissao.meta_descricao, self.meta.descricao)

    def test_listar_e_contar_com_filtros(self):
        # ARRANGE
        self._submissao('PED-1', status=StatusSubmissao.VALIDADA)
        self._submissao('PED-2')
        self._submissao('OUTRO-3')

        # ACT
        pendentes = self.submissao_repo.listar({'status': StatusSubmissao.PENDENTE}, 1, 20)
        busca = self.submissao_repo.listar({'busca': 'PED'}, 1, 20)
        contagem = self.submissao_repo.contar_por_status({'usuario_id': self.vendedor.id})

        # ASSERT
        self.assertEqual(pendentes.total, 2)
        self.assertEqual(busca.total, 2)
        self.assertEqual(contagem, {StatusSubmissao.VALIDADA: 1, StatusSubmissao.PENDENTE: 2})

    def test_filtro_de_data_invalida(self):
        with self.assertRaises(DadosInvalidosError):
            self.submissao_repo.listar({'data_inicio': '31/12/2024'}, 1, 20)

    def test_relatorio_por_campanha(self):
        # ARRANGE
        self._submissao('PED-1', 2, StatusSubmissao.VALIDADA)
        self._submissao('PED-2', 3)

        # ACT
        relatorio = self.submissao_repo.relatorio({})

        # ASSERT
        self.assertEqual(relatorio['total'], 2)
        self.assertEqual(relatorio['quantidade_total'], 5)
        self.assertEqual(relatorio['por_campanha'][0]['validadas'], 1)


class PremioRepositoryTestCase(TestCase):

    def setUp(self):
        self.repository = PremioRepositoryDjango()
        self.usuario = UsuarioRepositoryDjango().criar(Usuario(nome='Ana', email='ana@eps.com'), 'senha123')
        self.premio = self.repository.criar(
            Premio(titulo='Vale-Compras', descricao='R$ 100', pontos_necessarios=100, estoque=3)
        )

    def test_ajustar_estoque(self):
        # ACT
        self.repository.ajustar_estoque(self.premio.id, -1)
        self.repository.ajustar_estoque(self.premio.id, 5)

        # ASSERT
        self.assertEqual(self.repository.buscar_por_id(self.premio.id).estoque, 7)

    def test_resgate_entra_em_historico_e_estatisticas(self):
        """
        Cenário: Um resgate gravado aparece no histórico, nos populares e nas estatísticas.
        """
        # ACT
        resgate = self.repository.criar_resgate(
            ResgatePremio(premio_id=self.premio.id, usuario_id=self.usuario.id, pontos_resgatados=100)
        )

        # ASSERT
        self.assertEqual(resgate.premio_titulo, 'Vale-Compras')
        self.assertEqual(len(self.repository.historico_usuario(self.usuario.id)), 1)
        self.assertTrue(self.repository.possui_resgates(self.premio.id))
        populares = self.repository.populares(5)
        self.assertEqual(populares[0]['total_resgates'], 1)
        estatisticas = self.repository.estatisticas()
        self.assertEqual(estatisticas['total_resgates'], 1)
        self.assertEqual(estatisticas['total_pontos_resgatados'], 100)

    def test_disponiveis_estoque_baixo_e_sem_estoque(self):
        # ARRANGE
        esgotado = self.repository.criar(Premio(titulo='Relógio', descricao='', pontos_necessarios=50, estoque=0))
        self.repository.criar(Premio(titulo='Viagem', descricao='', pontos_necessarios=5000, estoque=10))

        # ACT / ASSERT
        self.assertEqual([p.titulo for p in self.repository.listar_disponiveis(200)], ['Vale-Compras'])
        self.assertEqual([p.titulo for p in self.repository.estoque_baixo(5)], ['Vale-Compras'])
        self.assertEqual([p.id for p in self.repository.sem_estoque()], [esgotado.id])
        self.assertEqual(len(self.repository.catalogo_publico()), 2)


class NotificacaoEAtividadeRepositoryTestCase(TestCase):

    def setUp(self):
        self.usuario = UsuarioRepositoryDjango().criar(Usuario(nome='Ana', email='ana@eps.com'), 'senha123')
        self.notificacoes = NotificacaoRepositoryDjango()
        self.atividades = AtividadeRepositoryDjango()

    def test_marcar_todas_como_lidas(self):
        # ARRANGE
        for i in range(3):
            self.notificacoes.criar(Notificacao(usuario_id=self.usuario.id, titulo=f'Aviso {i}', mensagem='...'))

        # ACT
        atualizadas = self.notificacoes.marcar_todas_como_lidas(self.usuario.id)

        # ASSERT
        self.assertEqual(atualizadas, 3)
        self.assertEqual(self.notificacoes.contar_nao_lidas(self.usuario.id), 0)
        self.assertEqual(self.notificacoes.listar(self.usuario.id, True, 1, 20).total, 3)

    def test_somar_pontos_considera_apenas_conquistas_no_periodo(self):
        """
        Cenário: O ranking por período soma só atividades de conquista com pontos, a partir da data.
        """
        # ARRANGE
        self.atividades.criar(Atividade(
            usuario_id=self.usuario.id, tipo=TipoAtividade.CONQUISTA, descricao='Ganho', pontos=100,
        ))
        self.atividades.criar(Atividade(
            usuario_id=self.usuario.id, tipo=TipoAtividade.CONQUISTA, descricao='Antigo', pontos=40,
            data=timezone.now() - timedelta(days=40),
        ))
        self.atividades.criar(Atividade(
            usuario_id=self.usuario.id, tipo=TipoAtividade.CONQUISTA, descricao='Cartela concluída',
        ))
        self.atividades.criar(Atividade(
            usuario_id=self.usuario.id, tipo=TipoAtividade.VENDA, descricao='Venda', pontos=7,
        ))

        # ACT
        somas = self.atividades.somar_pontos_por_usuario(timezone.now() - timedelta(days=30))

        # ASSERT
        self.assertEqual(somas, {self.usuario.id: 100})

    def test_descricao_longa_e_truncada(self):
        atividade = self.atividades.criar(
            Atividade(usuario_id=self.usuario.id, tipo=TipoAtividade.VENDA, descricao='x' * 800)
        )
        self.assertEqual(len(atividade.descricao), 500)


class LeitorPlanilhaPandasTestCase(TestCase):

    def setUp(self):
        self.leitor = LeitorPlanilhaPandas()

    def test_ler_csv_com_ponto_e_virgula(self):
        """
        Cenário: O separador é detectado e todas as células chegam como texto.
        """
        # ARRANGE
        conteudo = 'pedido;cpf;valor\nPED-1;52998224725;10,50\nPED-2;01234567890;20\n'.encode('utf-8')

        # ACT
        planilha = self.leitor.ler(conteudo, 'vendas.csv')

        # ASSERT
        self.assertEqual(planilha['cabecalhos'], ['pedido', 'cpf', 'valor'])
        self.assertEqual(planilha['linhas'][1], ['PED-2', '01234567890', '20'])

    def test_arquivo_vazio(self):
        with self.assertRaises(DadosInvalidosError):
            self.leitor.ler(b'', 'vazio.csv')

    def test_exportar_csv_com_bom(self):
        # ACT
        conteudo = self.leitor.exportar_csv([{'linha': 1, 'status': 'VALID'}])

        # ASSERT
        self.assertTrue(conteudo.startswith(b'\xef\xbb\xbf'))
        self.assertIn('linha,status', conteudo.decode('utf-8-sig'))


class FluxoConclusaoCartelaTestCase(TestCase):
    """Submissão e validação passando pelos use cases reais e pelo banco."""

    def setUp(self):
        usuarios = UsuarioRepositoryDjango()
        self.gerente = usuarios.criar(
            Usuario(nome='Gerente', email='gerente@eps.com', papel='GERENTE'), 'senha123'
        )
        self.vendedor = usuarios.criar(
            Usuario(nome='Ana', email='ana@eps.com', gerente_id=self.gerente.id), 'senha123'
        )
        self.campanha = criar_campanha_ativa(CampanhaRepositoryDjango())
        self.metas = {m.descricao: m for m in self.campanha.metas}

    def _submeter_e_validar(self, numero_pedido, meta, quantidade):
        submissao = get_criar_submissao_use_case().executar(self.vendedor, {
            'numero_pedido': numero_pedido,
            'campanha_id': self.campanha.id,
            'meta_id': meta.id,
            'quantidade': quantidade,
        })
        return get_validar_submissao_use_case().executar_detalhado(
            self.gerente, submissao.id, StatusSubmissao.VALIDADA
        )

    def test_cartela_completa_gera_ganhos_e_pontos(self):
        """
        Cenário: Ao atingir todas as metas, a cartela é concluída, o vendedor recebe
        os pontos da campanha e o gerente o percentual configurado.
        """
        # ACT
        _, ganhos_parciais = self._submeter_e_validar('PED-1', self.metas['Lente Multifocal'], 2)
        submissao, ganhos = self._submeter_e_validar('PED-2', self.metas['Armação Premium'], 1)

        # ASSERT
        self.assertEqual(ganhos_parciais, [])
        self.assertEqual(len(ganhos), 2)
        self.assertEqual(KitModel.objects.get(pk=submissao.kit_id).status, StatusKit.CONCLUIDO)

        usuarios = UsuarioRepositoryDjango()
        self.assertEqual(usuarios.buscar_por_id(self.vendedor.id).pontos, 100)
        self.assertEqual(usuarios.buscar_por_id(self.gerente.id).pontos, 10)

        totais = GanhoRepositoryDjango().totais_por_status({'usuario_id': self.vendedor.id})
        self.assertEqual(totais[StatusGanho.PENDENTE], Decimal('100'))
        self.assertTrue(NotificacaoModel.objects.filter(usuario_id=self.gerente.id).exists())

    def test_proxima_submissao_abre_nova_cartela(self):
        # ARRANGE
        self._submeter_e_validar('PED-1', self.metas['Lente Multifocal'], 2)
        primeira, _ = self._submeter_e_validar('PED-2', self.metas['Armação Premium'], 1)

        # ACT
        nova = get_criar_submissao_use_case().executar(self.vendedor, {
            'numero_pedido': 'PED-3',
            'campanha_id': self.campanha.id,
            'meta_id': self.metas['Armação Premium'].id,
            'quantidade': 1,
        })

        # ASSERT
        self.assertNotEqual(nova.kit_id, primeira.kit_id)

    def test_ganho_cancelado_sai_do_ranking_do_periodo(self):
        """
        Cenário: Um ganho creditado e depois cancelado estorna os pontos do saldo
        e deixa de contar na soma de pontos do período.
        """
        # ARRANGE
        admin = UsuarioRepositoryDjango().criar(
            Usuario(nome='Admin', email='admin@eps.com', papel='ADMIN'), 'senha123'
        )
        mantido = get_criar_ganho_use_case().executar(
            tipo='SELLER', usuario_id=self.vendedor.id, valor=Decimal('30'), descricao='Bônus'
        )
        cancelado = get_criar_ganho_use_case().executar(
            tipo='SELLER', usuario_id=self.vendedor.id, valor=Decimal('50'), descricao='Lançado por engano'
        )

        # ACT
        get_gerenciar_ganhos_use_case().cancelar(admin, cancelado.id)

        # ASSERT
        self.assertEqual(UsuarioRepositoryDjango().buscar_por_id(self.vendedor.id).pontos, 30)
        somas = AtividadeRepositoryDjango().somar_pontos_por_usuario(timezone.now() - timedelta(days=30))
        self.assertEqual(somas, {self.vendedor.id: 30})
        self.assertEqual(GanhoRepositoryDjango().buscar_por_id(mantido.id).status, StatusGanho.PENDENTE)


class MigracoesTestCase(TestCase):

    def test_modelos_sem_alteracoes_pendentes_de_migracao(self):
        saida = StringIO()
        try:
            call_command('makemigrations', 'infrastructure', '--check', '--dry-run', stdout=saida)
        except SystemExit:
            self.fail(f"Modelos alterados sem migração correspondente:\n{saida.getvalue()}")
