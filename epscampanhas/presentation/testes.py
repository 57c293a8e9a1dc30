import json
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from epscampanhas.infrastructure.models import (
    Campanha as CampanhaModel, MetaCampanha as MetaModel, Submissao as SubmissaoModel, Premio as PremioModel,
    Atividade as AtividadeModel, JobValidacao as JobValidacaoModel,
)
from epscampanhas.core.dependency_injection import get_criar_ganho_use_case

CPF_VENDEDOR = '52998224725'


class BaseAPITestCase(APITestCase):
    """Cria um administrador, um gerente, um vendedor da equipe e uma campanha ativa."""

    def setUp(self):
        Usuario = get_user_model()
        self.admin = Usuario.objects.create_user(
            email='admin@eps.com', password='senha123', nome='Administrador', papel='ADMIN'
        )
        self.gerente = Usuario.objects.create_user(
            email='gerente@eps.com', password='senha123', nome='Gerente', papel='GERENTE'
        )
        self.vendedor = Usuario.objects.create_user(
            email='vendedor@eps.com', password='senha123', nome='Vendedor', papel='VENDEDOR',
            cpf=CPF_VENDEDOR, gerente=self.gerente,
        )
        self.campanha = CampanhaModel.objects.create(
            titulo='Lentes de Verão',
            data_inicio=timezone.now() - timedelta(days=1),
            data_fim=timezone.now() + timedelta(days=30),
            pontos_por_conclusao=100,
            percentual_gerente=10,
            status='ATIVA',
        )
        self.meta_lente = MetaModel.objects.create(campanha=self.campanha, descricao='Lente', quantidade=2)
        self.meta_armacao = MetaModel.objects.create(campanha=self.campanha, descricao='Armação', quantidade=1)

    def submeter(self, numero_pedido, meta, quantidade=1):
        self.client.force_authenticate(user=self.vendedor)
        return self.client.post('/api/submissoes/', {
            'numero_pedido': numero_pedido,
            'campanha_id': str(self.campanha.id),
            'meta_id': str(meta.id),
            'quantidade': quantidade,
        }, format='json')


class AutenticacaoAPITestCase(BaseAPITestCase):

    def test_login_devolve_tokens_que_autenticam(self):
        """
        Cenário: Login com credenciais válidas devolve o par JWT e o token dá acesso ao perfil.
        """
        # ACT
        response = self.client.post('/api/auth/login/', {'email': 'vendedor@eps.com', 'senha': 'senha123'}, format='json')

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['usuario']['papel'], 'VENDEDOR')

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        perfil = self.client.get('/api/auth/me/')
        self.assertEqual(perfil.status_code, status.HTTP_200_OK)
        self.assertEqual(perfil.data['email'], 'vendedor@eps.com')

    def test_login_senha_errada(self):
        response = self.client.post('/api/auth/login/', {'email': 'vendedor@eps.com', 'senha': 'errada'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['message'], "E-mail ou senha inválidos")

    def test_usuario_bloqueado_nao_faz_login(self):
        # ARRANGE
        self.vendedor.status = 'BLOCKED'
        self.vendedor.save()

        # ACT
        response = self.client.post('/api/auth/login/', {'email': 'vendedor@eps.com', 'senha': 'senha123'}, format='json')

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['message'], "Usuário bloqueado")

    def test_token_de_usuario_bloqueado_e_recusado(self):
        """
        Cenário: Um token emitido antes do bloqueio deixa de valer.
        """
        # ARRANGE
        token = RefreshToken.for_user(self.vendedor).access_token
        self.vendedor.status = 'BLOCKED'
        self.vendedor.is_active = False
        self.vendedor.save()
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

        # ACT
        response = self.client.get('/api/auth/me/')

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_sem_autenticacao(self):
        response = self.client.get('/api/campanhas/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_registro_publico_de_vendedor(self):
        # ACT
        response = self.client.post('/api/auth/registro/', {
            'nome': 'Nova Vendedora',
            'email': 'nova@eps.com',
            'senha': 'senha123',
            'cpf': '111.444.777-35',
            'gerente_id': str(self.gerente.id),
        }, format='json')

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['cpf'], '11144477735')
        self.assertEqual(response.data['gerente_id'], str(self.gerente.id))

    def test_registro_publico_nao_cria_administrador(self):
        response = self.client.post('/api/auth/registro/', {
            'nome': 'Intruso', 'email': 'intruso@eps.com', 'senha': 'senha123',
            'cpf': '11144477735', 'papel': 'ADMIN',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class CampanhaAPITestCase(BaseAPITestCase):

    def payload(self):
        return {
            'titulo': 'Campanha de Inverno',
            'data_inicio': (timezone.now() + timedelta(days=1)).isoformat(),
            'data_fim': (timezone.now() + timedelta(days=60)).isoformat(),
            'pontos_por_conclusao': 200,
            'percentual_gerente': '15.00',
            'metas': [{'descricao': 'Lente Solar', 'quantidade': 3}],
        }

    def test_vendedor_nao_cria_campanha(self):
        """
        Cenário: A Core recusa a criação por vendedor e a API responde 403 com 'message'.
        """
        self.client.force_authenticate(user=self.vendedor)

        response = self.client.post('/api/campanhas/', self.payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn('message', response.data)

    def test_admin_cria_campanha_como_rascunho(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post('/api/campanhas/', self.payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'RASCUNHO')
        self.assertEqual(len(response.data['metas']), 1)

    def test_campanha_inexistente(self):
        self.client.force_authenticate(user=self.vendedor)

        response = self.client.get('/api/campanhas/00000000-0000-0000-0000-000000000000/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], "Campanha não encontrada")

    def test_campanhas_ativas_do_vendedor(self):
        self.client.force_authenticate(user=self.vendedor)

        response = self.client.get('/api/campanhas/ativas/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)


class SubmissaoAPITestCase(BaseAPITestCase):

    def test_fluxo_de_submissao_e_validacao(self):
        """
        Cenário: O vendedor submete as vendas das metas, o gerente valida e a cartela
        concluída credita os pontos do vendedor e do gerente.
        """
        # ARRANGE
        primeira = self.submeter('PED-1', self.meta_lente, 2)
        segunda = self.submeter('PED-2', self.meta_armacao, 1)
        self.assertEqual(primeira.status_code, status.HTTP_201_CREATED)
        self.assertEqual(primeira.data['status'], 'PENDING')

        # ACT
        self.client.force_authenticate(user=self.gerente)
        self.client.post(f"/api/submissoes/{primeira.data['id']}/validar/", {'status': 'VALIDATED'}, format='json')
        response = self.client.post(
            f"/api/submissoes/{segunda.data['id']}/validar/", {'status': 'VALIDATED', 'mensagem': 'Ok'}, format='json'
        )

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['submissao']['status'], 'VALIDATED')
        self.assertEqual(len(response.data['ganhos']), 2)
        self.vendedor.refresh_from_db()
        self.gerente.refresh_from_db()
        self.assertEqual(self.vendedor.pontos, 100)
        self.assertEqual(self.gerente.pontos, 10)

        self.client.force_authenticate(user=self.vendedor)
        nao_lidas = self.client.get('/api/notificacoes/nao-lidas/')
        self.assertGreaterEqual(nao_lidas.data['nao_lidas'], 1)

    def test_numero_pedido_duplicado(self):
        self.submeter('PED-1', self.meta_lente)

        response = self.submeter('PED-1', self.meta_lente)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], "Número de pedido já foi utilizado em outra submissão")

    def test_gerente_nao_submete(self):
        self.client.force_authenticate(user=self.gerente)

        response = self.client.post('/api/submissoes/', {
            'numero_pedido': 'PED-9', 'campanha_id': str(self.campanha.id), 'meta_id': str(self.meta_lente.id),
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_submissao_inexistente(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.get('/api/submissoes/nao-existe/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], "Submissão não encontrada")

    def test_vendedor_nao_valida(self):
        submissao = self.submeter('PED-1', self.meta_lente)

        response = self.client.post(f"/api/submissoes/{submissao.data['id']}/validar/", {'status': 'VALIDATED'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_listagem_do_vendedor_traz_apenas_as_proprias(self):
        # ARRANGE
        outro = get_user_model().objects.create_user(
            email='outro@eps.com', password='senha123', nome='Outro', papel='VENDEDOR', gerente=self.gerente,
        )
        SubmissaoModel.objects.create(
            numero_pedido='PED-OUTRO', campanha=self.campanha, meta=self.meta_lente, usuario=outro,
        )
        self.submeter('PED-1', self.meta_lente)

        # ACT
        response = self.client.get('/api/submissoes/')

        # ASSERT
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['itens'][0]['numero_pedido'], 'PED-1')


class PremioERankingAPITestCase(BaseAPITestCase):

    def setUp(self):
        super().setUp()
        self.premio = PremioModel.objects.create(titulo='Vale-Compras', pontos_necessarios=100, estoque=2)

    def test_catalogo_e_publico(self):
        response = self.client.get('/api/premios/catalogo/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['titulo'], 'Vale-Compras')

    def test_resgate_debita_pontos_e_estoque(self):
        # ARRANGE
        self.vendedor.pontos = 150
        self.vendedor.save()
        self.client.force_authenticate(user=self.vendedor)

        # ACT
        response = self.client.post(f'/api/premios/{self.premio.id}/resgatar/')

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.vendedor.refresh_from_db()
        self.premio.refresh_from_db()
        self.assertEqual(self.vendedor.pontos, 50)
        self.assertEqual(self.premio.estoque, 1)

    def test_resgate_sem_pontos_suficientes(self):
        self.client.force_authenticate(user=self.vendedor)

        response = self.client.post(f'/api/premios/{self.premio.id}/resgatar/')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.premio.refresh_from_db()
        self.assertEqual(self.premio.estoque, 2)

    def test_ranking_geral(self):
        # ARRANGE
        self.vendedor.pontos = 300
        self.vendedor.save()
        get_user_model().objects.create_user(
            email='bia@eps.com', password='senha123', nome='Bia', papel='VENDEDOR', gerente=self.gerente, pontos=500,
        )
        self.client.force_authenticate(user=self.vendedor)

        # ACT
        response = self.client.get('/api/ranking/', {'filtro': 'Geral'})

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['nome'] for item in response.data], ['Bia', 'Vendedor'])
        self.assertEqual(response.data[0]['posicao'], 1)

    def test_ranking_filtro_invalido(self):
        self.client.force_authenticate(user=self.vendedor)

        response = self.client.get('/api/ranking/', {'filtro': 'Anual'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class JobValidacaoAPITestCase(BaseAPITestCase):

    def planilha(self, linhas):
        conteudo = '\n'.join(['pedido,cpf'] + linhas) + '\n'
        return SimpleUploadedFile('vendas.csv', conteudo.encode('utf-8'), content_type='text/csv')

    def test_planilha_valida_submissao_pendente(self):
        """
        Cenário: A linha da planilha com pedido e CPF do vendedor valida a submissão pendente;
        a linha com CPF inválido é registrada como erro.
        """
        # ARRANGE
        submissao = self.submeter('PED-1', self.meta_lente)
        self.client.force_authenticate(user=self.admin)

        # ACT
        response = self.client.post('/api/validacoes/', {
            'arquivo': self.planilha([f'PED-1,{CPF_VENDEDOR}', 'PED-2,12345678900']),
            'mapeamentos': json.dumps({'pedido': 'ORDER_ID', 'cpf': 'SELLER_CPF'}),
        }, format='multipart')

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'CONCLUIDO')
        self.assertEqual(response.data['total_linhas'], 2)
        self.assertEqual(response.data['vendas_validadas'], 1)
        self.assertEqual(response.data['erros'], 1)
        self.assertEqual(SubmissaoModel.objects.get(pk=submissao.data['id']).status, 'VALIDATED')

        exportacao = self.client.get(f"/api/validacoes/{response.data['id']}/exportar/")
        self.assertEqual(exportacao.status_code, status.HTTP_200_OK)
        self.assertEqual(exportacao['Content-Type'], 'text/csv; charset=utf-8')

    def test_modo_simulacao_nao_altera_submissoes(self):
        # ARRANGE
        submissao = self.submeter('PED-1', self.meta_lente)
        self.client.force_authenticate(user=self.admin)

        # ACT
        response = self.client.post('/api/validacoes/', {
            'arquivo': self.planilha([f'PED-1,{CPF_VENDEDOR}']),
            'mapeamentos': json.dumps({'pedido': 'ORDER_ID', 'cpf': 'SELLER_CPF'}),
            'configuracao': json.dumps({'simulacao': True}),
        }, format='multipart')

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['simulacao'])
        self.assertEqual(SubmissaoModel.objects.get(pk=submissao.data['id']).status, 'PENDING')

    def test_mapeamento_sem_cpf(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post('/api/validacoes/', {
            'arquivo': self.planilha(['PED-1,123']),
            'mapeamentos': json.dumps({'pedido': 'ORDER_ID'}),
        }, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_apenas_admin(self):
        self.client.force_authenticate(user=self.gerente)

        response = self.client.get('/api/validacoes/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_pre_visualizar_nao_cria_job(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post('/api/validacoes/pre-visualizar/', {
            'arquivo': self.planilha([f'PED-1,{CPF_VENDEDOR}', 'PED-2,12345678900']),
            'mapeamentos': json.dumps({'pedido': 'ORDER_ID', 'cpf': 'SELLER_CPF'}),
        }, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_linhas'], 2)
        self.assertEqual(response.data['validacao'][1]['status'], 'ERROR')
        self.assertFalse(JobValidacaoModel.objects.exists())

    def test_exportar_job_nao_concluido(self):
        job = JobValidacaoModel.objects.create(nome_arquivo='vendas.csv', admin=self.admin, status='FALHOU')
        self.client.force_authenticate(user=self.admin)

        response = self.client.get(f'/api/validacoes/{job.id}/exportar/')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], "Job ainda não foi concluído")

    def test_reprocessar_job_com_falha_reaplica_as_linhas_guardadas(self):
        """
        Cenário: Um job que falhou guarda as linhas mapeadas; o reprocessamento valida a submissão pendente.
        """
        # ARRANGE
        submissao = self.submeter('PED-1', self.meta_lente)
        job = JobValidacaoModel.objects.create(
            nome_arquivo='vendas.csv', admin=self.admin, status='FALHOU', total_linhas=1,
            detalhes=[{'linha': 1, 'dados': {'ORDER_ID': 'PED-1', 'SELLER_CPF': CPF_VENDEDOR}}],
        )
        self.client.force_authenticate(user=self.admin)

        # ACT
        response = self.client.post(f'/api/validacoes/{job.id}/reprocessar/')

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'CONCLUIDO')
        self.assertEqual(response.data['total_linhas'], 1)
        self.assertEqual(response.data['vendas_validadas'], 1)
        self.assertEqual(SubmissaoModel.objects.get(pk=submissao.data['id']).status, 'VALIDATED')

    def test_reprocessar_job_sem_linhas_guardadas(self):
        job = JobValidacaoModel.objects.create(
            nome_arquivo='vendas.csv', admin=self.admin, status='FALHOU', total_linhas=500,
        )
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(f'/api/validacoes/{job.id}/reprocessar/')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        job.refresh_from_db()
        self.assertEqual((job.status, job.total_linhas), ('FALHOU', 500))


class SubmissaoManutencaoAPITestCase(BaseAPITestCase):

    def test_vendedor_exclui_submissao_pendente(self):
        submissao = self.submeter('PED-1', self.meta_lente)

        response = self.client.delete(f"/api/submissoes/{submissao.data['id']}/")

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(SubmissaoModel.objects.filter(pk=submissao.data['id']).exists())

    def test_submissao_validada_nao_pode_ser_alterada(self):
        submissao = self.submeter('PED-1', self.meta_lente)
        SubmissaoModel.objects.filter(pk=submissao.data['id']).update(status='VALIDATED')

        response = self.client.patch(f"/api/submissoes/{submissao.data['id']}/", {'quantidade': 3}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], "Apenas submissões pendentes podem ser alteradas")

    def test_duplicar_cria_nova_submissao_pendente(self):
        submissao = self.submeter('PED-1', self.meta_lente, quantidade=2)

        response = self.client.post(
            f"/api/submissoes/{submissao.data['id']}/duplicar/", {'numero_pedido': 'PED-2'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['numero_pedido'], 'PED-2')
        self.assertEqual(response.data['status'], 'PENDING')
        self.assertEqual(response.data['quantidade'], 2)

    def test_apenas_admin_transfere(self):
        submissao = self.submeter('PED-1', self.meta_lente)
        self.client.force_authenticate(user=self.gerente)

        response = self.client.post(
            f"/api/submissoes/{submissao.data['id']}/transferir/", {'kit_destino_id': 'qualquer'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class GanhoAPITestCase(BaseAPITestCase):

    def setUp(self):
        super().setUp()
        self.ganho = get_criar_ganho_use_case().executar(
            tipo='SELLER', usuario_id=str(self.vendedor.id), valor=Decimal('50'), descricao='Bônus de campanha'
        )

    def test_admin_cancela_ganho_e_estorna_pontos(self):
        # ARRANGE
        self.client.force_authenticate(user=self.admin)

        # ACT
        response = self.client.post(f'/api/ganhos/{self.ganho.id}/cancelar/')

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'CANCELADO')
        self.vendedor.refresh_from_db()
        self.assertEqual(self.vendedor.pontos, 0)

        pagamento = self.client.post(f'/api/ganhos/{self.ganho.id}/pagar/')
        self.assertEqual(pagamento.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(pagamento.data['message'], "Apenas ganhos pendentes podem ser pagos.")

    def test_gerente_nao_cancela_ganho(self):
        self.client.force_authenticate(user=self.gerente)

        response = self.client.post(f'/api/ganhos/{self.ganho.id}/cancelar/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class UsuarioAPITestCase(BaseAPITestCase):

    def test_gerente_nao_altera_dados_do_vendedor(self):
        self.client.force_authenticate(user=self.gerente)

        response = self.client.patch(f'/api/usuarios/{self.vendedor.id}/', {'nome': 'Outro'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_gerente_id_vazio_volta_como_nulo(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.patch(f'/api/usuarios/{self.gerente.id}/', {'gerente_id': ''}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['gerente_id'])

    def test_bloqueio_registra_atividade(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.patch(f'/api/usuarios/{self.vendedor.id}/status/', {'status': 'BLOCKED'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'BLOCKED')
        self.assertTrue(AtividadeModel.objects.filter(usuario=self.admin, tipo='ADMIN_USER_BLOCKED').exists())

    def test_nao_exclui_gerente_com_vendedores(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.delete(f'/api/usuarios/{self.gerente.id}/')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], "Não é possível excluir gerente que possui vendedores associados")


class PremioAdministracaoAPITestCase(BaseAPITestCase):

    def setUp(self):
        super().setUp()
        self.premio = PremioModel.objects.create(titulo='Vale-Compras', pontos_necessarios=100, estoque=2)

    def test_remocao_maior_que_o_estoque(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            f'/api/premios/{self.premio.id}/estoque/', {'quantidade': 5, 'operacao': 'remove'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.premio.refresh_from_db()
        self.assertEqual(self.premio.estoque, 2)

    def test_vendedor_nao_ajusta_estoque(self):
        self.client.force_authenticate(user=self.vendedor)

        response = self.client.post(
            f'/api/premios/{self.premio.id}/estoque/', {'quantidade': 5, 'operacao': 'add'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_nao_exclui_premio_resgatado(self):
        # ARRANGE
        self.vendedor.pontos = 100
        self.vendedor.save()
        self.client.force_authenticate(user=self.vendedor)
        self.client.post(f'/api/premios/{self.premio.id}/resgatar/')
        self.client.force_authenticate(user=self.admin)

        # ACT
        response = self.client.delete(f'/api/premios/{self.premio.id}/')

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(PremioModel.objects.filter(pk=self.premio.id).exists())

    def test_importar_em_lote(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post('/api/premios/importar/', {'premios': [
            {'titulo': 'Fone', 'descricao': 'Bluetooth', 'pontos_necessarios': 150, 'estoque': 10},
            {'titulo': 'Mochila', 'descricao': 'Executiva'},
        ]}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual((response.data['sucesso'], response.data['falhas']), (1, 1))
        self.assertTrue(PremioModel.objects.filter(titulo='Fone').exists())


class DashboardAPITestCase(BaseAPITestCase):

    def test_painel_do_vendedor(self):
        self.client.force_authenticate(user=self.vendedor)

        response = self.client.get('/api/dashboard/vendedor/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['ranking'], {'posicao': 1, 'total': 1})
        self.assertEqual(response.data['submissoes']['total'], 0)

    def test_painel_do_gerente(self):
        self.submeter('PED-1', self.meta_lente)
        self.client.force_authenticate(user=self.gerente)

        response = self.client.get('/api/dashboard/gerente/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['tamanho_equipe'], 1)
        self.assertEqual(response.data['submissoes_pendentes'], 1)

    def test_painel_do_admin(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.get('/api/dashboard/admin/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['campanhas_ativas'], 1)
        self.assertEqual(response.data['usuarios']['VENDEDOR'], 1)

    def test_paineis_restritos_por_papel(self):
        self.client.force_authenticate(user=self.vendedor)
        self.assertEqual(self.client.get('/api/dashboard/gerente/').status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.gerente)
        self.assertEqual(self.client.get('/api/dashboard/admin/').status_code, status.HTTP_403_FORBIDDEN)
