from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from epscampanhas.infrastructure.models import (
    Usuario, Campanha, MetaCampanha, KitCampanha, Submissao, Ganho, Premio, Notificacao, Atividade,
)

SENHA_PADRAO = 'password123'


class Command(BaseCommand):
    help = 'Carrega dados iniciais (usuários, campanhas, prêmios e exemplos) para teste do sistema'

    @transaction.atomic
    def handle(self, *args, **kwargs):
        self.stdout.write('Criando dados iniciais...')
        agora = timezone.now()

        # Usuários
        admin = self._usuario(
            'admin@eps.com', 'Carlos Administrador', Usuario.Papel.ADMIN,
            cpf='33333333333', whatsapp='11933333333', nome_otica='EPS Matriz',
            cnpj_otica='00000000000100', nivel='Admin', pontos=0,
            is_staff=True, is_superuser=True,
        )
        maria = self._usuario(
            'maria.gerente@eps.com', 'Maria Santos', Usuario.Papel.GERENTE,
            cpf='22222222222', whatsapp='11922222222', nome_otica='Ótica Visão Clara',
            cnpj_otica='11111111000111', nivel='Platina', pontos=7200,
        )
        pedro = self._usuario(
            'pedro.gerente@eps.com', 'Pedro Oliveira', Usuario.Papel.GERENTE,
            cpf='44444444444', whatsapp='11944444444', nome_otica='Ótica Premium',
            cnpj_otica='22222222000222', nivel='Ouro', pontos=5800,
        )
        joao = self._usuario(
            'joao.vendedor@eps.com', 'João Silva', Usuario.Papel.VENDEDOR,
            cpf='11111111111', whatsapp='11911111111', nome_otica='Ótica Visão Clara',
            cnpj_otica='11111111000111', nivel='Ouro', pontos=4850, gerente=maria,
        )
        ana = self._usuario(
            'ana.vendedora@eps.com', 'Ana Costa', Usuario.Papel.VENDEDOR,
            cpf='55555555555', whatsapp='11955555555', nome_otica='Ótica Visão Clara',
            cnpj_otica='11111111000111', nivel='Prata', pontos=2300, gerente=maria,
        )
        self._usuario(
            'lucas.vendedor@eps.com', 'Lucas Ferreira', Usuario.Papel.VENDEDOR,
            cpf='66666666666', whatsapp='11966666666', nome_otica='Ótica Premium',
            cnpj_otica='22222222000222', nivel='Bronze', pontos=850, gerente=pedro,
        )
        self._usuario(
            'carla.vendedora@eps.com', 'Carla Mendes', Usuario.Papel.VENDEDOR,
            cpf='77777777777', whatsapp='11977777777', nome_otica='Ótica Premium',
            cnpj_otica='22222222000222', nivel='Diamante', pontos=9200, gerente=pedro,
        )

        # Campanhas
        super_foco = self._campanha(
            'Kit Lentes Super-foco',
            'Venda 2 pares de Lentes Super-foco e 1 Lente Normal para completar o kit e ganhar 500 pontos!',
            500, Decimal('10'), Campanha.Status.ATIVA, agora, agora + timedelta(days=30), 'camp1',
            [('Lente Super-Foco', 2, MetaCampanha.TipoUnidade.PAR), ('Lente Normal', 1, MetaCampanha.TipoUnidade.UNIDADE)],
        )
        armacoes = self._campanha(
            'Especial Armações Premium',
            'Venda 5 armações premium e ganhe pontos incríveis! Cada venda conta para sua meta.',
            750, Decimal('15'), Campanha.Status.ATIVA, agora - timedelta(days=5), agora + timedelta(days=25), 'camp2',
            [('Armações Premium', 5, MetaCampanha.TipoUnidade.UNIDADE)],
        )
        self._campanha(
            'Especial Mês das Crianças',
            'Campanha especial para armações infantis. Meta: 10 armações infantis.',
            1000, Decimal('20'), Campanha.Status.CONCLUIDA, agora - timedelta(days=60), agora - timedelta(days=30), 'camp3',
            [('Armações Infantis', 10, MetaCampanha.TipoUnidade.UNIDADE)],
        )
        self._campanha(
            'Verão em Alta Definição',
            'Campanha de lentes solares com proteção UV máxima.',
            300, Decimal('8'), Campanha.Status.EXPIRADA, agora - timedelta(days=120), agora - timedelta(days=90), 'camp4',
            [('Lentes Solares', 3, MetaCampanha.TipoUnidade.PAR)],
        )

        # Prêmios
        premios = [
            ('Smartwatch Galaxy', 'Smartwatch Samsung Galaxy com GPS, monitor cardíaco e resistente à água.', 5000, 15, 'Eletrônicos', 10),
            ('Fone AirPods Pro', 'Fones de ouvido sem fio com cancelamento ativo de ruído.', 3500, 25, 'Eletrônicos', 9),
            ('Vale-compras R$ 500', 'Vale-compras de R$ 500 para usar em diversas lojas parceiras.', 2500, 50, 'Vale-compras', 8),
            ('Tablet Samsung 10"', 'Tablet Samsung de 10 polegadas com 64GB de armazenamento.', 4500, 8, 'Eletrônicos', 7),
            ('Kit Churrasco Premium', 'Kit completo para churrasco com espetos, tábua e temperos especiais.', 1500, 30, 'Casa & Jardim', 6),
            ('Cafeteira Nespresso', 'Cafeteira automática Nespresso com sistema de cápsulas.', 2000, 20, 'Eletrodomésticos', 5),
            ('Mochila Executiva', 'Mochila para notebook com compartimentos organizadores e design moderno.', 800, 40, 'Acessórios', 4),
            ('Jogo de Panelas Antiaderente', 'Conjunto com 5 panelas antiaderente de alta qualidade.', 1200, 25, 'Casa & Cozinha', 3),
            ('Perfume Importado 100ml', 'Fragrância masculina ou feminina importada de 100ml.', 900, 35, 'Perfumaria', 2),
            ('Caixa de Som Bluetooth', 'Caixa de som portátil com Bluetooth 5.0 e bateria de longa duração.', 600, 45, 'Eletrônicos', 1),
        ]
        for indice, (titulo, descricao, pontos, estoque, categoria, prioridade) in enumerate(premios, start=1):
            premio, created = Premio.objects.get_or_create(
                titulo=titulo,
                defaults={
                    'descricao': descricao,
                    'imagem_url': f'https://picsum.photos/seed/premio{indice}/300/300',
                    'pontos_necessarios': pontos,
                    'estoque': estoque,
                    'categoria': categoria,
                    'prioridade': prioridade,
                }
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f'Criado prêmio "{premio.titulo}"'))

        # Exemplos: só na primeira carga, identificada pela cartela do João
        if KitCampanha.objects.filter(usuario=joao, campanha=super_foco).exists():
            self.stdout.write('Dados de exemplo já existentes, mantidos.')
        else:
            self._exemplos(agora, admin, maria, joao, ana, super_foco, armacoes)

        self.stdout.write(self.style.SUCCESS('Dados iniciais carregados com sucesso!'))
        self.stdout.write(f'Usuários de teste com a senha "{SENHA_PADRAO}": admin@eps.com, maria.gerente@eps.com, joao.vendedor@eps.com ...')

    def _usuario(self, email, nome, papel, gerente=None, **dados):
        usuario, created = Usuario.objects.get_or_create(
            email=email,
            defaults={
                'nome': nome,
                'papel': papel,
                'gerente': gerente,
                'avatar_url': f'https://i.pravatar.cc/150?u={email.split("@")[0]}',
                **dados,
            }
        )
        if created:
            usuario.set_password(SENHA_PADRAO)
            usuario.save(update_fields=['password'])
            self.stdout.write(self.style.SUCCESS(f'Criado usuário "{usuario.nome}" ({papel})'))
        return usuario

    def _campanha(self, titulo, descricao, pontos, percentual, status, inicio, fim, imagem, metas):
        campanha, created = Campanha.objects.get_or_create(
            titulo=titulo,
            defaults={
                'descricao': descricao,
                'imagem_url': f'https://picsum.photos/seed/{imagem}/400/200',
                'pontos_por_conclusao': pontos,
                'percentual_gerente': percentual,
                'status': status,
                'data_inicio': inicio,
                'data_fim': fim,
            }
        )
        if created:
            for descricao_meta, quantidade, tipo_unidade in metas:
                MetaCampanha.objects.create(
                    campanha=campanha, descricao=descricao_meta, quantidade=quantidade, tipo_unidade=tipo_unidade
                )
            self.stdout.write(self.style.SUCCESS(f'Criada campanha "{campanha.titulo}" ({status})'))
        return campanha

    def _exemplos(self, agora, admin, maria, joao, ana, super_foco, armacoes):
        meta_super_foco = super_foco.metas.get(descricao='Lente Super-Foco')
        kit = KitCampanha.objects.create(campanha=super_foco, usuario=joao)

        Submissao.objects.get_or_create(
            numero_pedido='PED-001-2025',
            defaults={
                'quantidade': 1, 'status': Submissao.Status.VALIDADA, 'campanha': super_foco,
                'meta': meta_super_foco, 'kit': kit, 'usuario': joao, 'validado_por': maria,
                'data_submissao': agora - timedelta(days=2), 'data_validacao': agora - timedelta(days=1),
                'observacoes': 'Cliente muito satisfeito com a qualidade das lentes.',
            }
        )
        Submissao.objects.get_or_create(
            numero_pedido='PED-002-2025',
            defaults={
                'quantidade': 1, 'campanha': super_foco, 'meta': meta_super_foco, 'kit': kit,
                'usuario': joao, 'data_submissao': agora - timedelta(days=1),
            }
        )

        Ganho.objects.create(
            tipo=Ganho.Tipo.VENDEDOR, usuario=joao, usuario_nome=joao.nome, usuario_avatar_url=joao.avatar_url,
            campanha=super_foco, campanha_titulo=super_foco.titulo, kit=kit, valor=Decimal('50.00'),
            data_ganho=agora - timedelta(days=1), descricao='Venda validada: PED-001-2025',
        )
        Ganho.objects.create(
            tipo=Ganho.Tipo.GERENTE, usuario=maria, usuario_nome=maria.nome, usuario_avatar_url=maria.avatar_url,
            campanha=super_foco, campanha_titulo=super_foco.titulo, kit=kit, nome_usuario_origem=joao.nome,
            valor=Decimal('5.00'), data_ganho=agora - timedelta(days=1),
            descricao=f'Venda da equipe validada: PED-001-2025 (vendedor: {joao.nome})',
        )

        Atividade.objects.bulk_create([
            Atividade(usuario=joao, tipo=Atividade.Tipo.VENDA, pontos=50, data=agora - timedelta(days=2),
                      descricao='Venda submetida: PED-001-2025 (1 par de Lente Super-Foco)'),
            Atividade(usuario=joao, tipo=Atividade.Tipo.VENDA, data=agora - timedelta(days=1),
                      descricao='Venda submetida: PED-002-2025 (1 par de Lente Super-Foco)'),
            Atividade(usuario=ana, tipo=Atividade.Tipo.VENDA, data=agora - timedelta(hours=3),
                      descricao='Venda submetida: PED-003-2025 (1 unidade de Armações Premium)'),
            Atividade(usuario=admin, tipo=Atividade.Tipo.ADMIN_CAMPAIGN_CREATED, data=agora - timedelta(days=30),
                      descricao=f'Campanha criada: {super_foco.titulo}'),
            Atividade(usuario=maria, tipo=Atividade.Tipo.CONQUISTA, pontos=200, data=agora - timedelta(days=5),
                      descricao='Meta mensal atingida: 15 vendas validadas'),
        ])

        Notificacao.objects.bulk_create([
            Notificacao(usuario=joao, titulo='Venda Validada! 🎉', tipo=Notificacao.Tipo.SUCESSO,
                        mensagem='Sua venda PED-001-2025 foi validada!'),
            Notificacao(usuario=joao, titulo='Nova Campanha Disponível', tipo=Notificacao.Tipo.INFO, lida=True,
                        mensagem=f'A campanha "{armacoes.titulo}" está ativa. Participe e ganhe ainda mais pontos!'),
            Notificacao(usuario=maria, titulo='Equipe em Destaque! 🏆', tipo=Notificacao.Tipo.CONQUISTA,
                        mensagem='Sua equipe está em 2º lugar no ranking mensal. Continue assim!'),
            Notificacao(usuario=ana, titulo='Prêmio Disponível', tipo=Notificacao.Tipo.PREMIO,
                        mensagem='Você tem pontos suficientes para resgatar a Caixa de Som Bluetooth!'),
            Notificacao(usuario=admin, titulo='Relatório Mensal', tipo=Notificacao.Tipo.INFO, lida=True,
                        mensagem='15 vendas foram validadas este mês.'),
        ])
        self.stdout.write(self.style.SUCCESS('Criados cartela, submissões, ganhos, atividades e notificações de exemplo'))
