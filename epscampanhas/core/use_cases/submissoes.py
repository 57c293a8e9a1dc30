# epscampanhas/core/use_cases/submissoes.py
"""
Fluxo de submissões de vendas:
1. O vendedor submete a venda contra uma meta de campanha ativa (cartela em andamento).
2. O gerente (ou admin) valida ou rejeita a submissão.
3. Ao validar, verifica-se se a cartela foi completada; nesse caso são gerados
   os ganhos do vendedor e do gerente e os pontos são creditados.
"""
import logging
from decimal import Decimal
from typing import Optional, Dict, Any, List, Tuple

from epscampanhas.core.entities import (
    Submissao, Usuario, Ganho, Pagina, MetaCampanha,
    StatusCampanha, StatusSubmissao, TipoGanho, TipoUnidade, TipoAtividade, TipoNotificacao, agora,
)
from epscampanhas.core.exceptions import (
    BaseErroCore, CampanhaNaoEncontradaError, MetaNaoEncontradaError, SubmissaoNaoEncontradaError,
    KitNaoEncontradoError, UsuarioNaoEncontradoError, PedidoDuplicadoError, OperacaoNaoPermitidaError,
    StatusInvalidoError, DadosInvalidosError, AcessoNegadoError,
)
from epscampanhas.core.ports import (
    ISubmissaoRepository, ICampanhaRepository, IKitRepository, IUsuarioRepository, IUnidadeDeTrabalho,
)
from epscampanhas.core.use_cases.acesso import (
    exigir_admin, exigir_papel, garantir_acesso_submissao, pode_ver_usuario, normalizar_paginacao,
    MENSAGEM_ACESSO_SUBMISSAO,
)
from epscampanhas.core.use_cases.atividades import RegistrarAtividadeUseCase
from epscampanhas.core.use_cases.ganhos import CriarGanhoUseCase
from epscampanhas.core.use_cases.notificacoes import CriarNotificacaoUseCase

logger = logging.getLogger(__name__)


def descrever_quantidade(quantidade: int, meta: Optional[MetaCampanha]) -> str:
    """'1 par', '2 pares', '1 unidade', '3 unidades'."""
    if meta and meta.tipo_unidade == TipoUnidade.PAR:
        return f"{quantidade} {'par' if quantidade == 1 else 'pares'}"
    return f"{quantidade} {'unidade' if quantidade == 1 else 'unidades'}"


def _validar_quantidade(quantidade) -> int:
    try:
        quantidade = int(quantidade if quantidade is not None else 1)
    except (TypeError, ValueError):
        raise DadosInvalidosError("A quantidade deve ser um número inteiro.")
    if quantidade < 1:
        raise DadosInvalidosError("A quantidade deve ser maior que zero.")
    return quantidade


# ====================================================================
# 1. CRIAÇÃO DE SUBMISSÃO
# ====================================================================

class CriarSubmissaoUseCase:
    """Registra a venda declarada por um vendedor em uma única transação."""
    def __init__(
        self,
        submissao_repo: ISubmissaoRepository,
        campanha_repo: ICampanhaRepository,
        kit_repo: IKitRepository,
        registrar_atividade: RegistrarAtividadeUseCase,
        uow: IUnidadeDeTrabalho,
    ):
        self.submissao_repo = submissao_repo
        self.campanha_repo = campanha_repo
        self.kit_repo = kit_repo
        self.registrar_atividade = registrar_atividade
        self.uow = uow

    def executar(self, ator: Usuario, dados: Dict[str, Any]) -> Submissao:
        exigir_papel(ator, 'VENDEDOR', message="Apenas vendedores podem submeter vendas.")

        numero_pedido = (dados.get('numero_pedido') or '').strip()
        if not numero_pedido:
            raise DadosInvalidosError("O número do pedido é obrigatório.")
        quantidade = _validar_quantidade(dados.get('quantidade'))

        with self.uow.atomico():
            campanha = self.campanha_repo.buscar_por_id(dados.get('campanha_id'))
            if not campanha:
                raise CampanhaNaoEncontradaError()
            if campanha.status != StatusCampanha.ATIVA:
                raise OperacaoNaoPermitidaError("Campanha não está ativa")
            if not campanha.esta_no_periodo():
                raise OperacaoNaoPermitidaError("Campanha fora do período ativo")

            meta = self.campanha_repo.buscar_meta(dados.get('meta_id'))
            if not meta:
                raise MetaNaoEncontradaError()
            if str(meta.campanha_id) != str(campanha.id):
                raise DadosInvalidosError("Meta não pertence à campanha especificada")

            if self.submissao_repo.existe_numero_pedido(numero_pedido):
                raise PedidoDuplicadoError()

            kit = self.kit_repo.buscar_ou_criar_em_andamento(ator.id, campanha.id)

            submissao = self.submissao_repo.criar(Submissao(
                numero_pedido=numero_pedido,
                quantidade=quantidade,
                campanha_id=campanha.id,
                meta_id=meta.id,
                usuario_id=ator.id,
                kit_id=kit.id,
                observacoes=dados.get('observacoes'),
                status=StatusSubmissao.PENDENTE,
            ))

            self.registrar_atividade.executar(
                usuario_id=ator.id,
                tipo=TipoAtividade.VENDA,
                descricao=f"Venda submetida: {numero_pedido} ({descrever_quantidade(quantidade, meta)})",
                metadados={'submissao_id': str(submissao.id), 'campanha_id': str(campanha.id)},
            )

        logger.info("Submissão %s (pedido %s) criada pelo usuário %s", submissao.id, numero_pedido, ator.id)
        return submissao


# ====================================================================
# 2. VALIDAÇÃO E CONCLUSÃO DE CARTELA
# ====================================================================

class ValidarSubmissaoUseCase:
    """
    Valida ou rejeita uma submissão pendente.
    Na validação, verifica se todas as metas da cartela foram atingidas somando
    as quantidades validadas por meta; em caso positivo conclui a cartela e gera os ganhos.
    """
    ACOES_LOTE = {'validate': StatusSubmissao.VALIDADA, 'reject': StatusSubmissao.REJEITADA}

    def __init__(
        self,
        submissao_repo: ISubmissaoRepository,
        campanha_repo: ICampanhaRepository,
        kit_repo: IKitRepository,
        usuario_repo: IUsuarioRepository,
        criar_ganho: CriarGanhoUseCase,
        registrar_atividade: RegistrarAtividadeUseCase,
        criar_notificacao: CriarNotificacaoUseCase,
        uow: IUnidadeDeTrabalho,
    ):
        self.submissao_repo = submissao_repo
        self.campanha_repo = campanha_repo
        self.kit_repo = kit_repo
        self.usuario_repo = usuario_repo
        self.criar_ganho = criar_ganho
        self.registrar_atividade = registrar_atividade
        self.criar_notificacao = criar_notificacao
        self.uow = uow

    def executar(self, ator: Usuario, submissao_id: str, status: str, mensagem: Optional[str] = None) -> Submissao:
        submissao, _ = self.executar_detalhado(ator, submissao_id, status, mensagem)
        return submissao

    def executar_detalhado(
        self, ator: Usuario, submissao_id: str, status: str, mensagem: Optional[str] = None
    ) -> Tuple[Submissao, List[Ganho]]:
        exigir_papel(ator, 'GERENTE', 'ADMIN', message="Apenas gerentes e administradores podem validar submissões.")
        if status not in (StatusSubmissao.VALIDADA, StatusSubmissao.REJEITADA):
            raise StatusInvalidoError("Status de validação inválido. Use VALIDATED ou REJECTED.")

        ganhos: List[Ganho] = []
        with self.uow.atomico():
            submissao = self.submissao_repo.buscar_por_id(submissao_id)
            if not submissao:
                raise SubmissaoNaoEncontradaError()
            garantir_acesso_submissao(ator, submissao)
            if not submissao.esta_pendente:
                raise StatusInvalidoError("Apenas submissões pendentes podem ser validadas")

            submissao.status = status
            submissao.mensagem_validacao = mensagem
            submissao.data_validacao = agora()
            submissao.validado_por_id = ator.id
            submissao = self.submissao_repo.salvar(submissao)

            if status == StatusSubmissao.VALIDADA and submissao.kit_id:
                ganhos = self.processar_conclusao_kit(submissao.kit_id)

            validada = status == StatusSubmissao.VALIDADA
            acao = 'validada' if validada else 'rejeitada'
            self.registrar_atividade.executar(
                usuario_id=submissao.usuario_id,
                tipo=TipoAtividade.ADMIN_ACTION,
                descricao=f"Sua submissão {submissao.numero_pedido} foi {acao}.",
                metadados={'submissao_id': str(submissao.id), 'validado_por': str(ator.id)},
            )
            texto = f"Sua venda {submissao.numero_pedido} foi {acao}."
            if mensagem:
                texto = f"{texto} {mensagem}"
            self.criar_notificacao.executar(
                usuario_id=submissao.usuario_id,
                titulo="Venda validada!" if validada else "Venda rejeitada",
                mensagem=texto,
                tipo=TipoNotificacao.SUCESSO if validada else TipoNotificacao.AVISO,
                metadados={'submissao_id': str(submissao.id)},
            )

        logger.info("Submissão %s %s por %s", submissao.id, acao, ator.id)
        return submissao, ganhos

    def processar_conclusao_kit(self, kit_id: str) -> List[Ganho]:
        """Conclui a cartela quando todas as metas foram atingidas. Retorna os ganhos gerados."""
        kit = self.kit_repo.buscar_por_id(kit_id)
        if not kit or kit.esta_concluido:
            return []

        campanha = self.campanha_repo.buscar_por_id(kit.campanha_id)
        if not campanha:
            return []

        quantidades = self.kit_repo.somar_quantidades_validadas(kit.id)
        completa = all(quantidades.get(str(meta.id), 0) >= meta.quantidade for meta in campanha.metas)
        if not completa:
            return []

        if not self.kit_repo.marcar_concluido(kit.id, agora()):
            # Outra validação concluiu a cartela primeiro
            return []

        vendedor = self.usuario_repo.buscar_por_id(kit.usuario_id)
        if not vendedor:
            raise UsuarioNaoEncontradoError()

        ganhos = []
        pontos = Decimal(campanha.pontos_por_conclusao)
        if pontos > 0:
            ganhos.append(self.criar_ganho.executar(
                tipo=TipoGanho.VENDEDOR,
                usuario_id=vendedor.id,
                valor=pontos,
                descricao=f"Parabéns! Você completou a cartela {campanha.titulo}.",
                campanha=campanha,
                kit_id=kit.id,
            ))

        if vendedor.gerente_id and campanha.percentual_gerente:
            valor_gerente = pontos * Decimal(str(campanha.percentual_gerente)) / Decimal('100')
            if valor_gerente > 0:
                ganhos.append(self.criar_ganho.executar(
                    tipo=TipoGanho.GERENTE,
                    usuario_id=vendedor.gerente_id,
                    valor=valor_gerente,
                    descricao=f"Seu vendedor {vendedor.nome} completou a cartela {campanha.titulo}.",
                    campanha=campanha,
                    kit_id=kit.id,
                    nome_usuario_origem=vendedor.nome,
                ))
                self.criar_notificacao.executar(
                    usuario_id=vendedor.gerente_id,
                    titulo="Cartela concluída na equipe",
                    mensagem=f"{vendedor.nome} completou a cartela {campanha.titulo}.",
                    tipo=TipoNotificacao.CONQUISTA,
                    metadados={'kit_id': str(kit.id)},
                )

        self.registrar_atividade.executar(
            usuario_id=vendedor.id,
            tipo=TipoAtividade.CONQUISTA,
            descricao=f'Cartela da campanha "{campanha.titulo}" foi concluída!',
            metadados={
                'kit_id': str(kit.id),
                'campanha_id': str(campanha.id),
                'pontos_por_conclusao': campanha.pontos_por_conclusao,
            },
        )
        self.criar_notificacao.executar(
            usuario_id=vendedor.id,
            titulo="Cartela concluída!",
            mensagem=f"Você completou a cartela {campanha.titulo} e ganhou {campanha.pontos_por_conclusao} pontos.",
            tipo=TipoNotificacao.CONQUISTA,
            metadados={'kit_id': str(kit.id)},
        )

        logger.info("Kit %s concluído (campanha %s, vendedor %s)", kit.id, campanha.id, vendedor.id)
        return ganhos

    def validar_em_lote(
        self, ator: Usuario, submissao_ids: List[str], acao: str, mensagem: Optional[str] = None
    ) -> Dict[str, Any]:
        """Cada submissão é processada na sua própria transação; uma falha não afeta as demais."""
        if acao not in self.ACOES_LOTE:
            raise DadosInvalidosError("Ação inválida. Use 'validate' ou 'reject'.")
        if not submissao_ids:
            raise DadosInvalidosError("Informe ao menos uma submissão.")
        status = self.ACOES_LOTE[acao]

        resultado = {'processadas': 0, 'validadas': 0, 'rejeitadas': 0, 'falhas': 0, 'detalhes': []}
        for submissao_id in submissao_ids:
            resultado['processadas'] += 1
            try:
                self.executar(ator, submissao_id, status, mensagem)
            except BaseErroCore as e:
                resultado['falhas'] += 1
                resultado['detalhes'].append({'id': str(submissao_id), 'sucesso': False, 'mensagem': str(e)})
                continue

            resultado['validadas' if status == StatusSubmissao.VALIDADA else 'rejeitadas'] += 1
            resultado['detalhes'].append({'id': str(submissao_id), 'sucesso': True, 'mensagem': None})
        return resultado


# ====================================================================
# 3. CONSULTA E MANUTENÇÃO DE SUBMISSÕES
# ====================================================================

class GerenciarSubmissoesUseCase:
    def __init__(
        self,
        submissao_repo: ISubmissaoRepository,
        campanha_repo: ICampanhaRepository,
        kit_repo: IKitRepository,
        usuario_repo: IUsuarioRepository,
        validar_submissao: ValidarSubmissaoUseCase,
        registrar_atividade: RegistrarAtividadeUseCase,
        uow: IUnidadeDeTrabalho,
    ):
        self.submissao_repo = submissao_repo
        self.campanha_repo = campanha_repo
        self.kit_repo = kit_repo
        self.usuario_repo = usuario_repo
        self.validar_submissao = validar_submissao
        self.registrar_atividade = registrar_atividade
        self.uow = uow

    def obter(self, ator: Usuario, submissao_id: str) -> Submissao:
        submissao = self.submissao_repo.buscar_por_id(submissao_id)
        if not submissao:
            raise SubmissaoNaoEncontradaError()
        garantir_acesso_submissao(ator, submissao)
        return submissao

    def _obter_para_alteracao(self, ator: Usuario, submissao_id: str, acao: str) -> Submissao:
        submissao = self.obter(ator, submissao_id)
        if not ator.eh_admin and str(submissao.usuario_id) != str(ator.id):
            raise AcessoNegadoError(MENSAGEM_ACESSO_SUBMISSAO)
        if not submissao.esta_pendente:
            raise StatusInvalidoError(f"Apenas submissões pendentes podem ser {acao}")
        return submissao

    def atualizar(self, ator: Usuario, submissao_id: str, dados: Dict[str, Any]) -> Submissao:
        with self.uow.atomico():
            submissao = self._obter_para_alteracao(ator, submissao_id, 'alteradas')

            numero_pedido = dados.get('numero_pedido')
            if numero_pedido is not None:
                numero_pedido = numero_pedido.strip()
                if not numero_pedido:
                    raise DadosInvalidosError("O número do pedido é obrigatório.")
                if self.submissao_repo.existe_numero_pedido(numero_pedido, excluir_id=submissao.id):
                    raise PedidoDuplicadoError()
                submissao.numero_pedido = numero_pedido

            if dados.get('meta_id') is not None:
                meta = self.campanha_repo.buscar_meta(dados['meta_id'])
                if not meta:
                    raise MetaNaoEncontradaError()
                if str(meta.campanha_id) != str(submissao.campanha_id):
                    raise DadosInvalidosError("Meta não pertence à campanha especificada")
                submissao.meta_id = meta.id

            if dados.get('quantidade') is not None:
                submissao.quantidade = _validar_quantidade(dados['quantidade'])
            if 'observacoes' in dados:
                submissao.observacoes = dados['observacoes']

            return self.submissao_repo.salvar(submissao)

    def excluir(self, ator: Usuario, submissao_id: str) -> None:
        with self.uow.atomico():
            submissao = self._obter_para_alteracao(ator, submissao_id, 'excluídas')
            self.submissao_repo.excluir(submissao.id)
            self.registrar_atividade.executar(
                usuario_id=submissao.usuario_id,
                tipo=TipoAtividade.VENDA,
                descricao=f"Submissão {submissao.numero_pedido} excluída.",
                metadados={'excluida_por': str(ator.id)},
            )
        logger.info("Submissão %s excluída por %s", submissao_id, ator.id)

    def _escopo(self, ator: Usuario, usuario_id: Optional[str]) -> Dict[str, Any]:
        if ator.eh_admin:
            return {'usuario_id': usuario_id} if usuario_id else {}
        if ator.eh_gerente:
            equipe = [str(i) for i in self.usuario_repo.ids_da_equipe(ator.id)]
            if usuario_id:
                if str(usuario_id) not in equipe:
                    raise AcessoNegadoError("Vendedor não encontrado na sua equipe.")
                return {'usuario_id': usuario_id}
            return {'usuario_ids': equipe}
        if usuario_id and str(usuario_id) != str(ator.id):
            raise AcessoNegadoError()
        return {'usuario_id': ator.id}

    def _consulta(self, ator: Usuario, filtros: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        filtros = {k: v for k, v in (filtros or {}).items() if v not in (None, '')}
        if filtros.get('status') and filtros['status'] not in StatusSubmissao.TODOS:
            raise StatusInvalidoError(f"Status de submissão inválido: {filtros['status']}.")
        escopo = self._escopo(ator, filtros.pop('usuario_id', None))
        filtros.update(escopo)
        return filtros

    def listar(self, ator: Usuario, filtros: Optional[Dict[str, Any]] = None, pagina=1, limite=20) -> Pagina:
        pagina, limite = normalizar_paginacao(pagina, limite)
        consulta = self._consulta(ator, filtros)
        resultado = self.submissao_repo.listar(consulta, pagina, limite)

        sem_status = {k: v for k, v in consulta.items() if k != 'status'}
        contagem = self.submissao_repo.contar_por_status(sem_status)
        resultado.resumo = {
            'total': sum(contagem.values()),
            'pendentes': contagem.get(StatusSubmissao.PENDENTE, 0),
            'validadas': contagem.get(StatusSubmissao.VALIDADA, 0),
            'rejeitadas': contagem.get(StatusSubmissao.REJEITADA, 0),
        }
        return resultado

    def pendentes(self, ator: Usuario, pagina=1, limite=50) -> Pagina:
        exigir_papel(ator, 'GERENTE', 'ADMIN')
        return self.listar(ator, {'status': StatusSubmissao.PENDENTE}, pagina, limite)

    def estatisticas_usuario(self, ator: Usuario, usuario_id: Optional[str] = None) -> Dict[str, int]:
        usuario_id = usuario_id or ator.id
        if str(usuario_id) != str(ator.id):
            alvo = self.usuario_repo.buscar_por_id(usuario_id)
            if not alvo:
                raise UsuarioNaoEncontradoError()
            if not pode_ver_usuario(ator, alvo):
                raise AcessoNegadoError()
        contagem = self.submissao_repo.contar_por_status({'usuario_id': usuario_id})
        return {
            'total': sum(contagem.values()),
            'validadas': contagem.get(StatusSubmissao.VALIDADA, 0),
            'rejeitadas': contagem.get(StatusSubmissao.REJEITADA, 0),
            'pendentes': contagem.get(StatusSubmissao.PENDENTE, 0),
        }

    def por_kit(self, ator: Usuario, kit_id: str) -> List[Submissao]:
        kit = self.kit_repo.buscar_por_id(kit_id)
        if not kit:
            raise KitNaoEncontradoError()
        if not ator.eh_admin and str(kit.usuario_id) != str(ator.id):
            raise AcessoNegadoError()
        return self.submissao_repo.listar_por_kit(kit.id)

    def transferir(self, ator: Usuario, submissao_id: str, kit_destino_id: str) -> Submissao:
        """Move uma submissão pendente para outra cartela da mesma campanha."""
        exigir_admin(ator)
        with self.uow.atomico():
            submissao = self.obter(ator, submissao_id)
            if not submissao.esta_pendente:
                raise StatusInvalidoError("Apenas submissões pendentes podem ser transferidas")

            destino = self.kit_repo.buscar_por_id(kit_destino_id)
            if not destino:
                raise KitNaoEncontradoError()
            if str(destino.campanha_id) != str(submissao.campanha_id):
                raise DadosInvalidosError("O kit de destino deve pertencer à mesma campanha.")
            if destino.esta_concluido:
                raise OperacaoNaoPermitidaError("Não é possível transferir para um kit já concluído.")

            kit_origem_id = submissao.kit_id
            submissao.kit_id = destino.id
            submissao.usuario_id = destino.usuario_id
            submissao = self.submissao_repo.salvar(submissao)

            self.validar_submissao.processar_conclusao_kit(destino.id)

        logger.info("Submissão %s transferida do kit %s para o kit %s", submissao.id, kit_origem_id, destino.id)
        return submissao

    def duplicar(self, ator: Usuario, submissao_id: str, novo_numero_pedido: str) -> Submissao:
        novo_numero_pedido = (novo_numero_pedido or '').strip()
        if not novo_numero_pedido:
            raise DadosInvalidosError("O número do pedido é obrigatório.")

        with self.uow.atomico():
            original = self.obter(ator, submissao_id)
            if not ator.eh_admin and str(original.usuario_id) != str(ator.id):
                raise AcessoNegadoError(MENSAGEM_ACESSO_SUBMISSAO)
            if self.submissao_repo.existe_numero_pedido(novo_numero_pedido):
                raise PedidoDuplicadoError()

            kit = self.kit_repo.buscar_ou_criar_em_andamento(original.usuario_id, original.campanha_id)
            copia = self.submissao_repo.criar(Submissao(
                numero_pedido=novo_numero_pedido,
                quantidade=original.quantidade,
                campanha_id=original.campanha_id,
                meta_id=original.meta_id,
                usuario_id=original.usuario_id,
                kit_id=kit.id,
                observacoes=original.observacoes,
                status=StatusSubmissao.PENDENTE,
            ))
        return copia

    def relatorio(self, ator: Usuario, filtros: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        exigir_papel(ator, 'GERENTE', 'ADMIN')
        consulta = self._consulta(ator, filtros)
        relatorio = self.submissao_repo.relatorio(consulta)
        relatorio['gerado_em'] = agora()
        relatorio['filtros'] = {k: (list(v) if isinstance(v, (list, tuple, set)) else v) for k, v in consulta.items()}
        return relatorio
