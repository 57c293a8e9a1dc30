import logging
from typing import Optional, Dict, Any, List

from epscampanhas.core.entities import (
    Premio, ResgatePremio, Usuario, Pagina, StatusResgate, TipoAtividade, TipoNotificacao,
)
from epscampanhas.core.exceptions import (
    BaseErroCore, PremioNaoEncontradoError, UsuarioNaoEncontradoError, EstoqueInsuficienteError,
    PontosInsuficientesError, OperacaoNaoPermitidaError, DadosInvalidosError, AcessoNegadoError,
)
from epscampanhas.core.ports import IPremioRepository, IUsuarioRepository, IUnidadeDeTrabalho
from epscampanhas.core.use_cases.acesso import exigir_admin, pode_ver_usuario, normalizar_paginacao
from epscampanhas.core.use_cases.atividades import RegistrarAtividadeUseCase
from epscampanhas.core.use_cases.notificacoes import CriarNotificacaoUseCase

logger = logging.getLogger(__name__)

CAMPOS_PREMIO = ('titulo', 'descricao', 'imagem_url', 'pontos_necessarios', 'estoque', 'categoria', 'prioridade', 'ativo')


def _inteiro(dados: Dict[str, Any], campo: str, minimo: int = 0) -> int:
    try:
        valor = int(dados[campo])
    except (TypeError, ValueError):
        raise DadosInvalidosError(f"O campo {campo} deve ser um número inteiro.")
    if valor < minimo:
        raise DadosInvalidosError(f"O campo {campo} deve ser maior ou igual a {minimo}.")
    return valor


def _validar_premio(dados: Dict[str, Any], parcial: bool = False) -> Dict[str, Any]:
    """Normaliza os campos de um prêmio. Em atualizações (parcial) só valida o que foi enviado."""
    limpos = {k: v for k, v in dados.items() if k in CAMPOS_PREMIO}
    if not parcial:
        for obrigatorio in ('titulo', 'descricao', 'pontos_necessarios'):
            if limpos.get(obrigatorio) in (None, ''):
                raise DadosInvalidosError(f"O campo {obrigatorio} é obrigatório.")
    if 'titulo' in limpos:
        limpos['titulo'] = (limpos['titulo'] or '').strip()
        if not limpos['titulo']:
            raise DadosInvalidosError("O campo titulo é obrigatório.")
    if 'pontos_necessarios' in limpos:
        limpos['pontos_necessarios'] = _inteiro(limpos, 'pontos_necessarios', minimo=1)
    if 'estoque' in limpos:
        limpos['estoque'] = _inteiro(limpos, 'estoque')
    if 'prioridade' in limpos:
        limpos['prioridade'] = _inteiro(limpos, 'prioridade')
    return limpos


class ResgatarPremioUseCase:
    """
    Troca pontos do usuário por um prêmio.
    Prêmio e usuário são lidos com bloqueio de linha para que resgates simultâneos
    não deixem estoque ou saldo negativos.
    """
    def __init__(
        self,
        premio_repo: IPremioRepository,
        usuario_repo: IUsuarioRepository,
        registrar_atividade: RegistrarAtividadeUseCase,
        criar_notificacao: CriarNotificacaoUseCase,
        uow: IUnidadeDeTrabalho,
    ):
        self.premio_repo = premio_repo
        self.usuario_repo = usuario_repo
        self.registrar_atividade = registrar_atividade
        self.criar_notificacao = criar_notificacao
        self.uow = uow

    def executar(self, ator: Usuario, premio_id: str) -> ResgatePremio:
        with self.uow.atomico():
            premio = self.premio_repo.buscar_por_id(premio_id, bloquear=True)
            if not premio:
                raise PremioNaoEncontradoError()

            usuario = self.usuario_repo.buscar_por_id(ator.id, bloquear=True)
            if not usuario:
                raise UsuarioNaoEncontradoError()

            if not premio.disponivel:
                raise EstoqueInsuficienteError()
            if usuario.pontos < premio.pontos_necessarios:
                raise PontosInsuficientesError(usuario.pontos, premio.pontos_necessarios)

            self.premio_repo.ajustar_estoque(premio.id, -1)
            self.usuario_repo.incrementar_pontos(usuario.id, -premio.pontos_necessarios)

            resgate = self.premio_repo.criar_resgate(ResgatePremio(
                premio_id=premio.id,
                usuario_id=usuario.id,
                pontos_resgatados=premio.pontos_necessarios,
                status=StatusResgate.CONCLUIDO,
                premio_titulo=premio.titulo,
                usuario_nome=usuario.nome,
            ))

            self.registrar_atividade.executar(
                usuario_id=usuario.id,
                tipo=TipoAtividade.PREMIO_RESGATADO,
                descricao=f"Prêmio resgatado: {premio.titulo}",
                pontos=-premio.pontos_necessarios,
                metadados={'premio_id': str(premio.id), 'resgate_id': str(resgate.id)},
            )
            self.criar_notificacao.executar(
                usuario_id=usuario.id,
                titulo="Prêmio resgatado!",
                mensagem=f"Você resgatou {premio.titulo} por {premio.pontos_necessarios} pontos.",
                tipo=TipoNotificacao.PREMIO,
                metadados={'premio_id': str(premio.id), 'resgate_id': str(resgate.id)},
            )

        logger.info("Usuário %s resgatou o prêmio %s (%s pontos)", usuario.id, premio.id, premio.pontos_necessarios)
        return resgate


class GerenciarPremiosUseCase:
    """Catálogo de prêmios: cadastro, estoque e consultas."""
    def __init__(
        self,
        premio_repo: IPremioRepository,
        usuario_repo: IUsuarioRepository,
        registrar_atividade: RegistrarAtividadeUseCase,
        uow: IUnidadeDeTrabalho,
    ):
        self.premio_repo = premio_repo
        self.usuario_repo = usuario_repo
        self.registrar_atividade = registrar_atividade
        self.uow = uow

    # --- Cadastro ---

    def criar(self, ator: Usuario, dados: Dict[str, Any]) -> Premio:
        exigir_admin(ator)
        limpos = _validar_premio(dados)
        premio = self.premio_repo.criar(Premio(**limpos))
        logger.info("Prêmio %s criado por %s", premio.id, ator.id)
        return premio

    def obter(self, premio_id: str) -> Premio:
        premio = self.premio_repo.buscar_por_id(premio_id)
        if not premio:
            raise PremioNaoEncontradoError()
        return premio

    def atualizar(self, ator: Usuario, premio_id: str, dados: Dict[str, Any]) -> Premio:
        exigir_admin(ator)
        premio = self.obter(premio_id)
        for campo, valor in _validar_premio(dados, parcial=True).items():
            setattr(premio, campo, valor)
        return self.premio_repo.salvar(premio)

    def excluir(self, ator: Usuario, premio_id: str) -> None:
        exigir_admin(ator)
        premio = self.obter(premio_id)
        if self.premio_repo.possui_resgates(premio.id):
            raise OperacaoNaoPermitidaError("Não é possível deletar prêmios que já foram resgatados.")
        self.premio_repo.excluir(premio.id)
        logger.info("Prêmio %s excluído por %s", premio_id, ator.id)

    def listar(self, ator: Usuario, filtros: Optional[Dict[str, Any]] = None, pagina=1, limite=20) -> Pagina:
        pagina, limite = normalizar_paginacao(pagina, limite)
        filtros = {k: v for k, v in (filtros or {}).items() if v not in (None, '')}
        if not ator.eh_admin:
            filtros['ativo'] = True
        return self.premio_repo.listar(filtros, pagina, limite)

    def atualizar_estoque(self, ator: Usuario, premio_id: str, quantidade, operacao: str,
                          motivo: Optional[str] = None) -> Premio:
        exigir_admin(ator)
        if operacao not in ('add', 'remove'):
            raise DadosInvalidosError("Operação inválida. Use 'add' ou 'remove'.")
        quantidade = _inteiro({'quantidade': quantidade}, 'quantidade', minimo=1)

        with self.uow.atomico():
            premio = self.premio_repo.buscar_por_id(premio_id, bloquear=True)
            if not premio:
                raise PremioNaoEncontradoError()
            delta = quantidade if operacao == 'add' else -quantidade
            if premio.estoque + delta < 0:
                raise EstoqueInsuficienteError("Estoque insuficiente para a remoção solicitada.")
            self.premio_repo.ajustar_estoque(premio.id, delta)
            premio.estoque += delta

            self.registrar_atividade.executar(
                usuario_id=ator.id,
                tipo=TipoAtividade.ADMIN_ACTION,
                descricao=f"Estoque do prêmio {premio.titulo} ajustado em {delta:+d}.",
                metadados={'premio_id': str(premio.id), 'motivo': motivo},
            )
        logger.info("Estoque do prêmio %s ajustado em %s (%s)", premio.id, delta, motivo or 'sem motivo')
        return premio

    def importar_em_lote(self, ator: Usuario, itens: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Cria vários prêmios; cada item tem resultado próprio e um erro não interrompe os demais."""
        exigir_admin(ator)
        resultados = []
        for indice, item in enumerate(itens or [], start=1):
            try:
                premio = self.criar(ator, item)
            except BaseErroCore as e:
                resultados.append({'indice': indice, 'sucesso': False, 'mensagem': str(e), 'premio_id': None})
                continue
            resultados.append({'indice': indice, 'sucesso': True, 'mensagem': None, 'premio_id': str(premio.id)})

        sucesso = sum(1 for r in resultados if r['sucesso'])
        return {'total': len(resultados), 'sucesso': sucesso, 'falhas': len(resultados) - sucesso, 'resultados': resultados}

    # --- Consultas ---

    def _usuario_visivel(self, ator: Usuario, usuario_id: Optional[str]) -> Usuario:
        if not usuario_id or str(usuario_id) == str(ator.id):
            usuario = self.usuario_repo.buscar_por_id(ator.id)
        else:
            usuario = self.usuario_repo.buscar_por_id(usuario_id)
        if not usuario:
            raise UsuarioNaoEncontradoError()
        if not pode_ver_usuario(ator, usuario):
            raise AcessoNegadoError()
        return usuario

    def disponiveis_para_usuario(self, ator: Usuario, usuario_id: Optional[str] = None) -> List[Premio]:
        usuario = self._usuario_visivel(ator, usuario_id)
        return self.premio_repo.listar_disponiveis(usuario.pontos)

    def pode_resgatar(self, ator: Usuario, premio_id: str, usuario_id: Optional[str] = None) -> Dict[str, Any]:
        usuario = self._usuario_visivel(ator, usuario_id)
        premio = self.obter(premio_id)

        if not premio.ativo:
            return {'pode_resgatar': False, 'motivo': "Prêmio indisponível."}
        if premio.estoque <= 0:
            return {'pode_resgatar': False, 'motivo': EstoqueInsuficienteError.message}
        if usuario.pontos < premio.pontos_necessarios:
            faltam = premio.pontos_necessarios - usuario.pontos
            return {'pode_resgatar': False, 'motivo': f"Pontos insuficientes. Faltam {faltam} pontos."}
        return {'pode_resgatar': True, 'motivo': None}

    def historico_usuario(self, ator: Usuario, usuario_id: Optional[str] = None) -> List[ResgatePremio]:
        usuario = self._usuario_visivel(ator, usuario_id)
        return self.premio_repo.historico_usuario(usuario.id)

    def catalogo_publico(self) -> List[Premio]:
        return self.premio_repo.catalogo_publico()

    def populares(self, limite: int = 10) -> List[Dict[str, Any]]:
        return self.premio_repo.populares(max(1, int(limite)))

    def estoque_baixo(self, ator: Usuario, limite: int = 5) -> List[Premio]:
        exigir_admin(ator)
        return self.premio_repo.estoque_baixo(max(1, int(limite)))

    def sem_estoque(self, ator: Usuario) -> List[Premio]:
        exigir_admin(ator)
        return self.premio_repo.sem_estoque()

    def estatisticas(self, ator: Usuario) -> Dict[str, int]:
        exigir_admin(ator)
        return self.premio_repo.estatisticas()
