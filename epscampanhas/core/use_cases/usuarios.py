import logging
from typing import Optional, Dict, Any, List

from epscampanhas.core.entities import Usuario, Pagina, PapelUsuario, StatusUsuario, TipoAtividade
from epscampanhas.core.exceptions import (
    UsuarioNaoEncontradoError, CredenciaisInvalidasError, UsuarioBloqueadoError,
    DadosInvalidosError, AcessoNegadoError, OperacaoNaoPermitidaError, StatusInvalidoError,
)
from epscampanhas.core.ports import IUsuarioRepository
from epscampanhas.core.validadores import somente_digitos, normalizar_email, cpf_valido, cnpj_valido
from epscampanhas.core.use_cases.acesso import exigir_admin, pode_ver_usuario, normalizar_paginacao
from epscampanhas.core.use_cases.atividades import RegistrarAtividadeUseCase

logger = logging.getLogger(__name__)

TAMANHO_MINIMO_SENHA = 6

CAMPOS_PERFIL = ('nome', 'whatsapp', 'avatar_url')
CAMPOS_ADMIN = CAMPOS_PERFIL + ('email', 'cpf', 'papel', 'status', 'gerente_id', 'nome_otica', 'cnpj_otica', 'nivel')


def _validar_senha(senha: Optional[str]) -> str:
    if not senha or len(senha) < TAMANHO_MINIMO_SENHA:
        raise DadosInvalidosError(f"A senha deve ter pelo menos {TAMANHO_MINIMO_SENHA} caracteres.")
    return senha


def validar_hierarquia(usuario_repo: IUsuarioRepository, papel: str, gerente_id: Optional[str]) -> None:
    """Vendedores precisam de um gerente ativo; gerentes e administradores não têm gerente."""
    if papel not in PapelUsuario.TODOS:
        raise DadosInvalidosError(f"Papel inválido: {papel}.")

    if papel != PapelUsuario.VENDEDOR:
        if gerente_id:
            raise DadosInvalidosError("Gerentes e administradores não podem ter gerente associado")
        return

    if not gerente_id:
        raise DadosInvalidosError("Vendedores devem ter um gerente associado")
    gerente = usuario_repo.buscar_por_id(gerente_id)
    if not gerente:
        raise DadosInvalidosError("Gerente não encontrado")
    if not gerente.eh_gerente:
        raise DadosInvalidosError("Usuário associado não é um gerente")
    if not gerente.esta_ativo:
        raise DadosInvalidosError("Gerente associado não está ativo")


def _normalizar_email_unico(usuario_repo: IUsuarioRepository, email: Optional[str],
                            usuario_id: Optional[str] = None) -> str:
    email = normalizar_email(email)
    if not email or '@' not in email:
        raise DadosInvalidosError("E-mail inválido")
    existente = usuario_repo.buscar_por_email(email)
    if existente and str(existente.id) != str(usuario_id):
        raise DadosInvalidosError("Este e-mail já está cadastrado")
    return email


def _normalizar_cpf_unico(usuario_repo: IUsuarioRepository, cpf: Optional[str],
                          usuario_id: Optional[str] = None) -> str:
    cpf = somente_digitos(cpf)
    if not cpf_valido(cpf):
        raise DadosInvalidosError("CPF inválido")
    existente = usuario_repo.buscar_por_cpf(cpf)
    if existente and str(existente.id) != str(usuario_id):
        raise DadosInvalidosError("Este CPF já está cadastrado")
    return cpf


def _normalizar_cnpj(cnpj: Optional[str]) -> Optional[str]:
    if not cnpj:
        return None
    cnpj = somente_digitos(cnpj)
    if not cnpj_valido(cnpj):
        raise DadosInvalidosError("CNPJ inválido")
    return cnpj


class RegistrarUsuarioUseCase:
    """
    Cadastro de usuários.
    Sem ator é o cadastro público (não permite ADMIN); com ator, apenas administradores cadastram.
    """
    def __init__(self, usuario_repo: IUsuarioRepository):
        self.usuario_repo = usuario_repo

    def executar(self, dados: Dict[str, Any], ator: Optional[Usuario] = None) -> Usuario:
        papel = dados.get('papel') or PapelUsuario.VENDEDOR
        if ator is None:
            if papel == PapelUsuario.ADMIN:
                raise AcessoNegadoError("Não é permitido se registrar como administrador.")
        else:
            exigir_admin(ator)

        nome = (dados.get('nome') or '').strip()
        if not nome:
            raise DadosInvalidosError("O nome é obrigatório.")
        senha = _validar_senha(dados.get('senha'))
        email = _normalizar_email_unico(self.usuario_repo, dados.get('email'))
        cpf = _normalizar_cpf_unico(self.usuario_repo, dados.get('cpf'))
        cnpj_otica = _normalizar_cnpj(dados.get('cnpj_otica'))

        gerente_id = dados.get('gerente_id') or None
        validar_hierarquia(self.usuario_repo, papel, gerente_id)

        usuario = self.usuario_repo.criar(Usuario(
            nome=nome,
            email=email,
            papel=papel,
            status=StatusUsuario.ATIVO,
            cpf=cpf,
            whatsapp=somente_digitos(dados.get('whatsapp')) or None,
            avatar_url=dados.get('avatar_url'),
            gerente_id=gerente_id,
            nome_otica=dados.get('nome_otica'),
            cnpj_otica=cnpj_otica,
            nivel=dados.get('nivel'),
        ), senha)

        logger.info("Usuário %s (%s) cadastrado%s", usuario.id, papel, f" por {ator.id}" if ator else "")
        return usuario


class AutenticarUsuarioUseCase:
    def __init__(self, usuario_repo: IUsuarioRepository):
        self.usuario_repo = usuario_repo

    def executar(self, email: str, senha: str) -> Usuario:
        usuario = self.usuario_repo.buscar_por_email(normalizar_email(email))
        if not usuario or not self.usuario_repo.verificar_senha(usuario.id, senha or ''):
            logger.warning("Tentativa de login inválida para %s", normalizar_email(email))
            raise CredenciaisInvalidasError()
        if not usuario.esta_ativo:
            raise UsuarioBloqueadoError()
        return usuario


class AlterarSenhaUseCase:
    def __init__(self, usuario_repo: IUsuarioRepository):
        self.usuario_repo = usuario_repo

    def executar(self, ator: Usuario, senha_atual: str, nova_senha: str) -> None:
        if not self.usuario_repo.verificar_senha(ator.id, senha_atual or ''):
            raise DadosInvalidosError("Senha atual incorreta")
        self.usuario_repo.definir_senha(ator.id, _validar_senha(nova_senha))
        logger.info("Senha do usuário %s alterada", ator.id)


class GerenciarUsuariosUseCase:
    """Consulta e administração de usuários respeitando a hierarquia gerente/vendedor."""
    def __init__(self, usuario_repo: IUsuarioRepository, registrar_atividade: RegistrarAtividadeUseCase):
        self.usuario_repo = usuario_repo
        self.registrar_atividade = registrar_atividade

    def listar(self, ator: Usuario, filtros: Optional[Dict[str, Any]] = None, pagina=1, limite=20) -> Pagina:
        pagina, limite = normalizar_paginacao(pagina, limite)
        if ator.eh_vendedor:
            return Pagina(itens=[], total=0, pagina=pagina, limite=limite)

        filtros = {k: v for k, v in (filtros or {}).items() if v not in (None, '')}
        if filtros.get('papel') and filtros['papel'] not in PapelUsuario.TODOS:
            raise DadosInvalidosError(f"Papel inválido: {filtros['papel']}.")
        if filtros.get('status') and filtros['status'] not in StatusUsuario.TODOS:
            raise StatusInvalidoError(f"Status de usuário inválido: {filtros['status']}.")
        if ator.eh_gerente:
            filtros['gerente_id'] = ator.id
        if filtros.get('cpf'):
            filtros['cpf'] = somente_digitos(filtros['cpf'])
        return self.usuario_repo.listar(filtros, pagina, limite)

    def obter(self, ator: Usuario, usuario_id: str) -> Usuario:
        usuario = self.usuario_repo.buscar_por_id(usuario_id)
        if not usuario:
            raise UsuarioNaoEncontradoError()
        if not pode_ver_usuario(ator, usuario):
            raise AcessoNegadoError()
        return usuario

    def atualizar(self, ator: Usuario, usuario_id: str, dados: Dict[str, Any]) -> Usuario:
        usuario = self.obter(ator, usuario_id)

        if ator.eh_admin:
            permitidos = CAMPOS_ADMIN
        elif str(ator.id) == str(usuario.id):
            permitidos = CAMPOS_PERFIL
        else:
            raise AcessoNegadoError()

        alteracoes = {k: v for k, v in dados.items() if k in permitidos}
        if not alteracoes:
            raise DadosInvalidosError("Nenhuma alteração permitida.")

        if 'gerente_id' in alteracoes:
            # Campo vazio vindo do formulário remove o gerente
            alteracoes['gerente_id'] = alteracoes['gerente_id'] or None
        if alteracoes.get('gerente_id') and str(alteracoes['gerente_id']) == str(usuario.id):
            raise DadosInvalidosError("Um usuário não pode ser seu próprio gerente.")

        if 'nome' in alteracoes:
            alteracoes['nome'] = (alteracoes['nome'] or '').strip()
            if not alteracoes['nome']:
                raise DadosInvalidosError("O nome é obrigatório.")
        if 'email' in alteracoes:
            alteracoes['email'] = _normalizar_email_unico(self.usuario_repo, alteracoes['email'], usuario.id)
        if 'cpf' in alteracoes:
            alteracoes['cpf'] = _normalizar_cpf_unico(self.usuario_repo, alteracoes['cpf'], usuario.id)
        if 'cnpj_otica' in alteracoes:
            alteracoes['cnpj_otica'] = _normalizar_cnpj(alteracoes['cnpj_otica'])
        if 'whatsapp' in alteracoes:
            alteracoes['whatsapp'] = somente_digitos(alteracoes['whatsapp']) or None
        if 'status' in alteracoes and alteracoes['status'] not in StatusUsuario.TODOS:
            raise StatusInvalidoError(f"Status de usuário inválido: {alteracoes['status']}.")

        if 'papel' in alteracoes or 'gerente_id' in alteracoes:
            papel = alteracoes.get('papel', usuario.papel)
            gerente_id = alteracoes['gerente_id'] if 'gerente_id' in alteracoes else usuario.gerente_id
            if papel != PapelUsuario.VENDEDOR and 'gerente_id' not in alteracoes:
                gerente_id = None
                alteracoes['gerente_id'] = None
            if usuario.eh_gerente and papel != PapelUsuario.GERENTE and self.usuario_repo.ids_da_equipe(usuario.id):
                raise OperacaoNaoPermitidaError("Não é possível alterar o papel de gerente que possui vendedores associados")
            validar_hierarquia(self.usuario_repo, papel, gerente_id or None)

        for campo, valor in alteracoes.items():
            setattr(usuario, campo, valor)
        usuario = self.usuario_repo.salvar(usuario)
        logger.info("Usuário %s atualizado por %s: %s", usuario.id, ator.id, sorted(alteracoes))
        return usuario

    def definir_status(self, ator: Usuario, usuario_id: str, status: str) -> Usuario:
        exigir_admin(ator, "Apenas administradores podem alterar o status de um usuário.")
        if status not in StatusUsuario.TODOS:
            raise StatusInvalidoError(f"Status de usuário inválido: {status}.")
        usuario = self.usuario_repo.buscar_por_id(usuario_id)
        if not usuario:
            raise UsuarioNaoEncontradoError()
        if str(usuario.id) == str(ator.id) and status == StatusUsuario.BLOQUEADO:
            raise OperacaoNaoPermitidaError("Você não pode bloquear a si mesmo.")

        usuario.status = status
        usuario = self.usuario_repo.salvar(usuario)

        if status == StatusUsuario.BLOQUEADO:
            self.registrar_atividade.executar(
                usuario_id=ator.id,
                tipo=TipoAtividade.ADMIN_USER_BLOCKED,
                descricao=f"Usuário {usuario.nome} foi bloqueado.",
                metadados={'usuario_bloqueado_id': str(usuario.id)},
            )
        logger.info("Status do usuário %s alterado para %s por %s", usuario.id, status, ator.id)
        return usuario

    def excluir(self, ator: Usuario, usuario_id: str) -> None:
        exigir_admin(ator)
        usuario = self.usuario_repo.buscar_por_id(usuario_id)
        if not usuario:
            raise UsuarioNaoEncontradoError()
        if str(usuario.id) == str(ator.id):
            raise OperacaoNaoPermitidaError("Você não pode excluir a si mesmo.")
        if usuario.eh_gerente and self.usuario_repo.listar_vendedores(usuario.id, incluir_bloqueados=True):
            raise OperacaoNaoPermitidaError("Não é possível excluir gerente que possui vendedores associados")
        self.usuario_repo.excluir(usuario.id)
        logger.info("Usuário %s excluído por %s", usuario_id, ator.id)

    def vendedores_do_gerente(self, ator: Usuario, gerente_id: Optional[str] = None) -> List[Usuario]:
        gerente_id = gerente_id or ator.id
        if not ator.eh_admin and not (ator.eh_gerente and str(gerente_id) == str(ator.id)):
            raise AcessoNegadoError()
        gerente = self.usuario_repo.buscar_por_id(gerente_id)
        if not gerente or not gerente.eh_gerente:
            raise UsuarioNaoEncontradoError("Gerente não encontrado")
        return self.usuario_repo.listar_vendedores(gerente.id, incluir_bloqueados=ator.eh_admin)

    def estatisticas(self, ator: Usuario) -> Dict[str, Any]:
        exigir_admin(ator)
        contagem = self.usuario_repo.contar_por_papel_e_status()

        por_papel = {papel: sum(contagem.get(papel, {}).values()) for papel in PapelUsuario.TODOS}
        por_status = {
            status: sum(contagem.get(papel, {}).get(status, 0) for papel in PapelUsuario.TODOS)
            for status in StatusUsuario.TODOS
        }
        return {'total': sum(por_papel.values()), 'por_papel': por_papel, 'por_status': por_status}
